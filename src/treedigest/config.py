"""
TOML-based config file loading for treedigest.

Searches for `.treedigest.toml`, `treedigest.toml`, or `pyproject.toml
[tool.treedigest]` walking up from the current directory. Config values are
merged with CLI flags using three-way precedence: explicit CLI flags > config
file > built-in defaults.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]


@dataclass
class DigestConfig:
    """
    Parsed config from a TOML file. Fields are `None` when not set in the config,
    so the merge can tell "not configured" from "set to the default value".
    """

    exclude_pattern: list[str] | None = None
    include_pattern: list[str] | None = None
    output: str | None = None
    max_size: str | None = None
    branch: str | None = None
    respect_gitignore: bool | None = None


CONFIG_FILENAMES = (".treedigest.toml", "treedigest.toml", "pyproject.toml")

# `exclude-patterns` / `include-patterns` are accepted for the repeatable flags.
_KEY_ALIASES: dict[str, str] = {
    "exclude-patterns": "exclude_pattern",
    "include-patterns": "include_pattern",
}

_VALID_FIELDS = {f.name for f in fields(DigestConfig)}


def find_config_file(
    start_dir: Path, filenames: Sequence[str] = CONFIG_FILENAMES
) -> Path | None:
    """
    Return the first of `filenames` found in `start_dir` or its ancestors,
    nearest directory first. A `pyproject.toml` only counts if it has a
    `[tool.treedigest]` table.
    """
    for directory in (start_dir.resolve(), *start_dir.resolve().parents):
        for filename in filenames:
            candidate = directory / filename
            if not candidate.is_file():
                continue
            if candidate.name == "pyproject.toml" and not _pyproject_has_section(candidate):
                continue
            return candidate
    return None


def _pyproject_has_section(path: Path) -> bool:
    try:
        data = tomllib.loads(path.read_text())
        return "treedigest" in data.get("tool", {})
    except (tomllib.TOMLDecodeError, OSError):
        return False


def load_config(config_path: Path) -> DigestConfig:
    """
    Load a `DigestConfig` from a TOML file, extracting `[tool.treedigest]` from
    `pyproject.toml`. Kebab-case keys map to snake_case fields.
    """
    data = tomllib.loads(config_path.read_text())

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("treedigest", {})

    return _parse_config_data(data)


def _parse_config_data(data: dict[str, Any]) -> DigestConfig:
    # Tables like [filters] or [output] flatten into the top level
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            flat.update(cast(dict[str, Any], value))
        else:
            flat[key] = value

    mapped: dict[str, Any] = {}
    for key, value in flat.items():
        snake_key = _KEY_ALIASES.get(key, key.replace("-", "_"))
        if snake_key in _VALID_FIELDS:
            mapped[snake_key] = value

    return DigestConfig(**mapped)


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: DigestConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Apply config file settings to CLI options for every field the user did not
    set explicitly on the command line.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(DigestConfig):
        cfg_value = getattr(config, cfg_field.name)
        if cfg_value is None or cfg_field.name in explicit_flags:
            continue
        if hasattr(cli_opts, cfg_field.name):
            setattr(cli_opts, cfg_field.name, cfg_value)

    return cli_opts
