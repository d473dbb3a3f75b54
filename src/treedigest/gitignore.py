"""Gitignore handling using pathspec."""

from __future__ import annotations

from pathlib import Path

import pathspec


def _read_ignore_file(path: Path) -> list[str] | None:
    """
    Read non-blank, non-comment lines from an ignore file. Returns `None` if the
    file is missing, unreadable, not UTF-8, or has no patterns.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    lines = [line for line in text.splitlines() if line.strip() and not line.strip().startswith("#")]
    return lines or None


def load_gitignore(directory: str | Path) -> pathspec.PathSpec | None:
    """
    Read `.gitignore` in the given directory and return a compiled `PathSpec`,
    or `None` if there is nothing to apply.
    """
    lines = _read_ignore_file(Path(directory) / ".gitignore")
    if lines is None:
        return None
    return pathspec.GitIgnoreSpec.from_lines(lines)
