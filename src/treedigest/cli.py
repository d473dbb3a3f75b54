#!/usr/bin/env python3
"""
treedigest: Turn a directory or git repository into a single text digest

Common usage:
  treedigest .
  treedigest path/to/project -o project.txt
  treedigest https://github.com/user/repo -b main
  treedigest . -e '*.lock' -e 'docs/*' -o -

The digest holds a summary, a tree of the included files, and the
concatenated text of every file, ready to paste into an LLM prompt.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path

from strif import atomic_output_file

from treedigest.clone import CloneConfig, get_repository_info, is_git_repository
from treedigest.config import find_config_file, load_config, merge_cli_with_config
from treedigest.defaults import OUTPUT_FILE_NAME
from treedigest.exceptions import DigestError
from treedigest.ingestion import ingest, is_remote_source
from treedigest.render import format_size
from treedigest.types import IngestResult

log = logging.getLogger(__name__)

_SIZE_RE = re.compile(r"^(\d+)\s*(B|KB|MB|GB|TB)?$", re.IGNORECASE)

_SIZE_MULTIPLIERS = {
    "B": 1,
    "KB": 1024,
    "MB": 1024**2,
    "GB": 1024**3,
    "TB": 1024**4,
}

# Options that a config file may supply when not given on the command line.
_TRACKED_FLAGS = (
    "output",
    "max_size",
    "exclude_pattern",
    "include_pattern",
    "branch",
    "respect_gitignore",
)


@dataclass
class Options:
    """Command-line options for the treedigest tool."""

    source: str
    output: str | None
    max_size: str | None
    exclude_pattern: list[str] | None
    include_pattern: list[str] | None
    branch: str | None
    respect_gitignore: bool | None
    verbose: int
    version: bool


def parse_size(text: str) -> int:
    """
    Parse a size such as `10MB`, `512KB` or `2048` (bytes) into a byte count.
    Raises `ValueError` on anything else.
    """
    match = _SIZE_RE.match(text.strip())
    if not match:
        raise ValueError(f"Invalid size format: {text!r} (use a format like '10MB')")
    amount, unit = match.groups()
    return int(amount) * _SIZE_MULTIPLIERS[(unit or "B").upper()]


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns `(options, explicit_flags)`, where `explicit_flags` names the options
    the user actually passed, so config file values only fill in the rest.
    """
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        prog="treedigest",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "source",
        nargs="?",
        default=".",
        help="Source directory, file, or repository URL (default: %(default)s)",
    )
    # Tracked options default to None so we can tell what was passed explicitly.
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help=f"Output file path, or '-' for stdout (default: {OUTPUT_FILE_NAME})",
    )
    parser.add_argument(
        "-s",
        "--max-size",
        type=str,
        default=None,
        dest="max_size",
        metavar="SIZE",
        help="Maximum size of a single file, e.g. '10MB' (default: 10MB)",
    )
    parser.add_argument(
        "-e",
        "--exclude-pattern",
        action="append",
        default=None,
        dest="exclude_pattern",
        metavar="PATTERN",
        help="Glob pattern to exclude, matched against the relative path. Can be repeated",
    )
    parser.add_argument(
        "-i",
        "--include-pattern",
        action="append",
        default=None,
        dest="include_pattern",
        metavar="PATTERN",
        help="Glob pattern to include; if given, only matching paths are kept. Can be repeated",
    )
    parser.add_argument(
        "-b",
        "--branch",
        type=str,
        default=None,
        help="Branch to clone when the source is a repository URL",
    )
    parser.add_argument(
        "--respect-gitignore",
        action="store_true",
        default=None,
        dest="respect_gitignore",
        help="Also skip paths ignored by .gitignore files",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log more detail (repeat for debug output)",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    opts = parser.parse_args(args)

    options = Options(
        source=opts.source,
        output=opts.output,
        max_size=opts.max_size,
        exclude_pattern=opts.exclude_pattern,
        include_pattern=opts.include_pattern,
        branch=opts.branch,
        respect_gitignore=opts.respect_gitignore,
        verbose=opts.verbose,
        version=opts.version,
    )
    explicit_flags = {name for name in _TRACKED_FLAGS if getattr(options, name) is not None}
    return options, explicit_flags


def _setup_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _write_digest(result: IngestResult, output: str) -> None:
    """Write the digest to `output` atomically, or to stdout for `-`."""
    if output == "-":
        sys.stdout.write(result.digest)
        sys.stdout.write("\n")
        return
    with atomic_output_file(output, make_parents=True) as tmp_path:
        Path(tmp_path).write_text(result.digest, encoding="utf-8")


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the treedigest CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    options, explicit_flags = _parse_args(args)
    _setup_logging(options.verbose)

    if options.version:
        try:
            version = importlib.metadata.version("treedigest")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    config_path = find_config_file(Path.cwd())
    if config_path:
        log.info("Using config file: %s", config_path)
        merge_cli_with_config(options, load_config(config_path), explicit_flags)

    output = options.output or OUTPUT_FILE_NAME

    if (
        log.isEnabledFor(logging.INFO)
        and not is_remote_source(options.source)
        and is_git_repository(options.source)
    ):
        info = get_repository_info(options.source)
        log.info("Git repository: branch=%s remote=%s", info.current_branch, info.remote_url)

    try:
        max_file_size = parse_size(str(options.max_size)) if options.max_size else None
        result = ingest(
            options.source,
            options.exclude_pattern,
            options.include_pattern,
            clone_config=CloneConfig(branch=options.branch),
            max_file_size=max_file_size,
            respect_gitignore=bool(options.respect_gitignore),
        )
        _write_digest(result, output)
    except (DigestError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        # Catch other potential file or processing errors.
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if output != "-":
        size = Path(output).stat().st_size
        print(f"Analysis complete! Output written to: {output} ({format_size(size)})")
        print("\nSummary:")
        print(result.summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
