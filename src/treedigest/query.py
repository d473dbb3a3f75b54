"""
Query building: validates user-supplied patterns and limits into an immutable
`Query` that drives one ingestion run.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from treedigest.defaults import (
    DEFAULT_EXCLUDES,
    MAX_DIRECTORY_DEPTH,
    MAX_FILE_SIZE,
    MAX_FILES,
    MAX_TOTAL_SIZE_BYTES,
)
from treedigest.exceptions import EmptyRepositoryPathError, InvalidPatternError
from treedigest.patterns import is_valid_pattern


@dataclass(frozen=True)
class Query:
    """
    Configuration for one ingestion run. Built once by `parse_query()` and never
    mutated during traversal.

    An empty `include_patterns` set means no include-based restriction.
    """

    repository: str
    exclude_patterns: frozenset[str] = field(default_factory=lambda: DEFAULT_EXCLUDES)
    include_patterns: frozenset[str] = field(default_factory=frozenset)
    max_files: int = MAX_FILES
    max_total_size_bytes: int = MAX_TOTAL_SIZE_BYTES
    max_directory_depth: int = MAX_DIRECTORY_DEPTH
    max_file_size: int = MAX_FILE_SIZE
    respect_gitignore: bool = False


def _validate_patterns(patterns: Iterable[str]) -> None:
    for pattern in patterns:
        if not is_valid_pattern(pattern):
            raise InvalidPatternError(pattern)


def parse_query(
    repository: str | Path | None,
    exclude_patterns: Iterable[str] | None = None,
    include_patterns: Iterable[str] | None = None,
    *,
    max_file_size: int | None = None,
    respect_gitignore: bool = False,
) -> Query:
    """
    Build a `Query` for `repository`.

    The default excludes are always part of the effective exclude set. Every
    supplied pattern is validated before any is used, so one bad pattern fails
    the whole call with `InvalidPatternError`.
    """
    if not repository:
        raise EmptyRepositoryPathError()

    excludes = list(exclude_patterns or [])
    includes = list(include_patterns or [])
    _validate_patterns(excludes)
    _validate_patterns(includes)

    if max_file_size is None:
        max_file_size = MAX_FILE_SIZE
    elif max_file_size <= 0:
        raise ValueError(f"Maximum file size must be positive: {max_file_size}")

    return Query(
        repository=str(repository),
        exclude_patterns=DEFAULT_EXCLUDES | frozenset(excludes),
        include_patterns=frozenset(includes),
        max_file_size=max_file_size,
        respect_gitignore=respect_gitignore,
    )
