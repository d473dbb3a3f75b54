"""
Error taxonomy for ingestion.

Errors split into two branches. `RunAbortedError` subclasses unwind the whole
traversal and surface to the caller. `EntrySkippedError` subclasses only cost
the walker the entry being processed: they are logged and traversal continues.
"""

from __future__ import annotations

from pathlib import Path


class DigestError(Exception):
    """Base class for all ingestion errors."""


class RunAbortedError(DigestError):
    """An error that aborts the whole ingestion run."""


class EntrySkippedError(DigestError):
    """An error confined to a single directory entry."""


class EmptyRepositoryPathError(RunAbortedError):
    def __init__(self) -> None:
        super().__init__("Repository path cannot be empty")


class InvalidPatternError(RunAbortedError):
    """
    A pattern contains characters outside the allowed set: alphanumerics,
    dash (-), underscore (_), dot (.), forward slash (/), plus (+) and
    asterisk (*).
    """

    def __init__(self, pattern: str) -> None:
        self.pattern: str = pattern
        super().__init__(
            f"Pattern '{pattern}' contains invalid characters. Only alphanumeric characters, "
            "dash (-), underscore (_), dot (.), forward slash (/), plus (+), and asterisk (*) "
            "are allowed."
        )


class MaxFilesReachedError(RunAbortedError):
    def __init__(self, max_files: int) -> None:
        self.max_files: int = max_files
        super().__init__(f"Maximum number of files ({max_files}) reached.")


class MaxFileSizeReachedError(RunAbortedError):
    def __init__(self, max_size: int) -> None:
        self.max_size: int = max_size
        super().__init__(f"Maximum file size limit ({max_size / 1024 / 1024:.1f}MB) reached.")


class InvalidNotebookError(RunAbortedError):
    """A Jupyter notebook is malformed or has no usable `cells` list."""


class NoFilesFoundError(RunAbortedError):
    def __init__(self, repository: str | Path) -> None:
        super().__init__(f"No files found in repository: {repository}")


class RepositoryNotFoundError(RunAbortedError):
    def __init__(self, repository: str | Path) -> None:
        super().__init__(f"Repository path does not exist: {repository}")


class RepositoryTooLargeError(RunAbortedError):
    def __init__(self, total_size: int, max_size: int) -> None:
        self.total_size: int = total_size
        self.max_size: int = max_size
        super().__init__(
            f"Repository size ({total_size / 1024 / 1024:.1f}MB) exceeds maximum allowed size "
            f"({max_size / 1024 / 1024:.1f}MB)"
        )


class CloneError(RunAbortedError):
    """Cloning a remote repository failed or timed out."""


class AlreadyVisitedError(EntrySkippedError):
    def __init__(self, path: str | Path) -> None:
        self.path: str = str(path)
        super().__init__(f"Symlink target already visited: {path}")
