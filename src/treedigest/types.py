"""Data types shared by the walker and renderers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Node:
    """
    One filesystem entry in the ingested tree.

    `size` is the file size, or a directory's own metadata size (not recursive).
    `children` is set only for directories; `content` only for files whose
    leading bytes looked textual.
    """

    name: str
    path: str
    size: int
    is_dir: bool = False
    children: list[Node] | None = None
    content: str | None = None


@dataclass
class RunStats:
    """Counters threaded through a single traversal."""

    total_files: int = 0
    total_size: int = 0


@dataclass(frozen=True)
class IngestResult:
    summary: str
    structure: str
    content: str

    @property
    def digest(self) -> str:
        """The full digest text: summary, structure and content."""
        return f"{self.summary}\n\n{self.structure}\n\n{self.content}"


@dataclass(frozen=True)
class NotebookCell:
    cell_type: str
    source: str


@dataclass
class RepositoryInfo:
    path: str
    is_git: bool
    remote_url: str | None = None
    current_branch: str | None = None
