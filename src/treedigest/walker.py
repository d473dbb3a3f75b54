"""
Directory traversal: builds the `Node` tree for an ingestion run.

The walk is depth-first and sequential. Each candidate entry goes through the
depth, exclude, gitignore and include checks before it is dispatched as a
symlink, directory or regular file. File-count and file-size limit errors abort
the run; any other per-entry failure is logged and the entry is skipped.
"""

from __future__ import annotations

import locale
import logging
import os
from collections.abc import Sequence

import pathspec

from treedigest.exceptions import (
    AlreadyVisitedError,
    InvalidNotebookError,
    MaxFileSizeReachedError,
    MaxFilesReachedError,
    RunAbortedError,
)
from treedigest.gitignore import load_gitignore
from treedigest.notebook import process_notebook
from treedigest.patterns import matches_any
from treedigest.query import Query
from treedigest.types import Node, RunStats

log = logging.getLogger(__name__)

# Number of leading bytes inspected by the binary heuristic.
_BINARY_PROBE_SIZE = 1024

_NOTEBOOK_SUFFIX = ".ipynb"

# (directory, compiled .gitignore) pairs from the root down to the current directory.
_IgnoreChain = Sequence[tuple[str, pathspec.PathSpec]]


def _sort_key(node: Node) -> tuple[bool, bool, bool, str, str]:
    return (
        node.name.lower() != "readme.md",
        node.is_dir,
        node.name.startswith("."),
        locale.strxfrm(node.name),
        node.name,
    )


def sort_children(children: list[Node]) -> list[Node]:
    """
    Order directory children for rendering: `readme.md` (any case) first, then
    files before directories, non-dot names before dot names, then by name.
    """
    return sorted(children, key=_sort_key)


def is_text_file(path: str) -> bool:
    """Check the leading bytes for a null byte. Empty files count as text."""
    try:
        with open(path, "rb") as f:
            chunk = f.read(_BINARY_PROBE_SIZE)
    except OSError:
        return False
    return b"\x00" not in chunk


def read_file_content(path: str) -> str:
    """
    Read a text file's content. Notebooks go through the notebook extractor and
    raise `InvalidNotebookError` on failure; other read failures are returned
    inline as the content.
    """
    if path.endswith(_NOTEBOOK_SUFFIX):
        try:
            return process_notebook(path)
        except (InvalidNotebookError, OSError, UnicodeDecodeError) as e:
            raise InvalidNotebookError(f"Error processing notebook {path}: {e}") from e
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        return f"Error reading file: {e}"


def resolve_symlink(path: str, root: str) -> str | None:
    """
    Resolve a symlink to its canonical target. Returns `None` if the link is
    broken or its target lies outside the canonical `root`.
    """
    try:
        target = os.path.realpath(path, strict=True)
        root_real = os.path.realpath(root, strict=True)
    except OSError:
        return None
    if not target.startswith(root_real):
        return None
    return target


class TreeWalker:
    """
    Walks one ingestion root. Holds the run's `RunStats` and the set of symlink
    targets already traversed; create a new walker for every run.
    """

    def __init__(self, query: Query) -> None:
        self._query: Query = query
        self._root: str = os.path.normpath(query.repository)
        self._root_real: str = os.path.realpath(query.repository)
        self._visited: set[str] = set()
        self.stats: RunStats = RunStats()

    def walk(self) -> Node | None:
        """Build the tree for the root directory, or `None` if it can't be listed."""
        node = self._scan_directory(self._root, 0, ())
        if node is not None:
            node.name = os.path.basename(os.path.abspath(self._root)) or node.path
        return node

    def _relative(self, path: str) -> str:
        for base in (self._root, self._root_real):
            if path.startswith(base.rstrip(os.sep) + os.sep):
                return os.path.relpath(path, base).replace(os.sep, "/")
        return os.path.relpath(path, self._root).replace(os.sep, "/")

    def _is_selected(self, path: str, is_dir: bool, ignores: _IgnoreChain) -> bool:
        rel_path = self._relative(path)
        if matches_any(rel_path, self._query.exclude_patterns):
            return False
        for base, spec in ignores:
            rel_to_base = os.path.relpath(path, base).replace(os.sep, "/")
            if spec.match_file(rel_to_base + "/" if is_dir else rel_to_base):
                return False
        if self._query.include_patterns and not matches_any(
            rel_path, self._query.include_patterns
        ):
            return False
        return True

    def _scan_directory(self, path: str, depth: int, ignores: _IgnoreChain) -> Node | None:
        if depth > self._query.max_directory_depth:
            return None

        try:
            size = os.stat(path).st_size
            with os.scandir(path) as it:
                entries = list(it)
        except OSError as e:
            log.warning("Error reading directory %s: %s", path, e)
            return None

        if self._query.respect_gitignore:
            spec = load_gitignore(path)
            if spec is not None:
                ignores = (*ignores, (path, spec))

        node = Node(name=os.path.basename(path), path=path, size=size, is_dir=True, children=[])
        children: list[Node] = []
        for entry in entries:
            try:
                if not self._is_selected(entry.path, entry.is_dir(follow_symlinks=False), ignores):
                    continue
                child = self._process_entry(entry, depth, ignores)
            except RunAbortedError:
                raise
            except Exception as e:
                log.warning("Error processing %s: %s", entry.path, e)
                continue
            if child is not None:
                children.append(child)

        node.children = sort_children(children)
        return node

    def _process_entry(
        self, entry: os.DirEntry[str], depth: int, ignores: _IgnoreChain
    ) -> Node | None:
        if entry.is_symlink():
            return self._process_symlink(entry.path, depth, ignores)
        if entry.is_dir(follow_symlinks=False):
            return self._scan_directory(entry.path, depth + 1, ignores)
        if entry.is_file(follow_symlinks=False):
            return self._process_file(entry.path)
        log.debug("Skipping special file: %s", entry.path)
        return None

    def _process_symlink(self, path: str, depth: int, ignores: _IgnoreChain) -> Node | None:
        target = resolve_symlink(path, self._root)
        if target is None:
            log.debug("Skipping unsafe symlink: %s", path)
            return None
        if target in self._visited:
            raise AlreadyVisitedError(target)
        self._visited.add(target)

        if os.path.isdir(target):
            return self._scan_directory(target, depth + 1, ignores)
        return self._process_file(target)

    def _process_file(self, path: str) -> Node:
        size = os.stat(path).st_size
        if self.stats.total_files >= self._query.max_files:
            raise MaxFilesReachedError(self._query.max_files)
        if size > self._query.max_file_size:
            raise MaxFileSizeReachedError(self._query.max_file_size)

        self.stats.total_files += 1
        self.stats.total_size += size

        node = Node(name=os.path.basename(path), path=path, size=size)
        if is_text_file(path):
            node.content = read_file_content(path)
        return node
