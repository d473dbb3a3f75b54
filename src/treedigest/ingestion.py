"""
Ingestion entry points: turn a local path or a remote repository URL into an
`IngestResult`.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from collections.abc import Iterable
from pathlib import Path

from treedigest.clone import CloneConfig, clone_repository
from treedigest.defaults import TMP_BASE_PATH
from treedigest.exceptions import (
    MaxFileSizeReachedError,
    NoFilesFoundError,
    RepositoryNotFoundError,
    RepositoryTooLargeError,
)
from treedigest.query import Query, parse_query
from treedigest.render import render_content, render_summary, render_tree
from treedigest.types import IngestResult, Node, RunStats
from treedigest.walker import TreeWalker, is_text_file, read_file_content

log = logging.getLogger(__name__)

_URL_PREFIXES = ("http://", "https://", "git://", "ssh://")


def is_remote_source(source: str) -> bool:
    return source.startswith(_URL_PREFIXES)


def ingest_directory(query: Query) -> IngestResult:
    """Walk the query's root directory and render the digest."""
    walker = TreeWalker(query)
    root = walker.walk()
    if root is None:
        raise NoFilesFoundError(query.repository)

    return IngestResult(
        summary=render_summary(query, walker.stats),
        structure=render_tree(root),
        content=render_content(root),
    )


def ingest_file(query: Query) -> IngestResult:
    """Render the digest for a query whose root is a single regular file."""
    path = query.repository
    size = os.stat(path).st_size
    if size > query.max_file_size:
        raise MaxFileSizeReachedError(query.max_file_size)

    stats = RunStats(total_files=1, total_size=size)
    node = Node(name=os.path.basename(path), path=path, size=size)
    if is_text_file(path):
        node.content = read_file_content(path)

    return IngestResult(
        summary=render_summary(query, stats),
        structure=render_tree(node),
        content=node.content or "",
    )


def directory_size(path: str | Path) -> int:
    """Total size of regular files under `path`, without following symlinks."""
    total = 0
    for dirpath, _dirnames, filenames in os.walk(path):
        for filename in filenames:
            try:
                st = os.lstat(os.path.join(dirpath, filename))
            except OSError:
                continue
            if stat.S_ISREG(st.st_mode):
                total += st.st_size
    return total


def ingest_local(
    path: str | Path,
    exclude_patterns: Iterable[str] | None = None,
    include_patterns: Iterable[str] | None = None,
    *,
    max_file_size: int | None = None,
    respect_gitignore: bool = False,
) -> IngestResult:
    """
    Ingest a local directory or file. The total size of the source is checked
    against the size limit before traversal starts.
    """
    query = parse_query(
        path,
        exclude_patterns,
        include_patterns,
        max_file_size=max_file_size,
        respect_gitignore=respect_gitignore,
    )
    if not os.path.exists(query.repository):
        raise RepositoryNotFoundError(query.repository)

    if os.path.isfile(query.repository):
        return ingest_file(query)

    total_size = directory_size(query.repository)
    if total_size > query.max_total_size_bytes:
        raise RepositoryTooLargeError(total_size, query.max_total_size_bytes)
    log.debug("Repository %s: %d bytes on disk", query.repository, total_size)

    return ingest_directory(query)


def ingest_remote(
    url: str,
    exclude_patterns: Iterable[str] | None = None,
    include_patterns: Iterable[str] | None = None,
    *,
    clone_config: CloneConfig | None = None,
    max_file_size: int | None = None,
    respect_gitignore: bool = False,
    tmp_base: Path = TMP_BASE_PATH,
) -> IngestResult:
    """
    Clone `url` into a temporary directory and ingest it. The temporary
    directory is removed whether or not ingestion succeeds.
    """
    tmp_base.mkdir(parents=True, exist_ok=True)
    tmp_dir = Path(tempfile.mkdtemp(dir=tmp_base))
    try:
        clone_path = clone_repository(url, tmp_dir / "repo", clone_config)
        return ingest_local(
            clone_path,
            exclude_patterns,
            include_patterns,
            max_file_size=max_file_size,
            respect_gitignore=respect_gitignore,
        )
    finally:
        try:
            shutil.rmtree(tmp_dir)
        except OSError as e:
            log.warning("Error cleaning up temporary directory %s: %s", tmp_dir, e)


def ingest(
    source: str,
    exclude_patterns: Iterable[str] | None = None,
    include_patterns: Iterable[str] | None = None,
    *,
    clone_config: CloneConfig | None = None,
    max_file_size: int | None = None,
    respect_gitignore: bool = False,
) -> IngestResult:
    """
    Ingest a local path or a remote repository URL (`http://`, `https://`,
    `git://` or `ssh://`) into a digest.
    """
    if is_remote_source(source):
        return ingest_remote(
            source,
            exclude_patterns,
            include_patterns,
            clone_config=clone_config,
            max_file_size=max_file_size,
            respect_gitignore=respect_gitignore,
        )
    return ingest_local(
        source,
        exclude_patterns,
        include_patterns,
        max_file_size=max_file_size,
        respect_gitignore=respect_gitignore,
    )
