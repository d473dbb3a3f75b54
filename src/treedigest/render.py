"""
Rendering of a completed tree into the three digest sections: summary, tree
structure and concatenated file contents. All functions here are pure.
"""

from __future__ import annotations

from treedigest.query import Query
from treedigest.types import Node, RunStats

_SEPARATOR = "=" * 80

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_size(num_bytes: float) -> str:
    """Human-readable size with one decimal, e.g. `12.3 KB`."""
    size = float(num_bytes)
    unit_index = 0
    while size >= 1024 and unit_index < len(_SIZE_UNITS) - 1:
        size /= 1024
        unit_index += 1
    return f"{size:.1f} {_SIZE_UNITS[unit_index]}"


def normalize_path(path: str) -> str:
    return path.replace("\\", "/")


def render_summary(query: Query, stats: RunStats) -> str:
    lines = [
        f"Repository: {query.repository}",
        f"Total files analyzed: {stats.total_files}",
        f"Total content size: {stats.total_size / 1024 / 1024:.2f} MB",
    ]
    if query.exclude_patterns:
        lines.append("\nIgnore patterns:")
        lines.extend(f"  {pattern}" for pattern in sorted(query.exclude_patterns))
    if query.include_patterns:
        lines.append("\nInclude patterns:")
        lines.extend(f"  {pattern}" for pattern in sorted(query.include_patterns))
    return "\n".join(lines)


def _tree_lines(node: Node, prefix: str, is_last: bool, lines: list[str]) -> None:
    lines.append(prefix + ("└── " if is_last else "├── ") + node.name)
    child_prefix = prefix + ("    " if is_last else "│   ")
    children = node.children or []
    for i, child in enumerate(children):
        _tree_lines(child, child_prefix, i == len(children) - 1, lines)


def render_tree(node: Node) -> str:
    """
    Box-drawing outline of the tree, one node per line. The root is always
    drawn as the last entry at its level.
    """
    lines: list[str] = []
    _tree_lines(node, "", True, lines)
    return "\n".join(lines)


def collect_content_files(node: Node) -> list[Node]:
    """File nodes with extracted content, in depth-first pre-order."""
    files: list[Node] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if not current.is_dir and current.content:
            files.append(current)
        if current.children:
            stack.extend(reversed(current.children))
    return files


def render_content(node: Node) -> str:
    blocks = [
        f"{_SEPARATOR}\n{normalize_path(file.path)}\n{_SEPARATOR}\n{file.content}\n"
        for file in collect_content_files(node)
    ]
    return "\n".join(blocks)
