"""Text extraction from Jupyter notebooks."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, cast

from treedigest.exceptions import InvalidNotebookError
from treedigest.types import NotebookCell

_TEXT_CELL_TYPES = ("code", "markdown")


def parse_notebook(path: str | Path) -> list[NotebookCell]:
    """
    Read the cells of a notebook, in order. Cell sources given as a list of
    lines are joined. Raises `InvalidNotebookError` on malformed JSON or a
    missing or non-list `cells` field.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidNotebookError("Invalid JSON in notebook file") from e

    cells = data.get("cells") if isinstance(data, dict) else None
    if not isinstance(cells, list):
        raise InvalidNotebookError("Invalid notebook format: missing or invalid cells array")

    result: list[NotebookCell] = []
    for raw_cell in cast(list[Any], cells):
        if not isinstance(raw_cell, dict):
            continue
        cell = cast(dict[str, Any], raw_cell)
        source = cell.get("source", "")
        if isinstance(source, list):
            source = "".join(str(line) for line in cast(list[Any], source))
        elif not isinstance(source, str):
            continue
        result.append(NotebookCell(cell_type=str(cell.get("cell_type", "")), source=source))
    return result


def process_notebook(path: str | Path) -> str:
    """
    Render a notebook as text: each code or markdown cell becomes a block
    prefixed with its `[cell_type]` tag. Whitespace-only cells and other cell
    types are dropped.
    """
    blocks: list[str] = []
    for cell in parse_notebook(path):
        if cell.cell_type not in _TEXT_CELL_TYPES:
            continue
        text = cell.source.strip()
        if text:
            blocks.append(f"[{cell.cell_type}]\n{text}")
    return "\n\n".join(blocks)
