"""Capture printed output and lay several outputs out as columns."""

from __future__ import annotations

import contextlib
import io
from typing import Callable, Iterable

_COLUMN_GAP = 4


def capture_output(func: Callable[[], object]) -> str:
    """Run ``func`` and return everything it printed to stdout."""
    buffer = io.StringIO()
    with contextlib.redirect_stdout(buffer):
        func()
    return buffer.getvalue()


def _split_lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def format_side_by_side(outputs: Iterable[str]) -> str:
    """Lay the given texts out as columns, one text per column."""
    blocks = [_split_lines(text) for text in outputs]
    if not blocks:
        return ""
    widths = [max((len(line) for line in block), default=0) + _COLUMN_GAP for block in blocks]
    height = max(len(block) for block in blocks)
    rows = []
    for row in range(height):
        cells = []
        for col, block in enumerate(blocks):
            cell = block[row] if row < len(block) else ""
            if col < len(blocks) - 1:
                cell = cell.ljust(widths[col])
            cells.append(cell)
        rows.append("".join(cells) + "\n")
    return "".join(rows)


def print_side_by_side(outputs: Iterable[str]) -> None:
    """Print the given texts as columns."""
    print(format_side_by_side(outputs), end="")