from __future__ import annotations

import sys
from typing import List, TextIO

from .model import Sheet
from .parse import parse_text
from .serialize import serialize


def format_sheet(sheet: Sheet, *, indent: str = "  ", respect_folds: bool = False) -> str:
    """Render a sheet as an indented outline.

    First line is ``# <title>``, then one ``- <text>`` line per cell in
    depth-first order, indented ``indent * depth``. With ``respect_folds``
    the children of folded cells are left out, as a display would.
    """
    lines: List[str] = [f"# {sheet.title}"]
    stack = [(sheet.root, 0)]
    while stack:
        cell, depth = stack.pop()
        lines.append(f"{indent * depth}- {cell.text}")
        if respect_folds and cell.folded:
            continue
        for child in reversed(cell.children):
            stack.append((child, depth + 1))
    return "\n".join(lines) + "\n"


def print_sheet(sheet: Sheet, *, out: TextIO | None = None, **kwargs) -> None:
    (out or sys.stdout).write(format_sheet(sheet, **kwargs))


def format_text(text: str, indent: int | None = 2) -> str:
    """Canonicalise a sheet document: strict decode, then canonical encode."""
    return serialize(parse_text(text), indent=indent)
