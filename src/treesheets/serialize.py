from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple

from .model import Cell, Color, Sheet

_STYLE_LIMIT = 1 << 32


class SheetEncodeError(ValueError):
    """The in-memory sheet holds a value the canonical encoding cannot carry."""


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def color_to_dict(color: Color) -> Dict[str, int]:
    out = {"r": color.r, "g": color.g, "b": color.b, "a": color.a}
    for key, v in out.items():
        if not _is_int(v) or not 0 <= v <= 255:
            raise SheetEncodeError(f"colour channel {key!r} must be an integer in 0..255, got {v!r}")
    return out


def cell_attrs(cell: Cell) -> Dict[str, Any]:
    """Every encoded field of ``cell`` except ``children``, in canonical order."""
    bits = cell.style.bits
    if not _is_int(bits) or not 0 <= bits < _STYLE_LIMIT:
        raise SheetEncodeError(f"style bits must fit in an unsigned 32-bit integer, got {bits!r}")
    if not _is_int(cell.rel_size):
        raise SheetEncodeError(f"rel_size must be an integer, got {cell.rel_size!r}")
    out: Dict[str, Any] = {
        "text": cell.text,
        "cell_type": cell.cell_type.value,
        "style": bits,
        "rel_size": cell.rel_size,
        "cell_color": color_to_dict(cell.cell_color),
        "text_color": color_to_dict(cell.text_color),
        "folded": cell.folded,
        "layout": cell.layout.value,
    }
    if cell.image is not None:
        out["image"] = cell.image
    out["border_color"] = color_to_dict(cell.border_color)
    return out


def _cell_shell(cell: Cell) -> Dict[str, Any]:
    attrs = cell_attrs(cell)
    out: Dict[str, Any] = {"text": attrs.pop("text"), "children": []}
    out.update(attrs)
    return out


def cell_to_dict(cell: Cell) -> Dict[str, Any]:
    # Field order is the canonical one; only `image` is ever left out.
    root = _cell_shell(cell)
    stack: List[Tuple[Cell, Dict[str, Any]]] = [(cell, root)]
    while stack:
        current, out = stack.pop()
        for child in current.children:
            child_out = _cell_shell(child)
            out["children"].append(child_out)
            stack.append((child, child_out))
    return root


def sheet_to_dict(sheet: Sheet) -> Dict[str, Any]:
    return {"title": sheet.title, "root": cell_to_dict(sheet.root)}


def serialize(sheet: Sheet, indent: int | None = 2) -> str:
    try:
        data = sheet_to_dict(sheet)
        text = json.dumps(data, indent=indent, ensure_ascii=False, allow_nan=False)
        # lone surrogates survive dumps but cannot be written as UTF-8
        text.encode("utf-8")
    except SheetEncodeError:
        raise
    except (AttributeError, TypeError, ValueError, RecursionError) as exc:
        raise SheetEncodeError(f"Cannot encode sheet {sheet.title!r}: {exc}") from exc
    return text + "\n"
