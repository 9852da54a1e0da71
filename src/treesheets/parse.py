from __future__ import annotations

import json
from typing import Any, List, Tuple, Type, TypeVar

from .model import Cell, CellType, Color, GridLayout, Sheet, StyleBits

E = TypeVar("E", CellType, GridLayout)

_STYLE_LIMIT = 1 << 32


class SheetFormatError(ValueError):
    """Raised when a document does not decode into a Sheet.

    where: dotted location of the offending value, e.g. ``root.children[1].text``.
    """

    def __init__(self, message: str, where: str = ""):
        super().__init__(f"{where}: {message}" if where else message)
        self.where = where


def _is_int(value: Any) -> bool:
    # bool is an int subclass; JSON true/false are not numbers
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_enum(value: Any, enum_type: Type[E], where: str) -> E:
    if not isinstance(value, str):
        raise SheetFormatError(f"expected a string tag, got {type(value).__name__}", where)
    try:
        return enum_type(value)
    except ValueError:
        allowed = "|".join(m.value for m in enum_type)
        raise SheetFormatError(f"unknown tag {value!r} (expected {allowed})", where) from None


def _parse_color(value: Any, where: str) -> Color:
    if not isinstance(value, dict):
        raise SheetFormatError("expected an object with r, g, b, a", where)
    channels = []
    for key in ("r", "g", "b", "a"):
        if key not in value:
            raise SheetFormatError(f"missing colour channel {key!r}", where)
        v = value[key]
        if not _is_int(v) or not 0 <= v <= 255:
            raise SheetFormatError(f"channel {key!r} must be an integer in 0..255", where)
        channels.append(v)
    return Color(*channels)


def _parse_cell_fields(data: Any, where: str) -> Tuple[Cell, List[Any]]:
    """Decode every field of one cell except its children.

    Returns the cell and the raw children list, left for the caller to decode.
    """
    if not isinstance(data, dict):
        raise SheetFormatError("expected a cell object", where)
    if "text" not in data:
        raise SheetFormatError("missing required field 'text'", where)
    text = data["text"]
    if not isinstance(text, str):
        raise SheetFormatError("'text' must be a string", f"{where}.text")

    cell = Cell(text)

    raw_children = data.get("children", [])
    if not isinstance(raw_children, list):
        raise SheetFormatError("'children' must be an array", f"{where}.children")

    if "cell_type" in data:
        cell.cell_type = _parse_enum(data["cell_type"], CellType, f"{where}.cell_type")
    if "style" in data:
        style = data["style"]
        if not _is_int(style) or not 0 <= style < _STYLE_LIMIT:
            raise SheetFormatError("'style' must be an unsigned 32-bit integer", f"{where}.style")
        cell.style = StyleBits(style)
    if "rel_size" in data:
        rel_size = data["rel_size"]
        if not _is_int(rel_size):
            raise SheetFormatError("'rel_size' must be an integer", f"{where}.rel_size")
        cell.rel_size = rel_size
    for key in ("cell_color", "text_color", "border_color"):
        if key in data:
            setattr(cell, key, _parse_color(data[key], f"{where}.{key}"))
    if "folded" in data:
        folded = data["folded"]
        if not isinstance(folded, bool):
            raise SheetFormatError("'folded' must be a boolean", f"{where}.folded")
        cell.folded = folded
    if "layout" in data:
        cell.layout = _parse_enum(data["layout"], GridLayout, f"{where}.layout")
    image = data.get("image")
    if image is not None and not isinstance(image, str):
        raise SheetFormatError("'image' must be a string", f"{where}.image")
    cell.image = image
    return cell, raw_children


def parse_cell(data: Any, where: str = "root") -> Cell:
    root, raw_children = _parse_cell_fields(data, where)
    # Explicit stack instead of recursion so very deep documents still decode.
    pending: List[Tuple[Cell, List[Any], str]] = [(root, raw_children, where)]
    while pending:
        parent, raws, parent_where = pending.pop()
        for i, raw in enumerate(raws):
            child_where = f"{parent_where}.children[{i}]"
            child, grandchildren = _parse_cell_fields(raw, child_where)
            parent.children.append(child)
            if grandchildren:
                pending.append((child, grandchildren, child_where))
    return root


def parse_obj(data: Any) -> Sheet:
    """Decode an already-parsed JSON value into a Sheet, filling defaults."""
    if not isinstance(data, dict):
        raise SheetFormatError("expected a sheet object at top level")
    if "title" not in data:
        raise SheetFormatError("missing required field 'title'")
    title = data["title"]
    if not isinstance(title, str):
        raise SheetFormatError("'title' must be a string", "title")
    if "root" not in data:
        raise SheetFormatError("missing required field 'root'")
    return Sheet(title=title, root=parse_cell(data["root"], "root"))


def parse_text(text: str) -> Sheet:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SheetFormatError(f"invalid JSON: {exc}") from exc
    except RecursionError as exc:
        raise SheetFormatError("document is nested too deeply to parse") from exc
    return parse_obj(data)
