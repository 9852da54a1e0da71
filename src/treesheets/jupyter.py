from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import nbformat

from .model import Cell, CellType, Sheet
from .parse import SheetFormatError, parse_cell
from .serialize import cell_attrs, serialize

logger = logging.getLogger(__name__)

_META_KEY = "treesheets"


def _source_text(jc: Dict) -> str:
    src = jc.get("source", "")
    if isinstance(src, list):
        return "".join(src)
    return str(src)


def _markdown_line(text: str, depth: int) -> str:
    if depth == 0:
        return f"# {text}"
    return "  " * (depth - 1) + f"- {text}"


def sheet_to_ipynb_dict(sheet: Sheet) -> Dict:
    """Flatten a sheet into a Jupyter nbformat v4 dict, one notebook cell per sheet cell.

    - Cells tagged ``code`` become Jupyter code cells; the rest become markdown
      (a heading for the root, nested bullets below it).
    - metadata["treesheets"] keeps the index path and every cell attribute, so
      ipynb_dict_to_sheet can rebuild the exact tree.
    """
    cells: List[Dict] = []
    for n, (path, cell) in enumerate(sheet.iter_paths()):
        attrs = cell_attrs(cell)
        meta = {_META_KEY: {"path": list(path), **attrs}}
        if cell.cell_type is CellType.CODE:
            cells.append(
                {
                    "cell_type": "code",
                    "id": f"ts-{n}",
                    "source": cell.text,
                    "outputs": [],
                    "execution_count": None,
                    "metadata": meta,
                }
            )
        else:
            cells.append(
                {
                    "cell_type": "markdown",
                    "id": f"ts-{n}",
                    "source": _markdown_line(cell.text, len(path)),
                    "metadata": meta,
                }
            )
    return {
        "nbformat": 4,
        "nbformat_minor": 5,
        "metadata": {_META_KEY: {"title": sheet.title}},
        "cells": cells,
    }


def _rebuild_tree(entries: List[Dict]) -> Cell:
    root: Optional[Cell] = None
    for i, meta in enumerate(entries):
        where = f"cells[{i}].metadata.{_META_KEY}"
        path = meta.get("path")
        if not isinstance(path, list) or not all(isinstance(p, int) for p in path):
            raise SheetFormatError("'path' must be an array of integers", where)
        attrs = {k: v for k, v in meta.items() if k != "path"}
        cell = parse_cell(attrs, where)
        if not path:
            if root is not None:
                raise SheetFormatError("more than one root cell", where)
            root = cell
            continue
        parent = root.cell_at(path[:-1]) if root is not None else None
        if parent is None or path[-1] != parent.child_count():
            raise SheetFormatError(f"path {path} is out of order", where)
        parent.add_child(cell)
    if root is None:
        raise SheetFormatError("no root cell")
    return root


def ipynb_dict_to_sheet(d: Dict, *, title: Optional[str] = None) -> Sheet:
    """Convert a Jupyter nbformat v4 dict to a Sheet.

    - Notebooks written by sheet_to_ipynb_dict are rebuilt from their metadata.
    - Any other notebook becomes a root cell holding one child per notebook
      cell: code cells keep the ``code`` tag, everything else is ``data``.
    """
    meta = d.get("metadata", {}) if isinstance(d, dict) else {}
    ts_meta = meta.get(_META_KEY, {}) if isinstance(meta, dict) else {}
    sheet_title = title or (ts_meta.get("title") if isinstance(ts_meta, dict) else None) or "Imported Notebook"

    cells_in: List[Any] = d.get("cells", []) if isinstance(d, dict) else []
    cells_in = [jc for jc in cells_in if isinstance(jc, dict)]
    entries = []
    for jc in cells_in:
        jmeta = jc.get("metadata", {})
        entries.append(jmeta.get(_META_KEY) if isinstance(jmeta, dict) else None)
    if entries and all(isinstance(e, dict) for e in entries):
        return Sheet(sheet_title, _rebuild_tree(entries))

    root = Cell(sheet_title)
    for jc in cells_in:
        text = _source_text(jc).rstrip("\n")
        if jc.get("cell_type") == "code":
            root.add_child(Cell.with_type(text, CellType.CODE))
        else:
            root.add_child(Cell(text))
    return Sheet(sheet_title, root)


def export_ipynb_text(sheet: Sheet) -> str:
    nbnode = nbformat.from_dict(sheet_to_ipynb_dict(sheet))
    s = nbformat.writes(nbnode, version=4)
    if not s.endswith("\n"):
        s += "\n"
    return s


def import_ipynb_text(text: str) -> Sheet:
    nbnode = nbformat.reads(text, as_version=4)
    return ipynb_dict_to_sheet(nbnode)


def export_sheet_to_ipynb(in_path: str, out_path: Optional[str] = None) -> None:
    from .io import load_sheet

    text = export_ipynb_text(load_sheet(in_path))
    if out_path:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(text)
        logger.info("Exported %s to %s", in_path, out_path)
    else:
        print(text, end="")


def import_ipynb_file(in_path: str, out_path: Optional[str] = None, indent: Optional[int] = 2) -> None:
    with open(in_path, "r", encoding="utf-8") as f:
        text = f.read()
    sheet = import_ipynb_text(text)
    if out_path:
        from .io import save_sheet

        save_sheet(out_path, sheet, indent=indent)
        logger.info("Imported %s into %s", in_path, out_path)
    else:
        print(serialize(sheet, indent=indent), end="")
