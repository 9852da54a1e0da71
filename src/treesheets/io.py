from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import Any, Union

from .model import Sheet
from .parse import SheetFormatError, parse_text
from .serialize import SheetEncodeError, serialize

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class SheetIoError(Exception):
    """Base class for load/save failures.

    path: the file involved.
    source: the low-level exception that caused the failure (also __cause__).
    """

    kind = "io"
    verb = "access"

    def __init__(self, path: PathLike, source: BaseException):
        self.path = Path(path)
        self.source = source
        super().__init__(f"failed to {self.verb} {self.path}: {source}")


class SheetReadError(SheetIoError):
    kind = "read"
    verb = "read sheet from"


class SheetParseError(SheetIoError):
    kind = "parse"
    verb = "parse sheet JSON from"


class SheetSerializeError(SheetIoError):
    kind = "serialize"
    verb = "serialize sheet to"


class SheetWriteError(SheetIoError):
    kind = "write"
    verb = "write sheet to"


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SheetReadError(path, exc) from exc


def read_sheet_json(path: PathLike) -> Any:
    """Read a file and parse it as plain JSON, without decoding into a Sheet."""
    p = Path(path)
    text = _read_text(p)
    try:
        return json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise SheetParseError(p, exc) from exc


def load_sheet(path: PathLike) -> Sheet:
    p = Path(path)
    logger.debug("Loading sheet from %s", p)
    text = _read_text(p)
    try:
        sheet = parse_text(text)
    except SheetFormatError as exc:
        raise SheetParseError(p, exc) from exc
    logger.info("Loaded sheet %r from %s", sheet.title, p)
    return sheet


def save_sheet(path: PathLike, sheet: Sheet, indent: int | None = 2) -> None:
    """Write the canonical encoding of ``sheet`` to ``path`` as one replacement.

    The text goes to a temporary file next to the target which is then moved
    over it, so the target is either the old file or the complete new one.
    """
    p = Path(path)
    try:
        text = serialize(sheet, indent=indent)
    except SheetEncodeError as exc:
        raise SheetSerializeError(p, exc) from exc
    write_sheet_text(p, text)
    logger.info("Saved sheet %r to %s", sheet.title, p)


def write_sheet_text(path: PathLike, text: str) -> None:
    """Replace ``path`` with ``text`` via a temporary file in the same directory.

    The target is either the old file or the complete new one; the temporary
    file never outlives a failed write.
    """
    p = Path(path)
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            suffix=".tmp",
            prefix=f".{p.name}.",
            dir=p.parent,
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            f.write(text)
        tmp_path.replace(p)
        tmp_path = None
    except (OSError, UnicodeEncodeError) as exc:
        raise SheetWriteError(p, exc) from exc
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
