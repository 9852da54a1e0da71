"""TreeSheets document toolkit.

Sheet/Cell tree model, canonical JSON encoding, strict decoding and a lenient
structural validator.
"""

__all__ = [
    "Sheet",
    "Cell",
    "CellType",
    "Color",
    "GridLayout",
    "StyleBits",
    "Visit",
    "parse_text",
    "parse_obj",
    "serialize",
    "validate_sheet_json",
    "load_sheet",
    "save_sheet",
    "format_sheet",
]

__version__ = "0.1.0"

from .model import Cell, CellType, Color, GridLayout, Sheet, StyleBits, Visit  # noqa: E402
from .parse import parse_obj, parse_text  # noqa: E402
from .serialize import serialize  # noqa: E402
from .validate import validate_sheet_json  # noqa: E402
from .io import load_sheet, save_sheet  # noqa: E402
from .fmt import format_sheet  # noqa: E402
