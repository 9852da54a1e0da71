from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import ConfigError, Settings, load_settings
from .fmt import format_text, print_sheet
from .io import (
    SheetIoError,
    SheetParseError,
    SheetReadError,
    SheetSerializeError,
    load_sheet,
    read_sheet_json,
    save_sheet,
    write_sheet_text,
)
from .jupyter import export_sheet_to_ipynb, import_ipynb_file
from .logging_config import setup_logging
from .model import Sheet
from .parse import SheetFormatError
from .serialize import SheetEncodeError
from .validate import sheet_json_issues

logger = logging.getLogger(__name__)


def _cmd_print(path: Path, settings: Settings, respect_folds: bool) -> int:
    sheet = load_sheet(path)
    print_sheet(
        sheet,
        indent=settings.outline_indent,
        respect_folds=respect_folds or settings.respect_folds,
    )
    return 0


def _cmd_sample(path: Path, settings: Settings, force: bool) -> int:
    if path.exists() and not force:
        print(f"error: {path} already exists; pass --force to overwrite", file=sys.stderr)
        return 1
    save_sheet(path, Sheet.sample(), indent=settings.json_indent)
    print(f"Wrote sample sheet: {path}")
    return 0


def _cmd_validate(path: Path) -> int:
    value = read_sheet_json(path)
    issues = sheet_json_issues(value)
    for issue in issues:
        where = issue.where or "<document>"
        print(f"ERROR: {where}: {issue.message}")
    if issues:
        print(f"{path} does not match the sheet schema")
        return 1
    print(f"{path} is a valid sheet")
    return 0


def _cmd_fmt(path: Path, settings: Settings) -> int:
    try:
        original = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SheetReadError(path, exc) from exc
    try:
        text = format_text(original, indent=settings.json_indent)
    except SheetFormatError as exc:
        raise SheetParseError(path, exc) from exc
    except SheetEncodeError as exc:
        raise SheetSerializeError(path, exc) from exc
    if text == original:
        print(f"Unchanged: {path}")
        return 0
    write_sheet_text(path, text)
    print(f"Formatted: {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="treesheets", description="TreeSheets sheet tools")
    parser.add_argument("--config", help="YAML settings file (default: ./treesheets.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug information to stderr")
    parser.add_argument("--log-file", dest="log_file", help="Also write log records to this file")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_print = sub.add_parser("print", help="Print a sheet as an indented outline")
    p_print.add_argument("file")
    p_print.add_argument(
        "--respect-folds",
        dest="respect_folds",
        action="store_true",
        help="Hide the children of folded cells",
    )

    p_sample = sub.add_parser("sample", help="Write the bundled sample sheet")
    p_sample.add_argument("file", help="Output path for the sample JSON")
    p_sample.add_argument("-f", "--force", action="store_true", help="Overwrite an existing file")

    p_validate = sub.add_parser("validate", help="Check that a JSON file has the shape of a sheet")
    p_validate.add_argument("file")

    p_fmt = sub.add_parser("fmt", help="Rewrite a sheet file in canonical form")
    p_fmt.add_argument("file")

    p_export = sub.add_parser("export", help="Export a sheet to .ipynb")
    p_export.add_argument("file", help="Input sheet JSON file")
    p_export.add_argument("-o", "--output", help="Output .ipynb file (default: stdout)")

    p_import = sub.add_parser("import", help="Import .ipynb as a sheet")
    p_import.add_argument("file", help="Input .ipynb file")
    p_import.add_argument("-o", "--output", help="Output sheet JSON file (default: stdout)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    setup_logging("DEBUG" if args.verbose else settings.log_level, log_file=args.log_file)

    cmd = args.cmd
    path = Path(args.file)
    logger.debug("Running %s on %s", cmd, path)
    try:
        if cmd == "print":
            return _cmd_print(path, settings, args.respect_folds)
        if cmd == "sample":
            return _cmd_sample(path, settings, args.force)
        if cmd == "validate":
            return _cmd_validate(path)
        if cmd == "fmt":
            return _cmd_fmt(path, settings)
        if cmd == "export":
            export_sheet_to_ipynb(str(path), args.output)
            return 0
        if cmd == "import":
            import_ipynb_file(str(path), args.output, indent=settings.json_indent)
            return 0
    except SheetIoError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        # notebook files are read directly and may fail with nbformat/json errors
        print(f"error: {path}: {exc}", file=sys.stderr)
        return 1
    return 2


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
