from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Tuple


@dataclass
class ValidationIssue:
    where: str  # e.g. "root.children[0].text"
    message: str


def _cell_issues(value: Any, where: str) -> Tuple[List[ValidationIssue], List[Tuple[Any, str]]]:
    """Check one cell's own shape; return its issues and the children to check next."""
    if not isinstance(value, dict):
        return [ValidationIssue(where, "cell must be an object")], []
    issues: List[ValidationIssue] = []
    if "text" not in value:
        issues.append(ValidationIssue(where, "cell is missing 'text'"))
    elif not isinstance(value["text"], str):
        issues.append(ValidationIssue(f"{where}.text", "'text' must be a string"))
    if "children" not in value:
        return issues, []
    children = value["children"]
    if not isinstance(children, list):
        issues.append(ValidationIssue(f"{where}.children", "'children' must be an array"))
        return issues, []
    return issues, [(c, f"{where}.children[{i}]") for i, c in enumerate(children)]


def sheet_json_issues(value: Any) -> List[ValidationIssue]:
    """Lenient structural check of an untyped, already-parsed sheet document.

    Only title/root/text/children are inspected. Extra keys, style, colour and
    tag fields are left to the strict decoder.
    """
    if not isinstance(value, dict):
        return [ValidationIssue("", "sheet must be an object")]

    issues: List[ValidationIssue] = []
    if "title" not in value:
        issues.append(ValidationIssue("", "sheet is missing 'title'"))
    elif not isinstance(value["title"], str):
        issues.append(ValidationIssue("title", "'title' must be a string"))

    if "root" not in value:
        issues.append(ValidationIssue("", "sheet is missing 'root'"))
        return issues

    stack: List[Tuple[Any, str]] = [(value["root"], "root")]
    while stack:
        node, where = stack.pop()
        found, children = _cell_issues(node, where)
        issues.extend(found)
        stack.extend(reversed(children))
    return issues


def validate_sheet_json(value: Any) -> bool:
    return not sheet_json_issues(value)
