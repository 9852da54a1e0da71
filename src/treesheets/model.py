from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, ClassVar, Iterator, List, Optional, Sequence, Tuple


class CellType(Enum):
    """Display/semantic tag of a cell. Tags only; nothing is evaluated."""

    DATA = "data"
    CODE = "code"
    VAR_ASSIGN = "varassign"
    VAR_READ = "varread"
    VIEW_HORIZONTAL = "viewhorizontal"
    VIEW_VERTICAL = "viewvertical"


class GridLayout(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class Visit(Enum):
    """Return value for read-only visitors. Returning None also continues."""

    CONTINUE = "continue"
    STOP = "stop"


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int
    a: int = 255

    WHITE: ClassVar["Color"]
    BLACK: ClassVar["Color"]
    DEFAULT_CELL: ClassVar["Color"]
    DEFAULT_TEXT: ClassVar["Color"]
    DEFAULT_BORDER: ClassVar["Color"]

    @classmethod
    def rgb(cls, r: int, g: int, b: int) -> "Color":
        return cls(r, g, b, 255)


Color.WHITE = Color(255, 255, 255, 255)
Color.BLACK = Color(0, 0, 0, 255)
Color.DEFAULT_CELL = Color.WHITE
Color.DEFAULT_TEXT = Color.BLACK
Color.DEFAULT_BORDER = Color.WHITE


@dataclass
class StyleBits:
    """Packed text style flags.

    The wire format stores the flags as one integer (``bits``); call sites go
    through the named predicates and setters instead.
    """

    bits: int = 0

    BOLD: ClassVar[int] = 1 << 0
    ITALIC: ClassVar[int] = 1 << 1
    FIXED: ClassVar[int] = 1 << 2
    UNDERLINE: ClassVar[int] = 1 << 3
    STRIKETHRU: ClassVar[int] = 1 << 4

    def has(self, flag: int) -> bool:
        return self.bits & flag != 0

    def set(self, flag: int, enabled: bool) -> None:
        if enabled:
            self.bits |= flag
        else:
            self.bits &= ~flag

    def is_empty(self) -> bool:
        return self.bits == 0

    def is_bold(self) -> bool:
        return self.has(self.BOLD)

    def is_italic(self) -> bool:
        return self.has(self.ITALIC)

    def is_fixed(self) -> bool:
        return self.has(self.FIXED)

    def is_underline(self) -> bool:
        return self.has(self.UNDERLINE)

    def is_strikethru(self) -> bool:
        return self.has(self.STRIKETHRU)

    def set_bold(self, enabled: bool) -> None:
        self.set(self.BOLD, enabled)

    def set_italic(self, enabled: bool) -> None:
        self.set(self.ITALIC, enabled)

    def set_fixed(self, enabled: bool) -> None:
        self.set(self.FIXED, enabled)

    def set_underline(self, enabled: bool) -> None:
        self.set(self.UNDERLINE, enabled)

    def set_strikethru(self, enabled: bool) -> None:
        self.set(self.STRIKETHRU, enabled)


Visitor = Callable[["Cell", int], Optional[Visit]]
MutVisitor = Callable[["Cell", int], object]


@dataclass
class Cell:
    """A single node of a sheet.

    children: owned child cells in display order.
    folded: hides children from rendering only; model-level traversal
    still visits them.
    image: optional base64 payload, omitted from the encoding when None.
    """

    text: str
    children: List["Cell"] = field(default_factory=list)
    cell_type: CellType = CellType.DATA
    style: StyleBits = field(default_factory=StyleBits)
    rel_size: int = 0
    cell_color: Color = Color.DEFAULT_CELL
    text_color: Color = Color.DEFAULT_TEXT
    folded: bool = False
    layout: GridLayout = GridLayout.VERTICAL
    image: Optional[str] = None
    border_color: Color = Color.DEFAULT_BORDER

    @classmethod
    def new(cls, text: str) -> "Cell":
        return cls(text)

    @classmethod
    def with_style(cls, text: str, style: StyleBits, color: Color) -> "Cell":
        cell = cls(text)
        cell.style = style
        cell.text_color = color
        return cell

    @classmethod
    def with_type(cls, text: str, cell_type: CellType) -> "Cell":
        cell = cls(text)
        cell.cell_type = cell_type
        return cell

    def add_child(self, child: "Cell") -> None:
        self.children.append(child)

    def is_leaf(self) -> bool:
        return not self.children

    def child_count(self) -> int:
        return len(self.children)

    def has_content(self) -> bool:
        return bool(self.text) or bool(self.children)

    def has_styling(self) -> bool:
        return (
            not self.style.is_empty()
            or self.rel_size != 0
            or self.cell_color != Color.DEFAULT_CELL
            or self.text_color != Color.DEFAULT_TEXT
        )

    def toggle_fold(self) -> None:
        self.folded = not self.folded

    def set_layout(self, layout: GridLayout) -> None:
        self.layout = layout

    def iter_cells(self, depth: int = 0) -> Iterator[Tuple["Cell", int]]:
        """Yield (cell, depth) pairs depth-first, parents before children."""
        stack: List[Tuple[Cell, int]] = [(self, depth)]
        while stack:
            cell, d = stack.pop()
            yield cell, d
            # reversed so the first child is popped next
            for child in reversed(cell.children):
                stack.append((child, d + 1))

    def iter_paths(self) -> Iterator[Tuple[Tuple[int, ...], "Cell"]]:
        """Yield (index path, cell) pairs in the same order as iter_cells."""
        stack: List[Tuple[Tuple[int, ...], Cell]] = [((), self)]
        while stack:
            path, cell = stack.pop()
            yield path, cell
            for i in range(len(cell.children) - 1, -1, -1):
                stack.append((path + (i,), cell.children[i]))

    def walk(self, visitor: Visitor, depth: int = 0) -> bool:
        """Pre-order traversal that stops as soon as the visitor returns Visit.STOP.

        Returns False when the walk was stopped early, True otherwise.
        """
        for cell, d in self.iter_cells(depth):
            if visitor(cell, d) is Visit.STOP:
                return False
        return True

    def walk_mut(self, visitor: MutVisitor, depth: int = 0) -> None:
        """Pre-order traversal over every cell; visitor results are ignored.

        Children are read after their parent has been visited, so a visitor may
        rewrite ``cell.children`` and the new children are walked.
        """
        for cell, d in self.iter_cells(depth):
            visitor(cell, d)

    def cell_at(self, path: Sequence[int]) -> Optional["Cell"]:
        current = self
        for index in path:
            if index < 0 or index >= len(current.children):
                return None
            current = current.children[index]
        return current


@dataclass
class Sheet:
    """A whole document: a title and the root cell owning the tree."""

    title: str
    root: Cell

    @classmethod
    def blank(cls, title: str = "New Sheet") -> "Sheet":
        return cls(title, Cell("Root"))

    @classmethod
    def sample(cls) -> "Sheet":
        """Fixed demonstration sheet used for demos and as a test fixture."""
        root = Cell("TreeSheets Rust Prototype")

        left = Cell("Personal")
        left.add_child(Cell("Tasks"))
        left.add_child(Cell("Notes"))

        right = Cell("Work")
        project = Cell("TreeSheets RS")
        project.add_child(Cell("Implement sheet data model"))
        project.add_child(Cell("Design CLI workflows"))
        right.add_child(project)
        right.add_child(Cell("Retrospective"))

        root.add_child(left)
        root.add_child(right)
        return cls("Sample Sheet", root)

    def iter_cells(self) -> Iterator[Tuple[Cell, int]]:
        return self.root.iter_cells(0)

    def iter_paths(self) -> Iterator[Tuple[Tuple[int, ...], Cell]]:
        return self.root.iter_paths()

    def for_each_cell(self, visitor: Visitor) -> bool:
        return self.root.walk(visitor, 0)

    def for_each_cell_mut(self, visitor: MutVisitor) -> None:
        self.root.walk_mut(visitor, 0)

    def cell_at(self, path: Sequence[int]) -> Optional[Cell]:
        return self.root.cell_at(path)
