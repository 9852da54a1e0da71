import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from treesheets.model import Cell, CellType, Color, GridLayout, Sheet, StyleBits, Visit


SAMPLE_ORDER = [
    ("TreeSheets Rust Prototype", 0),
    ("Personal", 1),
    ("Tasks", 2),
    ("Notes", 2),
    ("Work", 1),
    ("TreeSheets RS", 2),
    ("Implement sheet data model", 3),
    ("Design CLI workflows", 3),
    ("Retrospective", 2),
]


class TestCell(unittest.TestCase):
    def test_new_cell_defaults(self):
        cell = Cell.new("hello")
        self.assertEqual(cell.text, "hello")
        self.assertEqual(cell.children, [])
        self.assertIs(cell.cell_type, CellType.DATA)
        self.assertEqual(cell.style.bits, 0)
        self.assertEqual(cell.rel_size, 0)
        self.assertEqual(cell.cell_color, Color.WHITE)
        self.assertEqual(cell.text_color, Color.BLACK)
        self.assertEqual(cell.border_color, Color.WHITE)
        self.assertFalse(cell.folded)
        self.assertIs(cell.layout, GridLayout.VERTICAL)
        self.assertIsNone(cell.image)
        self.assertTrue(cell.is_leaf())
        self.assertFalse(cell.has_styling())

    def test_add_child_and_queries(self):
        cell = Cell("root")
        cell.add_child(Cell("child-1"))
        second = Cell("child-2")
        second.add_child(Cell("leaf"))
        cell.add_child(second)

        self.assertFalse(cell.is_leaf())
        self.assertEqual(cell.child_count(), 2)
        self.assertEqual([c.text for c in cell.children], ["child-1", "child-2"])

    def test_has_content(self):
        self.assertFalse(Cell("").has_content())
        self.assertTrue(Cell("x").has_content())
        parent = Cell("")
        parent.add_child(Cell(""))
        self.assertTrue(parent.has_content())

    def test_has_styling(self):
        style = StyleBits()
        style.set_bold(True)
        style.set_italic(True)
        cell = Cell.with_style("Styled Text", style, Color.rgb(255, 0, 0))
        self.assertTrue(cell.style.is_bold())
        self.assertTrue(cell.style.is_italic())
        self.assertFalse(cell.style.is_fixed())
        self.assertEqual((cell.text_color.r, cell.text_color.g, cell.text_color.b), (255, 0, 0))
        self.assertTrue(cell.has_styling())

        sized = Cell("x")
        sized.rel_size = -2
        self.assertTrue(sized.has_styling())

        tinted = Cell("x")
        tinted.cell_color = Color(10, 20, 30, 255)
        self.assertTrue(tinted.has_styling())

        # border colour is not part of the styling check
        bordered = Cell("x")
        bordered.border_color = Color.BLACK
        self.assertFalse(bordered.has_styling())

    def test_with_type(self):
        self.assertIs(Cell.with_type("=SUM(A1:A10)", CellType.CODE).cell_type, CellType.CODE)
        self.assertIs(Cell.with_type("x = 42", CellType.VAR_ASSIGN).cell_type, CellType.VAR_ASSIGN)

    def test_toggle_fold(self):
        cell = Cell("Parent")
        cell.add_child(Cell("Child 1"))
        self.assertFalse(cell.folded)
        cell.toggle_fold()
        self.assertTrue(cell.folded)
        cell.toggle_fold()
        self.assertFalse(cell.folded)

    def test_set_layout(self):
        cell = Cell("Container")
        self.assertIs(cell.layout, GridLayout.VERTICAL)
        cell.set_layout(GridLayout.HORIZONTAL)
        self.assertIs(cell.layout, GridLayout.HORIZONTAL)


class TestStyleBits(unittest.TestCase):
    def test_flags_are_independent(self):
        style = StyleBits()
        self.assertFalse(style.is_bold())
        style.set_bold(True)
        style.set_italic(True)
        self.assertTrue(style.is_bold())
        self.assertTrue(style.is_italic())
        style.set_bold(False)
        self.assertFalse(style.is_bold())
        self.assertTrue(style.is_italic())
        self.assertEqual(style.bits, StyleBits.ITALIC)

    def test_all_flags_pack_into_one_integer(self):
        style = StyleBits()
        style.set_bold(True)
        style.set_italic(True)
        style.set_fixed(True)
        style.set_underline(True)
        style.set_strikethru(True)
        self.assertEqual(style.bits, 0b11111)
        style.set_fixed(False)
        self.assertEqual(style.bits, 0b11011)
        self.assertTrue(style.is_underline())
        self.assertTrue(style.is_strikethru())
        self.assertFalse(style.is_fixed())

    def test_clearing_unset_flag_is_noop(self):
        style = StyleBits(StyleBits.UNDERLINE)
        style.set_bold(False)
        self.assertEqual(style.bits, StyleBits.UNDERLINE)


class TestColor(unittest.TestCase):
    def test_constants(self):
        self.assertEqual(Color.WHITE, Color(255, 255, 255, 255))
        self.assertEqual(Color.BLACK, Color(0, 0, 0, 255))
        self.assertEqual(Color.DEFAULT_CELL, Color.WHITE)
        self.assertEqual(Color.DEFAULT_TEXT, Color.BLACK)
        self.assertEqual(Color.DEFAULT_BORDER, Color.WHITE)

    def test_rgb_is_opaque(self):
        self.assertEqual(Color.rgb(1, 2, 3).a, 255)


class TestTraversal(unittest.TestCase):
    def test_sample_preorder_with_depth(self):
        seen = []
        completed = Sheet.sample().for_each_cell(lambda c, d: seen.append((c.text, d)))
        self.assertTrue(completed)
        self.assertEqual(seen, SAMPLE_ORDER)

    def test_iter_cells_matches_walk(self):
        sheet = Sheet.sample()
        self.assertEqual([(c.text, d) for c, d in sheet.iter_cells()], SAMPLE_ORDER)

    def test_walk_starts_at_given_depth(self):
        cell = Cell("a")
        cell.add_child(Cell("b"))
        seen = []
        cell.walk(lambda c, d: seen.append(d), depth=3)
        self.assertEqual(seen, [3, 4])

    def test_early_termination_on_second_node(self):
        visited = []

        def visitor(cell, depth):
            visited.append(cell.text)
            if len(visited) == 2:
                return Visit.STOP
            return Visit.CONTINUE

        completed = Sheet.sample().for_each_cell(visitor)
        self.assertFalse(completed)
        self.assertEqual(visited, ["TreeSheets Rust Prototype", "Personal"])

    def test_early_termination_skips_deeper_levels(self):
        # stop inside a deep branch; no sibling of any ancestor is visited
        visited = []

        def visitor(cell, depth):
            visited.append(cell.text)
            if cell.text == "Implement sheet data model":
                return Visit.STOP
            return None

        Sheet.sample().for_each_cell(visitor)
        self.assertEqual(visited[-1], "Implement sheet data model")
        self.assertNotIn("Design CLI workflows", visited)
        self.assertNotIn("Retrospective", visited)
        self.assertEqual(len(visited), 7)

    def test_walk_mut_visits_everything(self):
        cell = Cell("root")
        cell.add_child(Cell("child1"))
        cell.add_child(Cell("child2"))

        def visitor(c, depth):
            c.rel_size = depth
            c.folded = depth > 0
            return Visit.STOP  # ignored by the mutable walk

        cell.walk_mut(visitor)
        self.assertEqual(cell.rel_size, 0)
        self.assertFalse(cell.folded)
        self.assertEqual([c.rel_size for c in cell.children], [1, 1])
        self.assertTrue(all(c.folded for c in cell.children))

    def test_walk_mut_sees_children_added_by_visitor(self):
        sheet = Sheet.blank()

        def visitor(c, depth):
            if depth < 2:
                c.add_child(Cell(f"level {depth + 1}"))

        sheet.for_each_cell_mut(visitor)
        self.assertEqual(
            [(c.text, d) for c, d in sheet.iter_cells()],
            [("Root", 0), ("level 1", 1), ("level 2", 2)],
        )

    def test_folded_cells_are_still_traversed(self):
        sheet = Sheet.sample()
        sheet.root.children[0].toggle_fold()
        self.assertEqual(len(list(sheet.iter_cells())), 9)

    def test_deep_tree_does_not_hit_recursion_limit(self):
        root = Cell("0")
        current = root
        for i in range(1, sys.getrecursionlimit() + 100):
            child = Cell(str(i))
            current.add_child(child)
            current = child
        depths = [d for _, d in root.iter_cells()]
        self.assertEqual(depths[-1], sys.getrecursionlimit() + 99)


class TestIndexPath(unittest.TestCase):
    def test_resolves_paths(self):
        sheet = Sheet.sample()
        self.assertIs(sheet.cell_at([]), sheet.root)
        self.assertEqual(sheet.cell_at([0, 1]).text, "Notes")
        self.assertEqual(sheet.cell_at([1, 0, 1]).text, "Design CLI workflows")

    def test_out_of_range_returns_none(self):
        sheet = Sheet.sample()
        self.assertIsNone(sheet.cell_at([2]))
        self.assertIsNone(sheet.cell_at([0, 5]))
        self.assertIsNone(sheet.cell_at([0, 0, 0]))
        self.assertIsNone(sheet.cell_at([-1]))

    def test_iter_paths_resolve_back_to_cells(self):
        sheet = Sheet.sample()
        for path, cell in sheet.iter_paths():
            self.assertIs(sheet.cell_at(path), cell)
        self.assertEqual([p for p, _ in sheet.iter_paths()][:3], [(), (0,), (0, 0)])

    def test_path_invalidated_by_insertion(self):
        sheet = Sheet.sample()
        path = [1, 1]
        self.assertEqual(sheet.cell_at(path).text, "Retrospective")
        sheet.root.children[1].children.insert(0, Cell("Inserted"))
        self.assertEqual(sheet.cell_at(path).text, "TreeSheets RS")


class TestSheet(unittest.TestCase):
    def test_sample_structure(self):
        sheet = Sheet.sample()
        self.assertEqual(sheet.title, "Sample Sheet")
        self.assertEqual(sheet.root.text, "TreeSheets Rust Prototype")
        self.assertEqual(len(list(sheet.iter_cells())), 9)

    def test_sample_is_fresh_each_time(self):
        a = Sheet.sample()
        b = Sheet.sample()
        self.assertEqual(a, b)
        a.root.add_child(Cell("extra"))
        self.assertNotEqual(a, b)

    def test_blank(self):
        sheet = Sheet.blank()
        self.assertEqual(sheet.title, "New Sheet")
        self.assertEqual(sheet.root, Cell("Root"))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
