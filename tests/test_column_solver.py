from __future__ import annotations

import unittest

from contracts.fragments import BBox, PositionedFragment
from contracts.layout import PlacedCell
from reconstruct.column_solver import (
    MAX_PASSES_WARNING,
    find_downward_neighbors,
    fix_intra_row_overlaps,
    render_automatic,
    render_simple,
    solve_columns,
)
from reconstruct.metrics import DEFAULT_CHAR_WIDTH, average_char_width, round_half_up
from reconstruct.pairing import consolidate_items
from reconstruct.render_text import render_grid_text
from reconstruct.rows import build_rows


def _frag(i: int, text: str, x0: float, y0: float, x1: float, y1: float) -> PositionedFragment:
    return PositionedFragment(index=i, source_index=i, text=text, bbox=BBox(x0, y0, x1, y1))


def _cols(grid) -> list[list[tuple[str, int]]]:
    return [[(c.text, c.col) for c in row] for row in grid.rows]


def _staircase() -> list[PositionedFragment]:
    """
    Twelve 4-char cells on one row, each 10 columns apart, and one bottom cell that
    collides with each of them in turn as it is pushed right.
    """

    frags = [_frag(k, "abcd", 50.0 * k, 0, 50.0 * k + 40, 10) for k in range(12)]
    frags.append(_frag(12, "abcd", 10, 200, 50, 210))
    return frags


class TestMetrics(unittest.TestCase):
    def test_round_half_up(self) -> None:
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(2.49), 2)
        self.assertEqual(round_half_up(-2.5), -2)

    def test_avg_char_width_falls_back_without_visible_text(self) -> None:
        self.assertEqual(average_char_width([]), DEFAULT_CHAR_WIDTH)
        self.assertEqual(average_char_width([_frag(0, "abc", 5, 0, 5, 10)]), DEFAULT_CHAR_WIDTH)
        self.assertEqual(average_char_width([_frag(0, "abcd", 0, 0, 40, 10)]), 10.0)


class TestDownwardNeighbors(unittest.TestCase):
    def test_neighbor_needs_overlap_lower_top_and_gap_within_range(self) -> None:
        src = _frag(0, "src", 0, 0, 50, 10)
        frags = [
            src,
            _frag(1, "below", 30, 20, 80, 30),
            _frag(2, "too far", 30, 200, 80, 210),
            _frag(3, "no overlap", 50, 20, 90, 30),
            _frag(4, "same top", 10, 0, 40, 10),
            _frag(5, "overlapping", 10, 5, 40, 15),
        ]
        self.assertEqual(find_downward_neighbors(src, frags, 100.0), {1})


class TestColumnSolver(unittest.TestCase):
    def test_false_alignment_pushes_bottom_cell_past_top_text(self) -> None:
        frags = [_frag(0, "Hello", 0, 0, 50, 10), _frag(1, "World", 30, 150, 80, 160)]
        grid, derived = render_automatic(frags)

        self.assertEqual(derived["avg_char_width"], 10.0)
        self.assertTrue(derived["converged"])
        self.assertIsNone(grid.warning)
        self.assertEqual(_cols(grid)[0], [("Hello", 0)])
        self.assertEqual(_cols(grid)[-1], [("World", 6)])
        # Rows 150px apart at median height 10 => 14 blank rows in between.
        self.assertEqual(len(grid.rows), 16)
        self.assertTrue(all(row == [] for row in grid.rows[1:-1]))

    def test_true_column_neighbor_is_not_pushed(self) -> None:
        frags = [_frag(0, "Hello", 0, 0, 50, 10), _frag(1, "World", 30, 20, 80, 30)]
        grid, _ = render_automatic(frags)
        self.assertEqual(_cols(grid), [[("Hello", 0)], [], [("World", 3)]])

    def test_intra_row_overlap_pushes_cell_and_everything_to_its_right(self) -> None:
        cells = [PlacedCell(0, "abc", 0, 3), PlacedCell(1, "de", 2, 4), PlacedCell(2, "f", 10, 11)]
        fix_intra_row_overlaps(cells)
        self.assertEqual([c.start_col for c in cells], [0, 4, 12])
        self.assertEqual([c.physical_end_col for c in cells], [3, 6, 13])

    def test_staircase_hits_pass_cap_and_sets_warning(self) -> None:
        grid, derived = render_automatic(_staircase())

        self.assertFalse(derived["converged"])
        self.assertEqual(derived["passes"], 10)
        self.assertEqual(grid.warning, MAX_PASSES_WARNING)
        self.assertEqual(_cols(grid)[-1], [("abcd", 50)])

    def test_columns_never_decrease_as_pass_cap_grows(self) -> None:
        frags = _staircase()
        rows = build_rows(frags)
        neighbors = {f.index: find_downward_neighbors(f, frags, 100.0) for f in frags}

        previous: list[int] | None = None
        for cap in range(0, 11):
            outcome = solve_columns(rows, neighbors, avg_char_width=10.0, max_passes=cap)
            cols = [c.start_col for row in outcome.rows for c in row]
            if previous is not None:
                self.assertTrue(all(a >= b for a, b in zip(cols, previous)))
            previous = cols
        self.assertEqual(previous[-1], 50)

    def test_blank_rows_follow_vertical_distance(self) -> None:
        frags = [_frag(0, "top", 0, 0, 30, 10), _frag(1, "low", 0, 40, 30, 50)]
        grid, _ = render_automatic(frags)
        self.assertEqual(render_grid_text(grid), "top\n\n\n\nlow")

    def test_empty_page_renders_empty_grid(self) -> None:
        grid, derived = render_automatic([])
        self.assertEqual(grid.rows, [])
        self.assertIsNone(grid.warning)
        self.assertTrue(derived["converged"])


class TestSimpleRendition(unittest.TestCase):
    def test_items_join_a_line_by_vertical_center(self) -> None:
        frags = [
            _frag(0, "left", 0, 0, 40, 10),
            _frag(1, "right", 105, 3, 155, 13),
            _frag(2, "next", 0, 30, 40, 40),
        ]
        items = consolidate_items(frags, [])
        grid, derived = render_simple(items, frags)

        self.assertEqual(derived["avg_line_height"], 10.0)
        # floor(105 / 10) = 10; rows 30px apart leave two blank lines.
        self.assertEqual(_cols(grid), [[("left", 0), ("right", 10)], [], [], [("next", 0)]])
        self.assertIsNone(grid.warning)

    def test_simple_mode_never_pushes_overlapping_cells(self) -> None:
        frags = [_frag(0, "abcdef", 0, 0, 60, 10), _frag(1, "xy", 30, 0, 50, 10)]
        grid, _ = render_simple(consolidate_items(frags, []), frags)
        self.assertEqual(_cols(grid), [[("abcdef", 0), ("xy", 3)]])
        self.assertEqual(render_grid_text(grid), "abcdefxy")


if __name__ == "__main__":
    unittest.main()
