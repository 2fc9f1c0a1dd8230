from __future__ import annotations

import unittest

from contracts.fragments import BBox, PositionedFragment
from reconstruct.inspector import fragment_at_point, inspect_neighbors
from reconstruct.report import format_inspection


def _frag(i: int, text: str, x0: float, y0: float, x1: float, y1: float) -> PositionedFragment:
    return PositionedFragment(index=i, source_index=i, text=text, bbox=BBox(x0, y0, x1, y1))


def _page() -> list[PositionedFragment]:
    return [
        _frag(0, "selected", 100, 100, 150, 110),
        _frag(1, "right", 200, 100, 240, 110),
        _frag(2, "below", 120, 150, 140, 160),
        _frag(3, "far", 400, 400, 450, 410),
        _frag(4, "left", 10, 102, 50, 108),
    ]


class TestNeighborInspector(unittest.TestCase):
    def test_zones_candidates_and_successor(self) -> None:
        frags = _page()
        insp = inspect_neighbors(frags, 0, page_width=600.0)

        self.assertEqual(insp.max_vertical_search, 100.0)
        self.assertEqual(insp.zones["top"], BBox(100, 0, 150, 100))
        self.assertEqual(insp.zones["bottom"], BBox(100, 110, 150, 210))
        self.assertEqual(insp.zones["left"], BBox(0, 100, 100, 110))
        self.assertEqual(insp.zones["right"], BBox(150, 100, 600, 110))
        self.assertEqual(insp.candidate_indices, [1, 2, 4])
        self.assertEqual(insp.chosen_successor, 1)

    def test_last_in_row_has_no_successor(self) -> None:
        insp = inspect_neighbors(_page(), 1, page_width=600.0)
        self.assertIsNone(insp.chosen_successor)

    def test_unknown_index_raises(self) -> None:
        with self.assertRaises(KeyError):
            inspect_neighbors(_page(), 99, page_width=600.0)

    def test_point_lookup_prefers_topmost_painted_fragment(self) -> None:
        frags = _page() + [_frag(5, "overlay", 90, 95, 130, 115)]
        self.assertEqual(fragment_at_point(frags, 110, 105), 5)
        self.assertEqual(fragment_at_point(frags, 145, 105), 0)
        self.assertEqual(fragment_at_point(frags, 150, 110), 0)  # edges are inclusive
        self.assertIsNone(fragment_at_point(frags, 590, 5))

    def test_text_report_names_selection_and_successor(self) -> None:
        frags = _page()
        text = format_inspection(inspect_neighbors(frags, 0, page_width=600.0), frags)
        self.assertIn('"selected"', text)
        self.assertIn('"right"', text)


if __name__ == "__main__":
    unittest.main()
