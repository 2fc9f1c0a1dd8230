from __future__ import annotations

import unittest

from contracts.fragments import BBox, PositionedFragment
from reconstruct.blocks import group_vertical_blocks


def _frag(i: int, text: str, x0: float, y0: float, x1: float, y1: float) -> PositionedFragment:
    return PositionedFragment(index=i, source_index=i, text=text, bbox=BBox(x0, y0, x1, y1))


def _stack(xs: list[float]) -> list[PositionedFragment]:
    # 10px tall lines separated by 5px gaps.
    return [_frag(i, f"line{i}", x, i * 15.0, x + 40.0, i * 15.0 + 10.0) for i, x in enumerate(xs)]


class TestVerticalBlocks(unittest.TestCase):
    def test_aligned_stack_forms_one_block(self) -> None:
        blocks = group_vertical_blocks(_stack([0.0, 1.0, 2.0]), x_threshold=2.0, y_threshold=10.0)

        self.assertEqual(len(blocks), 1)
        self.assertEqual(blocks[0].fragment_indices, [0, 1, 2])
        self.assertEqual(blocks[0].text, "line0 line1 line2")
        self.assertEqual(blocks[0].bbox, BBox(0.0, 0.0, 42.0, 40.0))
        self.assertEqual(blocks[0].block_id, "p001_b0000")

    def test_zero_x_threshold_leaves_only_single_chains(self) -> None:
        self.assertEqual(group_vertical_blocks(_stack([0.0, 1.0, 2.0]), x_threshold=0.0, y_threshold=10.0), [])

    def test_left_edge_offset_is_measured_against_chain_tail(self) -> None:
        # 0 -> 10 exceeds the tolerance, 10 -> 11 does not.
        blocks = group_vertical_blocks(_stack([0.0, 10.0, 11.0]), x_threshold=2.0, y_threshold=10.0)
        self.assertEqual([b.fragment_indices for b in blocks], [[1, 2]])

    def test_gap_outside_threshold_or_overlapping_is_rejected(self) -> None:
        frags = [
            _frag(0, "a", 0, 0, 40, 10),
            _frag(1, "b", 0, 25, 40, 35),  # gap 15 > 10
            _frag(2, "c", 0, 30, 40, 40),  # overlaps b vertically
        ]
        self.assertEqual(group_vertical_blocks(frags, x_threshold=5.0, y_threshold=10.0), [])

    def test_nearest_candidate_wins_and_ties_go_to_sweep_order(self) -> None:
        frags = [
            _frag(0, "seed", 0, 0, 40, 10),
            _frag(1, "first", 0, 14, 40, 24),
            _frag(2, "second", 1, 14, 41, 24),
            _frag(3, "farther", 2, 12 + 8, 42, 30),
        ]
        blocks = group_vertical_blocks(frags, x_threshold=5.0, y_threshold=10.0)

        self.assertEqual(len(blocks), 1)
        self.assertEqual(blocks[0].fragment_indices[:2], [0, 1])
        # "second" was not claimed by the first chain's second step; it overlaps "first"
        # vertically so it cannot follow it either.
        self.assertNotIn(2, blocks[0].fragment_indices)

    def test_blocks_are_disjoint(self) -> None:
        frags = []
        i = 0
        for col in range(3):
            for row in range(4):
                frags.append(_frag(i, f"c{col}r{row}", col * 100.0 + row, row * 14.0, col * 100.0 + 60, row * 14.0 + 10))
                i += 1
        blocks = group_vertical_blocks(frags, x_threshold=3.0, y_threshold=6.0)

        seen: list[int] = []
        for b in blocks:
            self.assertGreaterEqual(len(b.fragment_indices), 2)
            seen.extend(b.fragment_indices)
        self.assertEqual(len(seen), len(set(seen)))
        self.assertEqual(len(blocks), 3)

    def test_empty_input(self) -> None:
        self.assertEqual(group_vertical_blocks([], x_threshold=10.0, y_threshold=10.0), [])


if __name__ == "__main__":
    unittest.main()
