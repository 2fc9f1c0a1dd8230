"""
Monospace grid rendition.

Two modes share the same fragment input:

- simple: one cell per consolidated item, rows by vertical-center proximity,
  columns by floor(x0 / avg_char_width), no repair.
- automatic: rows from the row builder, columns by rounding, then a bounded repair loop
  that pushes cells right until rows no longer look falsely aligned with the row above.

Column positions only ever increase, so the repair loop terminates; if it has not
stabilized after MAX_REPAIR_PASSES the grid carries a non-fatal warning.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from contracts.fragments import PositionedFragment
from contracts.layout import ConsolidatedItem, GridCell, PlacedCell, RenditionGrid

from .metrics import average_char_width, average_line_height, median_height, round_half_up
from .rows import Row, build_rows

logger = logging.getLogger(__name__)

MAX_REPAIR_PASSES = 10
NEIGHBOR_SEARCH_K = 10.0  # max_vertical_search = median_height * k
MAX_PASSES_WARNING = "[Warning: Text reconstruction reached max iterations. Layout may be imperfect.]"


@dataclass(frozen=True, slots=True)
class SolverOutcome:
    rows: list[list[PlacedCell]]
    passes: int
    converged: bool


def find_downward_neighbors(
    source: PositionedFragment,
    fragments: list[PositionedFragment],
    max_distance: float,
) -> set[int]:
    """
    Fragments that continue `source`'s column: strictly lower top edge, overlapping
    horizontal span, vertical gap in [0, max_distance).
    """

    out: set[int] = set()
    s = source.bbox
    for target in fragments:
        if target.index == source.index:
            continue
        t = target.bbox
        if t.y0 <= s.y0:
            continue
        gap = t.y0 - s.y1
        aligned = t.x0 < s.x1 and t.x1 > s.x0
        if aligned and 0 <= gap < max_distance:
            out.add(target.index)
    return out


def place_row(row: Row, avg_char_width: float) -> list[PlacedCell]:
    return [
        PlacedCell(
            fragment_index=f.index,
            text=f.text,
            start_col=round_half_up(f.bbox.x0 / avg_char_width),
            physical_end_col=round_half_up(f.bbox.x1 / avg_char_width),
        )
        for f in row
    ]


def fix_intra_row_overlaps(cells: list[PlacedCell]) -> None:
    # Keep one blank column between consecutive cells; a push carries everything to its right.
    for j in range(len(cells) - 1):
        required = cells[j].text_end_col() + 1
        deficit = required - cells[j + 1].start_col
        if deficit > 0:
            for cell in cells[j + 1 :]:
                cell.shift(deficit)


def _required_shifts(top: list[PlacedCell], bottom: list[PlacedCell], neighbors: dict[int, set[int]]) -> list[int]:
    shifts = [0] * len(bottom)
    for top_cell in top:
        valid = neighbors.get(top_cell.fragment_index, set())
        for j, bottom_cell in enumerate(bottom):
            # Only a bottom cell that starts inside the top cell's span is checked;
            # a top cell ending inside a bottom cell is not.
            starts_inside = top_cell.start_col <= bottom_cell.start_col <= top_cell.physical_end_col
            if not starts_inside or bottom_cell.fragment_index in valid:
                continue
            push = top_cell.text_end_col() + 1 - bottom_cell.start_col
            if push > shifts[j]:
                shifts[j] = push
    return shifts


def repair_pass(rows: list[list[PlacedCell]], neighbors: dict[int, set[int]]) -> int:
    """
    One top-to-bottom sweep over adjacent row pairs. Returns the number of pushed cells.
    """

    pushed = 0
    for i in range(len(rows) - 1):
        bottom = rows[i + 1]
        shifts = _required_shifts(rows[i], bottom, neighbors)
        if not any(shifts):
            continue
        for cell, amount in zip(bottom, shifts):
            if amount > 0:
                cell.shift(amount)
                pushed += 1
        fix_intra_row_overlaps(bottom)
    return pushed


def solve_columns(
    rows: list[Row],
    neighbors: dict[int, set[int]],
    *,
    avg_char_width: float,
    max_passes: int = MAX_REPAIR_PASSES,
) -> SolverOutcome:
    placed = [place_row(row, avg_char_width) for row in rows]
    for cells in placed:
        fix_intra_row_overlaps(cells)

    passes = 0
    converged = False
    while passes < max_passes:
        passes += 1
        pushed = repair_pass(placed, neighbors)
        logger.debug("column repair pass %d: %d cells pushed", passes, pushed)
        if pushed == 0:
            converged = True
            break

    return SolverOutcome(rows=placed, passes=passes, converged=converged)


def _blank_rows_between(prev_y: float, cur_y: float, unit: float) -> int:
    if unit <= 0:
        return 0
    jump = round_half_up((cur_y - prev_y) / unit)
    return jump - 1 if jump > 1 else 0


def render_automatic(fragments: list[PositionedFragment]) -> tuple[RenditionGrid, dict[str, Any]]:
    if not fragments:
        return RenditionGrid(rows=[]), {"avg_char_width": 0.0, "median_height": 0.0, "passes": 0, "converged": True}

    avg_char_width = average_char_width(fragments)
    med_h = median_height(fragments)
    max_vertical_search = med_h * NEIGHBOR_SEARCH_K

    neighbors = {f.index: find_downward_neighbors(f, fragments, max_vertical_search) for f in fragments}
    rows = build_rows(fragments)
    outcome = solve_columns(rows, neighbors, avg_char_width=avg_char_width)

    grid_rows: list[list[GridCell]] = []
    prev_y = rows[0][0].bbox.y0
    for row, cells in zip(rows, outcome.rows):
        cur_y = row[0].bbox.y0
        grid_rows.extend([] for _ in range(_blank_rows_between(prev_y, cur_y, med_h)))
        grid_rows.append([GridCell(text=c.text, col=c.start_col) for c in cells])
        prev_y = cur_y

    warning: str | None = None
    if not outcome.converged:
        warning = MAX_PASSES_WARNING
        logger.warning("column solver did not stabilize within %d passes", MAX_REPAIR_PASSES)

    derived = {
        "avg_char_width": avg_char_width,
        "median_height": med_h,
        "max_vertical_search": max_vertical_search,
        "rows": len(rows),
        "passes": outcome.passes,
        "converged": outcome.converged,
    }
    return RenditionGrid(rows=grid_rows, warning=warning), derived


def _center_y(item: ConsolidatedItem) -> float:
    return item.bbox.center_y()


def render_simple(
    items: list[ConsolidatedItem], fragments: list[PositionedFragment]
) -> tuple[RenditionGrid, dict[str, Any]]:
    """
    Row-by-proximity rendition over consolidated items (blocks are single cells).

    `items` must already be in (y0, x0) order. Character width and line height come
    from the raw fragments.
    """

    if not items:
        return RenditionGrid(rows=[]), {"avg_char_width": 0.0, "avg_line_height": 0.0}

    avg_char_width = average_char_width(fragments)
    avg_line_h = average_line_height(fragments)

    lines: list[list[ConsolidatedItem]] = []
    current = [items[0]]
    for item in items[1:]:
        if abs(_center_y(item) - _center_y(current[-1])) < avg_line_h / 2.0:
            current.append(item)
        else:
            lines.append(sorted(current, key=lambda it: it.bbox.x0))
            current = [item]
    lines.append(sorted(current, key=lambda it: it.bbox.x0))

    grid_rows: list[list[GridCell]] = []
    prev_y = lines[0][0].bbox.y0
    for line in lines:
        cur_y = line[0].bbox.y0
        grid_rows.extend([] for _ in range(_blank_rows_between(prev_y, cur_y, avg_line_h)))
        grid_rows.append([GridCell(text=it.text, col=int(math.floor(it.bbox.x0 / avg_char_width))) for it in line])
        prev_y = cur_y

    derived = {"avg_char_width": avg_char_width, "avg_line_height": avg_line_h, "rows": len(lines)}
    return RenditionGrid(rows=grid_rows), derived
