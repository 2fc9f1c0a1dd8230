from __future__ import annotations

from contracts.fragments import BBox, PositionedFragment
from contracts.layout import NeighborInspection

from .column_solver import NEIGHBOR_SEARCH_K
from .metrics import median_height
from .rows import build_rows


def _zone(x: float, y: float, width: float, height: float) -> BBox:
    return BBox(x0=x, y0=y, x1=x + width, y1=y + height)


def search_zones(selected: PositionedFragment, *, max_vertical_search: float, page_width: float) -> dict[str, BBox]:
    b = selected.bbox
    return {
        "top": _zone(b.x0, b.y0 - max_vertical_search, b.width(), max_vertical_search),
        "bottom": _zone(b.x0, b.y1, b.width(), max_vertical_search),
        "left": _zone(0.0, b.y0, b.x0, b.height()),
        "right": _zone(b.x1, b.y0, page_width - b.x1, b.height()),
    }


def chosen_successor(fragments: list[PositionedFragment], selected_index: int) -> int | None:
    for row in build_rows(fragments):
        positions = [f.index for f in row]
        if selected_index in positions:
            pos = positions.index(selected_index)
            return positions[pos + 1] if pos + 1 < len(positions) else None
    return None


def fragment_at_point(fragments: list[PositionedFragment], x: float, y: float) -> int | None:
    # Later fragments are painted on top, so search from the end.
    for f in reversed(fragments):
        if f.bbox.contains_point(x, y):
            return f.index
    return None


def inspect_neighbors(
    fragments: list[PositionedFragment], selected_index: int, *, page_width: float
) -> NeighborInspection:
    """
    Explain row/column decisions around one fragment.

    Candidates are the fragments touching any of the four search zones around the
    selection; the chosen successor is the next fragment in the selection's row.
    """

    by_index = {f.index: f for f in fragments}
    if selected_index not in by_index:
        raise KeyError(f"no fragment with index {selected_index}")
    selected = by_index[selected_index]

    mvs = median_height(fragments) * NEIGHBOR_SEARCH_K
    zones = search_zones(selected, max_vertical_search=mvs, page_width=page_width)

    candidates: list[int] = []
    for f in fragments:
        if f.index == selected_index:
            continue
        if any(f.bbox.intersects(z) for z in zones.values()):
            candidates.append(f.index)

    return NeighborInspection(
        selected_index=selected_index,
        max_vertical_search=mvs,
        zones=zones,
        candidate_indices=candidates,
        chosen_successor=chosen_successor(fragments, selected_index),
    )
