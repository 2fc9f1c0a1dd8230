from __future__ import annotations

from contracts.fragments import PositionedFragment

Row = list[PositionedFragment]


def _overlaps_vertically(a: PositionedFragment, b: PositionedFragment) -> bool:
    return a.bbox.y0 < b.bbox.y1 and a.bbox.y1 > b.bbox.y0


def build_rows(fragments: list[PositionedFragment]) -> list[Row]:
    """
    Cluster fragments into visual text rows.

    Sweep order is (y0, x0). The first unassigned fragment seeds a row that takes every
    unassigned fragment whose vertical span overlaps the seed's span. Membership is
    decided against the seed only, so two members of a row need not overlap each other.
    Rows are ordered left to right; every fragment lands in exactly one row.
    """

    ordered = sorted(fragments, key=lambda f: (f.bbox.y0, f.bbox.x0))
    assigned: set[int] = set()
    rows: list[Row] = []

    for seed in ordered:
        if seed.index in assigned:
            continue
        # The seed is always a member: a zero-height seed does not overlap itself.
        members = [
            f
            for f in ordered
            if f.index not in assigned and (f.index == seed.index or _overlaps_vertically(f, seed))
        ]
        row = sorted(members, key=lambda f: f.bbox.x0)
        rows.append(row)
        assigned.update(f.index for f in row)

    return rows
