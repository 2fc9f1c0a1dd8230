from __future__ import annotations

from contracts.fragments import PositionedFragment
from contracts.layout import Block

from .metrics import bbox_union_many


def _fmt_block_id(page_num: int, idx: int) -> str:
    return f"p{page_num:03d}_b{idx:04d}"


def _next_in_chain(
    tail: PositionedFragment,
    ordered: list[PositionedFragment],
    claimed: set[int],
    *,
    x_threshold: float,
    y_threshold: float,
) -> PositionedFragment | None:
    best: PositionedFragment | None = None
    best_gap: float | None = None
    for cand in ordered:
        if cand.index in claimed:
            continue
        gap = cand.bbox.y0 - tail.bbox.y1
        if gap < 0 or gap > y_threshold:
            continue
        if abs(tail.bbox.x0 - cand.bbox.x0) > x_threshold:
            continue
        # Strict comparison: the first candidate in sweep order wins ties.
        if best_gap is None or gap < best_gap:
            best = cand
            best_gap = gap
    return best


def group_vertical_blocks(
    fragments: list[PositionedFragment],
    *,
    x_threshold: float,
    y_threshold: float,
    page_num: int = 1,
) -> list[Block]:
    """
    Greedy chaining of vertically stacked, left-aligned fragments.

    Sweep order is y0 ascending (stable). Each unclaimed fragment seeds a chain that
    repeatedly takes the nearest unclaimed fragment directly below the current tail.
    Single-fragment chains are not emitted. No backtracking: a fragment belongs to the
    first chain that claims it.
    """

    ordered = sorted(fragments, key=lambda f: f.bbox.y0)
    claimed: set[int] = set()
    blocks: list[Block] = []

    for seed in ordered:
        if seed.index in claimed:
            continue
        chain = [seed]
        claimed.add(seed.index)

        while True:
            nxt = _next_in_chain(chain[-1], ordered, claimed, x_threshold=x_threshold, y_threshold=y_threshold)
            if nxt is None:
                break
            chain.append(nxt)
            claimed.add(nxt.index)

        if len(chain) > 1:
            blocks.append(
                Block(
                    block_id=_fmt_block_id(page_num, len(blocks)),
                    fragment_indices=[f.index for f in chain],
                    bbox=bbox_union_many([f.bbox for f in chain]),
                    text=" ".join(f.text for f in chain),
                )
            )

    return blocks
