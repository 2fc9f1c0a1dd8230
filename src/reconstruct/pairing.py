from __future__ import annotations

from dataclasses import dataclass

from contracts.fragments import BBox, PositionedFragment
from contracts.layout import Block, ConsolidatedItem, ItemKind, LabelValuePair


@dataclass(frozen=True, slots=True)
class _ItemBuilder:
    kind: ItemKind
    text: str
    bbox: BBox
    member_indices: list[int]
    block_id: str | None


def consolidate_items(fragments: list[PositionedFragment], blocks: list[Block]) -> list[ConsolidatedItem]:
    """
    Collapse each block into one opaque item and keep the remaining fragments as-is.

    Items are ordered by (y0, x0); ties keep construction order (blocks first, then
    standalone fragments in arena order). `item_index` is the final position.
    """

    in_blocks: set[int] = set()
    staged: list[_ItemBuilder] = []

    for b in blocks:
        in_blocks.update(b.fragment_indices)
        staged.append(_ItemBuilder(ItemKind.BLOCK, b.text, b.bbox, list(b.fragment_indices), b.block_id))

    for f in fragments:
        if f.index not in in_blocks:
            staged.append(_ItemBuilder(ItemKind.FRAGMENT, f.text, f.bbox, [f.index], None))

    ordered = sorted(staged, key=lambda s: (s.bbox.y0, s.bbox.x0))
    return [
        ConsolidatedItem(
            item_index=i,
            kind=s.kind,
            text=s.text,
            bbox=s.bbox,
            member_indices=s.member_indices,
            block_id=s.block_id,
        )
        for i, s in enumerate(ordered)
    ]


def is_label(item: ConsolidatedItem) -> bool:
    return item.text.strip().endswith(":")


def pair_labels_with_values(items: list[ConsolidatedItem], *, y_tolerance: float) -> list[LabelValuePair]:
    """
    Match colon-terminated labels to the nearest item on their right.

    Labels are processed in item order; each takes the qualifying item with the smallest
    horizontal gap (first in item order on ties) and consumes it. An earlier label can
    take a value a later label is closer to. A label may itself be another label's value.
    """

    consumed: set[int] = set()
    pairs: list[LabelValuePair] = []

    for label in items:
        if not is_label(label):
            continue

        best: ConsolidatedItem | None = None
        best_gap: float | None = None
        for value in items:
            if value.item_index == label.item_index or value.item_index in consumed:
                continue
            if value.bbox.x0 <= label.bbox.x1:
                continue
            if abs(label.bbox.y0 - value.bbox.y0) > y_tolerance:
                continue
            gap = value.bbox.x0 - label.bbox.x1
            if best_gap is None or gap < best_gap:
                best = value
                best_gap = gap

        if best is not None:
            consumed.add(best.item_index)
            pairs.append(
                LabelValuePair(
                    label_item=label.item_index,
                    value_item=best.item_index,
                    label_text=label.text,
                    value_text=best.text,
                    bbox=label.bbox.union(best.bbox),
                )
            )

    return pairs
