from __future__ import annotations

from contracts.fragments import PositionedFragment
from contracts.layout import ConsolidatedItem, ItemKind, LabelValuePair, Title


def representative_height(item: ConsolidatedItem, by_index: dict[int, PositionedFragment]) -> float:
    # A block is as tall as its first (topmost) line, not its union box.
    if item.kind == ItemKind.BLOCK:
        return by_index[item.member_indices[0]].bbox.height()
    return item.bbox.height()


def classify_titles(
    items: list[ConsolidatedItem],
    pairs: list[LabelValuePair],
    fragments: list[PositionedFragment],
    *,
    median_height: float,
    title_ratio: float,
) -> list[Title]:
    used = {p.label_item for p in pairs} | {p.value_item for p in pairs}
    threshold = median_height * title_ratio
    by_index = {f.index: f for f in fragments}

    titles: list[Title] = []
    for item in items:
        if item.item_index in used:
            continue
        h = representative_height(item, by_index)
        if h > threshold:
            titles.append(Title(item_index=item.item_index, text=item.text, representative_height=h, bbox=item.bbox))
    return titles
