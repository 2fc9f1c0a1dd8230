from __future__ import annotations

from contracts.fragments import BBox, PositionedFragment
from contracts.layout import Block, LabelValuePair, NeighborInspection, Title

NO_GROUPS = "No groups formed."


def _bbox_str(b: BBox) -> str:
    return f"x:{b.x0:.2f}, y:{b.y0:.2f}, w:{b.width():.2f}, h:{b.height():.2f}"


def format_group_report(
    *,
    fragments: list[PositionedFragment],
    blocks: list[Block],
    pairs: list[LabelValuePair],
    titles: list[Title],
    median_height: float,
    title_ratio: float,
) -> str:
    by_index = {f.index: f for f in fragments}
    out: list[str] = []

    if blocks:
        out.append(f"--- Vertical Blocks ({len(blocks)}) ---")
        for n, b in enumerate(blocks, start=1):
            out.append(f"Block {n}: {_bbox_str(b.bbox)}")
            for m, idx in enumerate(b.fragment_indices):
                out.append(f'  {m}: "{by_index[idx].text}"')
        out.append("")

    if pairs:
        out.append(f"--- Label-Value Pairs ({len(pairs)}) ---")
        for n, p in enumerate(pairs, start=1):
            out.append(f'Pair {n}: [L: "{p.label_text}", V: "{p.value_text}"]')
        out.append("")

    if titles:
        out.append(f"--- Titles ({len(titles)}) ---")
        for n, t in enumerate(titles, start=1):
            out.append(
                f'Title {n}: "{t.text}" (Font Height: {t.representative_height:.2f}, '
                f"Median: {median_height:.2f}, Ratio: {title_ratio:.1f})"
            )

    if not out:
        return NO_GROUPS
    return "\n".join(out).rstrip("\n") + "\n"


def format_inspection(inspection: NeighborInspection, fragments: list[PositionedFragment]) -> str:
    by_index = {f.index: f for f in fragments}
    sel = by_index[inspection.selected_index]
    lines = [
        f'selected {sel.index}: "{sel.text}" {_bbox_str(sel.bbox)}',
        f"max_vertical_search={inspection.max_vertical_search:.2f}",
        "-- zones --",
    ]
    for name, z in inspection.zones.items():
        lines.append(f"{name:<6} {_bbox_str(z)}")

    lines.append(f"-- candidates ({len(inspection.candidate_indices)}) --")
    for idx in inspection.candidate_indices:
        marker = "*" if idx == inspection.chosen_successor else "-"
        f = by_index[idx]
        lines.append(f'{marker} {idx}: "{f.text}" {_bbox_str(f.bbox)}')

    if inspection.chosen_successor is None:
        lines.append("chosen successor: <none>")
    else:
        lines.append(f'chosen successor: {inspection.chosen_successor} "{by_index[inspection.chosen_successor].text}"')
    return "\n".join(lines) + "\n"
