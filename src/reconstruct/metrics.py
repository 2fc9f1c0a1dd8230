from __future__ import annotations

import math
import statistics
from typing import Iterable

from contracts.fragments import BBox, PositionedFragment

DEFAULT_CHAR_WIDTH = 8.0
DEFAULT_LINE_HEIGHT = 15.0


def round_half_up(x: float) -> int:
    # Halves round toward +inf: 2.5 -> 3, -2.5 -> -2.
    return int(math.floor(x + 0.5))


def bbox_union_many(boxes: Iterable[BBox]) -> BBox:
    boxes = list(boxes)
    if not boxes:
        return BBox(0.0, 0.0, 0.0, 0.0)
    out = boxes[0]
    for b in boxes[1:]:
        out = out.union(b)
    return out


def median(values: list[float]) -> float:
    return float(statistics.median(values)) if values else 0.0


def median_height(fragments: list[PositionedFragment]) -> float:
    return median([f.bbox.height() for f in fragments])


def average_char_width(fragments: list[PositionedFragment]) -> float:
    total_width = 0.0
    total_chars = 0
    for f in fragments:
        visible = f.text.strip()
        if visible:
            total_width += f.bbox.width()
            total_chars += len(visible)
    if total_chars == 0 or total_width <= 0:
        return DEFAULT_CHAR_WIDTH
    return total_width / total_chars


def average_line_height(fragments: list[PositionedFragment]) -> float:
    if not fragments:
        return DEFAULT_LINE_HEIGHT
    return sum(f.bbox.height() for f in fragments) / len(fragments)
