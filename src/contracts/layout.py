from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .fragments import BBox, PositionedFragment


class ItemKind(str, Enum):
    BLOCK = "block"
    FRAGMENT = "fragment"


@dataclass(frozen=True, slots=True)
class ReconstructError:
    code: str
    message: str
    detail: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "detail": self.detail}


@dataclass(frozen=True, slots=True)
class Block:
    block_id: str  # p{page_num:03d}_b{block_index:04d}
    fragment_indices: list[int]  # chain order, top to bottom, len >= 2
    bbox: BBox
    text: str  # member texts joined with single spaces

    def to_dict(self) -> dict[str, Any]:
        return {
            "block_id": self.block_id,
            "fragment_indices": list(self.fragment_indices),
            "bbox": self.bbox.to_dict(),
            "text": self.text,
        }


@dataclass(frozen=True, slots=True)
class ConsolidatedItem:
    item_index: int  # position in the (y0, x0) ordered item list
    kind: ItemKind
    text: str
    bbox: BBox
    member_indices: list[int]  # block members in chain order, or the single fragment
    block_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_index": self.item_index,
            "kind": self.kind.value,
            "text": self.text,
            "bbox": self.bbox.to_dict(),
            "member_indices": list(self.member_indices),
            "block_id": self.block_id,
        }


@dataclass(frozen=True, slots=True)
class LabelValuePair:
    label_item: int
    value_item: int
    label_text: str
    value_text: str
    bbox: BBox  # union of label and value

    def to_dict(self) -> dict[str, Any]:
        return {
            "label_item": self.label_item,
            "value_item": self.value_item,
            "label_text": self.label_text,
            "value_text": self.value_text,
            "bbox": self.bbox.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class Title:
    item_index: int
    text: str
    representative_height: float
    bbox: BBox

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_index": self.item_index,
            "text": self.text,
            "representative_height": self.representative_height,
            "bbox": self.bbox.to_dict(),
        }


@dataclass(slots=True)
class PlacedCell:
    """
    Discrete column placement of one fragment. Mutable only while the column solver runs.
    """

    fragment_index: int
    text: str
    start_col: int
    physical_end_col: int

    def text_end_col(self) -> int:
        return self.start_col + len(self.text.strip())

    def shift(self, amount: int) -> None:
        self.start_col += amount
        self.physical_end_col += amount


@dataclass(frozen=True, slots=True)
class GridCell:
    text: str
    col: int

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "col": self.col}


@dataclass(frozen=True, slots=True)
class RenditionGrid:
    rows: list[list[GridCell]]  # an empty row is a blank line
    warning: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows": [[c.to_dict() for c in row] for row in self.rows],
            "warning": self.warning,
        }


@dataclass(frozen=True, slots=True)
class NeighborInspection:
    selected_index: int
    max_vertical_search: float
    zones: dict[str, BBox]  # top / bottom / left / right
    candidate_indices: list[int]  # arena order
    chosen_successor: int | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "selected_index": self.selected_index,
            "max_vertical_search": self.max_vertical_search,
            "zones": {k: v.to_dict() for k, v in self.zones.items()},
            "candidate_indices": list(self.candidate_indices),
            "chosen_successor": self.chosen_successor,
        }


@dataclass(frozen=True, slots=True)
class ReconstructResult:
    ok: bool
    page_num: int
    errors: list[ReconstructError]
    meta: dict[str, Any]  # params, derived metrics, counts, dropped fragments, warnings
    fragments: list[PositionedFragment] = field(default_factory=list)
    blocks: list[Block] = field(default_factory=list)
    items: list[ConsolidatedItem] = field(default_factory=list)
    pairs: list[LabelValuePair] = field(default_factory=list)
    titles: list[Title] = field(default_factory=list)
    median_height: float = 0.0
    grid: RenditionGrid = field(default_factory=lambda: RenditionGrid(rows=[]))
    report: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "page_num": self.page_num,
            "errors": [e.to_dict() for e in self.errors],
            "meta": dict(self.meta),
            "fragments": [f.to_dict() for f in self.fragments],
            "blocks": [b.to_dict() for b in self.blocks],
            "items": [i.to_dict() for i in self.items],
            "pairs": [p.to_dict() for p in self.pairs],
            "titles": [t.to_dict() for t in self.titles],
            "median_height": self.median_height,
            "grid": self.grid.to_dict(),
            "report": self.report,
        }
