from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_IDENTITY: tuple[float, float, float, float, float, float] = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


def _transform_from_list(raw: Any) -> tuple[float, float, float, float, float, float]:
    if not isinstance(raw, (list, tuple)) or len(raw) != 6:
        raise TypeError("transform must be a list of 6 numbers")
    a, b, c, d, e, f = (float(x) for x in raw)
    return (a, b, c, d, e, f)


@dataclass(frozen=True, slots=True)
class BBox:
    # Viewport pixel space, y grows downward.
    x0: float
    y0: float
    x1: float
    y1: float

    def width(self) -> float:
        return self.x1 - self.x0

    def height(self) -> float:
        return self.y1 - self.y0

    def center_y(self) -> float:
        return self.y0 + self.height() / 2.0

    def union(self, other: "BBox") -> "BBox":
        return BBox(
            x0=min(self.x0, other.x0),
            y0=min(self.y0, other.y0),
            x1=max(self.x1, other.x1),
            y1=max(self.y1, other.y1),
        )

    def intersects(self, other: "BBox") -> bool:
        return self.x0 < other.x1 and self.x1 > other.x0 and self.y0 < other.y1 and self.y1 > other.y0

    def contains_point(self, x: float, y: float) -> bool:
        return self.x0 <= x <= self.x1 and self.y0 <= y <= self.y1

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "BBox":
        return BBox(x0=float(d["x0"]), y0=float(d["y0"]), x1=float(d["x1"]), y1=float(d["y1"]))

    def to_dict(self) -> dict[str, Any]:
        return {"x0": self.x0, "y0": self.y0, "x1": self.x1, "y1": self.y1}


@dataclass(frozen=True, slots=True)
class Viewport:
    """
    Page viewport: affine transform from page space to pixel space plus the pixel extent.

    pdf.js convention for an unrotated page at scale s: [s, 0, 0, -s, -left*s, top*s].
    """

    transform: tuple[float, float, float, float, float, float] = _IDENTITY
    width: float = 0.0
    height: float = 0.0

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Viewport":
        return Viewport(
            transform=_transform_from_list(d.get("transform", list(_IDENTITY))),
            width=float(d.get("width", 0.0)),
            height=float(d.get("height", 0.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"transform": list(self.transform), "width": self.width, "height": self.height}


@dataclass(frozen=True, slots=True)
class Fragment:
    text: str
    transform: tuple[float, float, float, float, float, float]  # text space -> page space
    width: float  # advance width in page units
    source_index: int  # position in the producer's list

    @staticmethod
    def from_dict(d: dict[str, Any], *, source_index: int) -> "Fragment":
        # pdf.js getTextContent() items use "str" for the text.
        text = d["text"] if "text" in d else d.get("str")
        return Fragment(
            text="" if text is None else str(text),
            transform=_transform_from_list(d["transform"]),
            width=float(d.get("width", 0.0)),
            source_index=int(d.get("source_index", source_index)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "transform": list(self.transform),
            "width": self.width,
            "source_index": self.source_index,
        }


@dataclass(frozen=True, slots=True)
class FragmentPage:
    page_num: int  # 1-indexed
    viewport: Viewport
    fragments: list[Fragment]

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "FragmentPage":
        frags_raw = d.get("fragments") or []
        if not isinstance(frags_raw, list):
            raise TypeError("FragmentPage.fragments must be a list")
        return FragmentPage(
            page_num=int(d.get("page_num", 1)),
            viewport=Viewport.from_dict(d.get("viewport") or {}),
            fragments=[Fragment.from_dict(f, source_index=i) for i, f in enumerate(frags_raw)],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "page_num": self.page_num,
            "viewport": self.viewport.to_dict(),
            "fragments": [f.to_dict() for f in self.fragments],
        }


@dataclass(frozen=True, slots=True)
class FragmentDocument:
    doc_id: str | None
    source_relpath: str | None
    pages: list[FragmentPage]
    meta: dict[str, Any]

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "FragmentDocument":
        pages_raw = d.get("pages") or []
        if not isinstance(pages_raw, list):
            raise TypeError("FragmentDocument.pages must be a list")
        return FragmentDocument(
            doc_id=(None if d.get("doc_id") is None else str(d["doc_id"])),
            source_relpath=(None if d.get("source_relpath") is None else str(d["source_relpath"])),
            pages=[FragmentPage.from_dict(p) for p in pages_raw],
            meta=dict(d.get("meta") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "doc_id": self.doc_id,
            "source_relpath": self.source_relpath,
            "pages": [p.to_dict() for p in self.pages],
            "meta": dict(self.meta),
        }


@dataclass(frozen=True, slots=True)
class PositionedFragment:
    index: int  # arena index, used as the identity key by every grouping stage
    source_index: int
    text: str
    bbox: BBox

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "source_index": self.source_index,
            "text": self.text,
            "bbox": self.bbox.to_dict(),
        }
