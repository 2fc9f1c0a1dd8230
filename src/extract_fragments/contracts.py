from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from contracts.fragments import FragmentPage


class ExtractEngineName(str, Enum):
    """
    Fragment extraction backend identifiers.
    """

    PYPDFIUM2 = "pypdfium2"


@dataclass(frozen=True, slots=True)
class ExtractError:
    code: str
    message: str
    detail: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "detail": self.detail}


@dataclass(frozen=True, slots=True)
class ExtractConfig:
    """
    Fragment extraction configuration.

    `scale` maps PDF points to viewport pixels (1.5 => 108 dpi), matching the
    viewport the reconstruction thresholds were tuned against.
    """

    engine: ExtractEngineName = ExtractEngineName.PYPDFIUM2
    scale: float = 1.5
    page_selection: str | None = "1"  # e.g. "1,3-5"; None => all pages

    def __post_init__(self) -> None:
        if self.scale <= 0:
            raise ValueError("scale must be > 0")


@dataclass(frozen=True, slots=True)
class ExtractResult:
    # Stable for identical (source path + scale + backend + page selection).
    doc_id: str
    ok: bool
    engine: ExtractEngineName
    source_relpath: str
    pages: list[FragmentPage]
    errors: list[ExtractError]
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        # Shape is a superset of contracts.fragments.FragmentDocument.
        return {
            "doc_id": self.doc_id,
            "ok": self.ok,
            "engine": self.engine.value,
            "source_relpath": self.source_relpath,
            "pages": [p.to_dict() for p in self.pages],
            "errors": [e.to_dict() for e in self.errors],
            "meta": dict(self.meta),
        }
