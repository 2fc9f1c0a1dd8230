"""
Canonical data contracts.

These models are the schema boundary between fragment extraction and layout
reconstruction. Stage code should consume/produce these contract objects (not ad-hoc dicts).
"""

from .fragments import BBox, Fragment, FragmentDocument, FragmentPage, PositionedFragment, Viewport
from .layout import (
    Block,
    ConsolidatedItem,
    GridCell,
    ItemKind,
    LabelValuePair,
    NeighborInspection,
    PlacedCell,
    ReconstructError,
    ReconstructResult,
    RenditionGrid,
    Title,
)

__all__ = [
    "BBox",
    "Viewport",
    "Fragment",
    "FragmentPage",
    "FragmentDocument",
    "PositionedFragment",
    "ItemKind",
    "Block",
    "ConsolidatedItem",
    "LabelValuePair",
    "Title",
    "PlacedCell",
    "GridCell",
    "RenditionGrid",
    "NeighborInspection",
    "ReconstructError",
    "ReconstructResult",
]
