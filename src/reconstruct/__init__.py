"""
Spatial text reconstruction.

Turns one page of positioned text fragments into:
- structural groupings (vertical blocks, label/value pairs, titles)
- a monospace grid rendition that keeps columns, tables and indentation

Geometry only: no reading-order model, no semantic interpretation.
Every call recomputes from scratch and is deterministic for identical input + config.
"""

from .config import ReconstructConfig, RenditionMode, load_settings, save_settings
from .inspector import fragment_at_point, inspect_neighbors
from .pipeline import reconstruct_document, reconstruct_page
from .render_text import render_grid_text

__all__ = [
    "ReconstructConfig",
    "RenditionMode",
    "load_settings",
    "save_settings",
    "reconstruct_page",
    "reconstruct_document",
    "inspect_neighbors",
    "fragment_at_point",
    "render_grid_text",
]
