"""
Fragment extraction (PDF -> positioned text fragments).

This package is intentionally limited to extraction:
- It reads text runs with their glyph transforms and advance widths, plus a viewport.
- It performs NO grouping, ordering, or layout inference (see `reconstruct`).
- It is the ONLY package that opens PDFs.
"""

from .contracts import ExtractConfig, ExtractEngineName, ExtractError, ExtractResult
from .module import parse_page_selection, run_extract_fragments

__all__ = [
    "ExtractConfig",
    "ExtractEngineName",
    "ExtractError",
    "ExtractResult",
    "parse_page_selection",
    "run_extract_fragments",
]
