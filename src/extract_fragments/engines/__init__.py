from .base import FragmentExtractionEngine
from .pypdfium2_engine import Pypdfium2Engine

__all__ = ["FragmentExtractionEngine", "Pypdfium2Engine"]
