from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from contracts.fragments import FragmentPage


class FragmentExtractionEngine(ABC):
    """
    Fragment extraction engine abstraction.

    Engines must:
    - Emit, per page, every text run with its text-space -> page-space transform and width
    - Emit a viewport transform mapping page space to downward-positive pixel space
    - Be deterministic for a given input+params
    - Perform NO grouping, ordering or layout inference
    """

    @abstractmethod
    def backend_id(self) -> str:
        raise NotImplementedError

    def backend_version(self) -> str | None:
        return None

    @abstractmethod
    def get_page_count(self, *, pdf_file: Path) -> int:
        raise NotImplementedError

    @abstractmethod
    def extract_pages(self, *, pdf_file: Path, scale: float, pages: list[int]) -> list[FragmentPage]:
        """
        Return extracted pages in the same order as `pages` (1-indexed).
        """

        raise NotImplementedError
