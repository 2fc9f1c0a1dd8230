from __future__ import annotations

import hashlib
import json
import logging
import re
from pathlib import Path
from typing import Any

from .contracts import ExtractConfig, ExtractEngineName, ExtractError, ExtractResult
from .engines import FragmentExtractionEngine, Pypdfium2Engine

logger = logging.getLogger(__name__)


def _safe_pdf_stem(pdf_path: str) -> str:
    """
    Deterministic, filesystem-safe stem for readability.
    """
    s = pdf_path.replace("\\", "/").split("/")[-1]
    if s.lower().endswith(".pdf"):
        s = s[: -len(".pdf")]
    s = re.sub(r"[^A-Za-z0-9._-]+", "_", s)
    s = re.sub(r"_+", "_", s).strip("_")
    return s or "pdf"


def _canonical_page_selection(selection: str | None) -> str:
    if selection is None:
        return "all"
    s = "".join(selection.split())
    return s if s != "" else "all"


def _compute_doc_id(*, source_path: str, scale: float, backend_id: str, page_selection: str | None) -> str:
    payload = {
        "source_path": source_path.replace("\\", "/"),
        "scale": scale,
        "backend": backend_id,
        "page_selection": _canonical_page_selection(page_selection),
    }
    s = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    digest = hashlib.sha256(s.encode("utf-8")).hexdigest()
    return f"{_safe_pdf_stem(source_path)}_{digest[:12]}"


_PAGE_TOKEN = re.compile(r"^(\d+)(?:-(\d+))?$")


def parse_page_selection(selection: str | None, *, page_count: int) -> list[int]:
    """
    "1,3-5" -> [1, 3, 4, 5]. Blank or None selects every page.

    Raises ValueError on a malformed or out-of-range selection.
    """

    if selection is None or not selection.strip():
        return list(range(1, page_count + 1))

    wanted: set[int] = set()
    for token in "".join(selection.split()).split(","):
        if token == "":
            continue
        m = _PAGE_TOKEN.match(token)
        if m is None:
            raise ValueError(f"bad page token: {token!r}")
        first = int(m.group(1))
        last = int(m.group(2)) if m.group(2) is not None else first
        if first == 0 or last == 0:
            raise ValueError("page numbers start at 1")
        if last < first:
            raise ValueError(f"reversed page range: {token!r}")
        wanted.update(range(first, last + 1))

    pages = sorted(wanted)
    if pages and pages[-1] > page_count:
        raise ValueError(f"page {pages[-1]} is past the last page ({page_count})")
    return pages


def _get_engine(engine: ExtractEngineName) -> FragmentExtractionEngine:
    if engine == ExtractEngineName.PYPDFIUM2:
        return Pypdfium2Engine()
    raise ValueError(f"Unsupported extraction engine: {engine}")


def _failed(
    *, doc_id: str, config: ExtractConfig, source: str, code: str, message: str, detail: dict[str, Any]
) -> ExtractResult:
    logger.error("%s: %s (%s)", code, message, source)
    return ExtractResult(
        doc_id=doc_id,
        ok=False,
        engine=config.engine,
        source_relpath=source,
        pages=[],
        errors=[ExtractError(code=code, message=message, detail=detail)],
        meta={"scale": config.scale, "page_selection": _canonical_page_selection(config.page_selection)},
    )


def run_extract_fragments(*, config: ExtractConfig, pdf_path: Path) -> ExtractResult:
    """
    Programmatic entrypoint: PDF -> per-page positioned text fragments + viewport.

    Failures are reported as coded errors on the result, never raised.
    """

    engine = _get_engine(config.engine)
    source = pdf_path.as_posix()
    doc_id = _compute_doc_id(
        source_path=source,
        scale=config.scale,
        backend_id=engine.backend_id(),
        page_selection=config.page_selection,
    )

    if not source.lower().endswith(".pdf"):
        return _failed(
            doc_id=doc_id,
            config=config,
            source=source,
            code="EXTRACT_INPUT_NOT_PDF",
            message="Only PDFs are accepted (by .pdf extension)",
            detail={"pdf_path": source},
        )

    if not pdf_path.exists():
        return _failed(
            doc_id=doc_id,
            config=config,
            source=source,
            code="EXTRACT_INPUT_NOT_FOUND",
            message="Input PDF not found",
            detail={"pdf_path": source},
        )

    try:
        page_count = engine.get_page_count(pdf_file=pdf_path)
    except Exception as e:
        return _failed(
            doc_id=doc_id,
            config=config,
            source=source,
            code="EXTRACT_BACKEND_PAGECOUNT_FAILED",
            message="Failed to read PDF page count",
            detail={"error": repr(e)},
        )

    try:
        selected = parse_page_selection(config.page_selection, page_count=page_count)
    except ValueError as e:
        return _failed(
            doc_id=doc_id,
            config=config,
            source=source,
            code="EXTRACT_BAD_PAGE_SELECTION",
            message="Invalid page_selection",
            detail={"page_selection": config.page_selection, "error": str(e)},
        )

    try:
        pages = engine.extract_pages(pdf_file=pdf_path, scale=config.scale, pages=selected)
    except Exception as e:
        return _failed(
            doc_id=doc_id,
            config=config,
            source=source,
            code="EXTRACT_BACKEND_FAILED",
            message="Text fragment extraction failed",
            detail={"error": repr(e)},
        )

    logger.info("extracted %d page(s) from %s", len(pages), source)
    meta: dict[str, Any] = {
        "scale": config.scale,
        "page_selection": _canonical_page_selection(config.page_selection),
        "page_count": page_count,
        "backend": engine.backend_id(),
        "backend_version": engine.backend_version(),
        "fragments": {f"page_{p.page_num:03d}": len(p.fragments) for p in pages},
    }
    return ExtractResult(
        doc_id=doc_id,
        ok=True,
        engine=config.engine,
        source_relpath=source,
        pages=sorted(pages, key=lambda p: p.page_num),
        errors=[],
        meta=meta,
    )
