from __future__ import annotations

import ctypes
from pathlib import Path
from typing import Iterator

from contracts.fragments import Fragment, FragmentPage, Viewport

from .base import FragmentExtractionEngine

Matrix = tuple[float, float, float, float, float, float]

_IDENTITY: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)
_MAX_FORM_DEPTH = 15


def _viewport_transform(bbox: tuple[float, float, float, float], scale: float) -> tuple[float, ...]:
    # Flip the upward PDF y axis and move the page's top-left corner to the origin.
    left, _bottom, _right, top = bbox
    return (scale, 0.0, 0.0, -scale, -left * scale, top * scale)


def _compose(outer: Matrix, inner: Matrix) -> Matrix:
    # outer x inner: apply `inner` first, then `outer`.
    return (
        outer[0] * inner[0] + outer[2] * inner[1],
        outer[1] * inner[0] + outer[3] * inner[1],
        outer[0] * inner[2] + outer[2] * inner[3],
        outer[1] * inner[2] + outer[3] * inner[3],
        outer[0] * inner[4] + outer[2] * inner[5] + outer[4],
        outer[1] * inner[4] + outer[3] * inner[5] + outer[5],
    )


def _bounds_width(bounds: tuple[float, float, float, float], m: Matrix) -> float:
    # Horizontal extent of a container-space box once mapped to page space.
    left, bottom, right, top = bounds
    xs = [m[0] * x + m[2] * y + m[4] for x, y in ((left, bottom), (right, bottom), (right, top), (left, top))]
    return max(xs) - min(xs)


class Pypdfium2Engine(FragmentExtractionEngine):
    def backend_id(self) -> str:
        return "pypdfium2"

    def backend_version(self) -> str | None:
        try:
            import pypdfium2.version as pdfium_version  # type: ignore

            return str(pdfium_version.PYPDFIUM_INFO)
        except (ImportError, AttributeError):
            return None

    def _require_pdfium(self):
        try:
            import pypdfium2 as pdfium  # type: ignore
            import pypdfium2.raw as pdfium_c  # type: ignore

            return pdfium, pdfium_c
        except ImportError as e:
            raise RuntimeError("Missing dependency: pypdfium2 is required for fragment extraction.") from e

    def get_page_count(self, *, pdf_file: Path) -> int:
        pdfium, _ = self._require_pdfium()
        doc = pdfium.PdfDocument(str(pdf_file))
        try:
            return len(doc)
        finally:
            doc.close()

    def extract_pages(self, *, pdf_file: Path, scale: float, pages: list[int]) -> list[FragmentPage]:
        pdfium, pdfium_c = self._require_pdfium()
        doc = pdfium.PdfDocument(str(pdf_file))
        try:
            page_count = len(doc)
            out: list[FragmentPage] = []
            for page_num in pages:
                if page_num < 1 or page_num > page_count:
                    raise ValueError(f"Page out of range: {page_num} (1..{page_count})")
                out.append(self._extract_page(doc[page_num - 1], page_num, scale, pdfium_c))
            return out
        finally:
            doc.close()

    def _extract_page(self, page, page_num: int, scale: float, pdfium_c) -> FragmentPage:
        # Page rotation is not applied; the viewport is the unrotated crop box.
        bbox = tuple(float(v) for v in page.get_bbox())
        left, bottom, right, top = bbox
        viewport = Viewport(
            transform=_viewport_transform(bbox, scale),
            width=(right - left) * scale,
            height=(top - bottom) * scale,
        )

        fragments: list[Fragment] = []
        textpage = page.get_textpage()
        try:
            for raw_obj, container in self._iter_text_objects(page.raw, pdfium_c):
                text = self._object_text(raw_obj, textpage.raw, pdfium_c)
                font_size = self._font_size(raw_obj, pdfium_c)
                a, b, c, d, e, f = _compose(container, self._matrix(raw_obj, pdfium_c))
                fragments.append(
                    Fragment(
                        text=text,
                        # Glyph space is one em; fold the font size into the linear part.
                        transform=(a * font_size, b * font_size, c * font_size, d * font_size, e, f),
                        width=_bounds_width(self._bounds(raw_obj, pdfium_c), container),
                        source_index=len(fragments),
                    )
                )
        finally:
            textpage.close()
        return FragmentPage(page_num=page_num, viewport=viewport, fragments=fragments)

    def _iter_text_objects(self, page_raw, pdfium_c) -> Iterator[tuple[object, Matrix]]:
        """
        Yield (text object, container -> page matrix) in content order.

        Objects inside a Form XObject report their matrix and bounds in form space, so
        every enclosing form matrix is composed into the container matrix.
        """

        for i in range(pdfium_c.FPDFPage_CountObjects(page_raw)):
            yield from self._visit(pdfium_c.FPDFPage_GetObject(page_raw, i), _IDENTITY, 0, pdfium_c)

    def _visit(self, raw_obj, container: Matrix, depth: int, pdfium_c) -> Iterator[tuple[object, Matrix]]:
        kind = pdfium_c.FPDFPageObj_GetType(raw_obj)
        if kind == pdfium_c.FPDF_PAGEOBJ_TEXT:
            yield raw_obj, container
        elif kind == pdfium_c.FPDF_PAGEOBJ_FORM and depth < _MAX_FORM_DEPTH:
            inner = _compose(container, self._matrix(raw_obj, pdfium_c))
            for i in range(pdfium_c.FPDFFormObj_CountObjects(raw_obj)):
                yield from self._visit(pdfium_c.FPDFFormObj_GetObject(raw_obj, i), inner, depth + 1, pdfium_c)

    @staticmethod
    def _matrix(raw_obj, pdfium_c) -> Matrix:
        m = pdfium_c.FS_MATRIX()
        if not pdfium_c.FPDFPageObj_GetMatrix(raw_obj, ctypes.byref(m)):
            return _IDENTITY
        return (float(m.a), float(m.b), float(m.c), float(m.d), float(m.e), float(m.f))

    @staticmethod
    def _bounds(raw_obj, pdfium_c) -> tuple[float, float, float, float]:
        left, bottom, right, top = (ctypes.c_float(0.0) for _ in range(4))
        ok = pdfium_c.FPDFPageObj_GetBounds(
            raw_obj, ctypes.byref(left), ctypes.byref(bottom), ctypes.byref(right), ctypes.byref(top)
        )
        if not ok:
            return (0.0, 0.0, 0.0, 0.0)
        return (float(left.value), float(bottom.value), float(right.value), float(top.value))

    @staticmethod
    def _font_size(raw_obj, pdfium_c) -> float:
        size = ctypes.c_float(0.0)
        if not pdfium_c.FPDFTextObj_GetFontSize(raw_obj, ctypes.byref(size)):
            return 1.0
        return float(size.value) or 1.0

    @staticmethod
    def _object_text(raw_obj, textpage_raw, pdfium_c) -> str:
        # Two-call protocol: size query, then fill. Length is in bytes of UTF-16LE incl. NUL.
        n_bytes = pdfium_c.FPDFTextObj_GetText(raw_obj, textpage_raw, None, 0)
        if n_bytes <= 2:
            return ""
        buffer = ctypes.create_string_buffer(n_bytes)
        buffer_ptr = ctypes.cast(buffer, ctypes.POINTER(ctypes.c_ushort))
        pdfium_c.FPDFTextObj_GetText(raw_obj, textpage_raw, buffer_ptr, n_bytes)
        return buffer.raw[: n_bytes - 2].decode("utf-16-le", errors="replace")
