from __future__ import annotations

import unittest
from dataclasses import replace

from contracts.fragments import Fragment, FragmentDocument, FragmentPage, Viewport
from reconstruct.artifacts import build_document_payload, serialize_document_payload
from reconstruct.config import ReconstructConfig, RenditionMode
from reconstruct.pipeline import reconstruct_document, reconstruct_page
from reconstruct.render_text import render_grid_text
from reconstruct.report import NO_GROUPS


def _run(text: str, x: float, y: float, width: float, *, sx: float = 10.0, sy: float = 10.0, i: int) -> Fragment:
    # Identity viewport: the box is [x, x + width] x [y, y + sy].
    return Fragment(text=text, transform=(sx, 0.0, 0.0, sy, x, y), width=width, source_index=i)


def _invoice_page(page_num: int = 1) -> FragmentPage:
    runs = [
        ("INVOICE", 0, 0, 70, 30.0),
        ("   ", 0, 40, 30, 10.0),
        ("Name:", 0, 50, 50, 10.0),
        ("Alice", 70, 50, 50, 10.0),
        ("Date:", 0, 80, 50, 10.0),
        ("2024", 70, 80, 40, 10.0),
        ("1 Main St", 300, 50, 90, 10.0),
        ("Springfield", 300, 62, 110, 10.0),
    ]
    return FragmentPage(
        page_num=page_num,
        viewport=Viewport(transform=(1.0, 0.0, 0.0, 1.0, 0.0, 0.0), width=612.0, height=792.0),
        fragments=[_run(t, x, y, w, sy=sy, i=i) for i, (t, x, y, w, sy) in enumerate(runs)],
    )


class TestReconstructPipeline(unittest.TestCase):
    def test_invoice_groups(self) -> None:
        r = reconstruct_page(_invoice_page())

        self.assertTrue(r.ok)
        self.assertEqual([b.text for b in r.blocks], ["1 Main St Springfield"])
        self.assertEqual([(p.label_text, p.value_text) for p in r.pairs], [("Name:", "Alice"), ("Date:", "2024")])
        self.assertEqual([t.text for t in r.titles], ["INVOICE"])
        self.assertEqual(r.median_height, 10.0)
        self.assertEqual(r.meta["dropped_fragments"], [{"source_index": 1, "reason": "WHITESPACE"}])
        self.assertEqual(r.meta["counts"]["fragments_in"], 8)
        self.assertEqual(r.meta["counts"]["fragments_used"], 7)
        self.assertEqual(r.meta["warnings"], [])

    def test_invoice_automatic_text(self) -> None:
        r = reconstruct_page(_invoice_page())
        expected = "\n".join(
            [
                "INVOICE",
                "",
                "",
                "",
                "",
                "Name:" + " " * 3 + "Alice" + " " * 17 + "1 Main St",
                " " * 30 + "Springfield",
                "",
                "Date:" + " " * 2 + "2024",
            ]
        )
        self.assertEqual(r.meta["derived"]["passes"], 2)
        self.assertEqual(render_grid_text(r.grid), expected)

    def test_invoice_simple_text(self) -> None:
        cfg = ReconstructConfig(rendition_mode=RenditionMode.SIMPLE)
        r = reconstruct_page(_invoice_page(), cfg)
        expected = "\n".join(
            [
                "INVOICE",
                "",
                "",
                "",
                "Name:" + " " * 2 + "Alice" + " " * 18 + "1 Main St Springfield",
                "",
                "Date:" + " " * 2 + "2024",
            ]
        )
        self.assertEqual(render_grid_text(r.grid), expected)

    def test_report_sections(self) -> None:
        report = reconstruct_page(_invoice_page()).report

        self.assertIn("--- Vertical Blocks (1) ---", report)
        self.assertIn('  0: "1 Main St"', report)
        self.assertIn('Pair 1: [L: "Name:", V: "Alice"]', report)
        self.assertIn('Title 1: "INVOICE" (Font Height: 30.00, Median: 10.00, Ratio: 2.0)', report)

    def test_parameters_change_grouping(self) -> None:
        cfg = replace(ReconstructConfig(), vertical_proximity=1.0, title_ratio=5.0)
        r = reconstruct_page(_invoice_page(), cfg)
        self.assertEqual(r.blocks, [])
        self.assertEqual(r.titles, [])

    def test_same_input_same_bytes(self) -> None:
        doc = FragmentDocument(
            doc_id="doc_x",
            source_relpath="x.pdf",
            pages=[_invoice_page(2), _invoice_page(1)],
            meta={},
        )

        payload_a = build_document_payload(doc_id=doc.doc_id, source_relpath=doc.source_relpath, results=reconstruct_document(doc))
        payload_b = build_document_payload(doc_id=doc.doc_id, source_relpath=doc.source_relpath, results=reconstruct_document(doc))

        self.assertEqual(serialize_document_payload(payload_a), serialize_document_payload(payload_b))
        self.assertEqual([p["page_num"] for p in payload_a["pages"]], [1, 2])
        self.assertEqual(payload_a["pages"][1]["blocks"][0]["block_id"], "p002_b0000")

    def test_empty_page_keeps_meta_schema(self) -> None:
        empty = FragmentPage(page_num=1, viewport=Viewport(), fragments=[])
        r = reconstruct_page(empty)
        full = reconstruct_page(_invoice_page())

        self.assertTrue(r.ok)
        self.assertEqual(r.report, NO_GROUPS)
        self.assertEqual(r.grid.rows, [])
        self.assertEqual(render_grid_text(r.grid), "")
        self.assertEqual(set(r.meta.keys()), set(full.meta.keys()))
        self.assertEqual(set(r.meta["counts"].keys()), set(full.meta["counts"].keys()))


if __name__ == "__main__":
    unittest.main()
