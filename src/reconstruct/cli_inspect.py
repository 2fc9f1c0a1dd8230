from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from .artifacts import load_fragment_document
from .inspector import fragment_at_point, inspect_neighbors
from .projection import project_fragments
from .report import format_inspection


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="layout-inspect",
        description="Explain row and column decisions around one fragment (search zones + chosen successor).",
    )
    p.add_argument("--input", required=True, type=Path, help="Fragment JSON artifact.")
    p.add_argument("--page", type=int, default=None, help="page_num to inspect (default: first page).")
    sel = p.add_mutually_exclusive_group(required=True)
    sel.add_argument("--index", type=int, help="Arena index of the fragment (whitespace fragments excluded).")
    sel.add_argument("--point", type=float, nargs=2, metavar=("X", "Y"), help="Viewport pixel coordinate.")
    p.add_argument("--json", action="store_true", help="Print the inspection as JSON instead of text.")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    doc, err = load_fragment_document(args.input)
    if err is not None:
        print(f"{err.code}: {err.message} ({args.input})")
        return 2
    pages = sorted(doc.pages, key=lambda p: p.page_num)
    if args.page is not None:
        pages = [p for p in pages if p.page_num == args.page]
    if not pages:
        print(f"no page to inspect in {args.input}")
        return 2
    page = pages[0]

    fragments, _dropped = project_fragments(page)
    if args.point is not None:
        selected = fragment_at_point(fragments, args.point[0], args.point[1])
        if selected is None:
            print(f"no fragment at ({args.point[0]}, {args.point[1]})")
            return 2
    else:
        selected = args.index
        if not 0 <= selected < len(fragments):
            print(f"fragment index out of range: {selected} (0..{len(fragments) - 1})")
            return 2

    inspection = inspect_neighbors(fragments, selected, page_width=page.viewport.width)
    if args.json:
        print(json.dumps(inspection.to_dict(), sort_keys=True, indent=2, ensure_ascii=False))
    else:
        print(format_inspection(inspection, fragments), end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
