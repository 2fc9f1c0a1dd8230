from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .artifacts import write_fragments_json
from .contracts import ExtractConfig
from .module import run_extract_fragments


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="layout-extract",
        description="Extract positioned text fragments (text + transform + width) and the page viewport from a PDF.",
    )
    p.add_argument("--pdf", required=True, type=Path, help="Input PDF file.")
    p.add_argument("--out", required=True, type=Path, help="Output fragment JSON file.")
    p.add_argument("--scale", type=float, default=1.5, help="Viewport scale (pixels per PDF point).")
    p.add_argument(
        "--pages",
        default="1",
        help='Page selection like "1,3-5"; "all" for every page. Default: first page.',
    )
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    config = ExtractConfig(
        scale=args.scale,
        page_selection=None if args.pages.strip().lower() == "all" else args.pages,
    )
    result = run_extract_fragments(config=config, pdf_path=args.pdf)
    write_fragments_json(result=result, out_file=args.out)

    n_fragments = sum(len(p.fragments) for p in result.pages)
    print(f"doc_id={result.doc_id} pages={len(result.pages)} fragments={n_fragments} ok={result.ok}")
    return 0 if result.ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
