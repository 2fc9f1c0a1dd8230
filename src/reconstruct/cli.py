from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

from contracts.layout import ReconstructError

from .artifacts import (
    build_document_payload,
    load_fragment_document,
    write_result_json_artifact,
    write_text_artifact,
)
from .config import ReconstructConfig, RenditionMode, load_settings, save_settings
from .pipeline import reconstruct_document

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="layout-reconstruct",
        description="Reconstruct spatially faithful plain text from positioned text fragments.",
    )
    p.add_argument("--input", required=True, type=Path, help="Fragment JSON artifact (layout-extract output).")
    p.add_argument("--output", required=True, type=Path, help="Path to write the reconstruction JSON artifact.")
    p.add_argument("--text", type=Path, default=None, help="Optional path to write the plain-text rendition.")
    p.add_argument("--settings", type=Path, default=None, help="Optional settings JSON to merge over defaults.")
    p.add_argument("--export-settings", type=Path, default=None, help="Write the effective settings to this file.")
    p.add_argument("--mode", choices=[m.value for m in RenditionMode], default=None)
    p.add_argument("--horizontal-tolerance", type=float, default=None)
    p.add_argument("--vertical-proximity", type=float, default=None)
    p.add_argument("--y-axis-tolerance", type=float, default=None)
    p.add_argument("--title-ratio", type=float, default=None)
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def resolve_config(args: argparse.Namespace) -> ReconstructConfig:
    cfg = load_settings(args.settings) if args.settings is not None else ReconstructConfig()
    overrides: dict[str, Any] = {}
    if args.mode is not None:
        overrides["rendition_mode"] = RenditionMode(args.mode)
    for attr in ("horizontal_tolerance", "vertical_proximity", "y_axis_tolerance", "title_ratio"):
        v = getattr(args, attr)
        if v is not None:
            overrides[attr] = v
    cfg = replace(cfg, **overrides)
    cfg.validate()
    return cfg


def _fail(args: argparse.Namespace, err: ReconstructError) -> int:
    logger.error("%s: %s", err.code, err.message)
    payload = build_document_payload(doc_id=None, source_relpath=str(args.input), results=[], errors=[err])
    write_result_json_artifact(payload=payload, out_file=args.output)
    print(json.dumps({"ok": False, "errors": [err.code]}, sort_keys=True, separators=(",", ":")))
    return 2


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        cfg = resolve_config(args)
    except (OSError, ValueError) as e:
        # JSONDecodeError from a malformed settings file is a ValueError.
        return _fail(
            args,
            ReconstructError(
                code="RECON_CONFIG_INVALID",
                message="Invalid reconstruction settings",
                detail={"settings": None if args.settings is None else str(args.settings), "error": repr(e)},
            ),
        )
    if args.export_settings is not None:
        save_settings(cfg, args.export_settings)

    doc, err = load_fragment_document(args.input)
    if err is not None:
        return _fail(args, err)

    results = reconstruct_document(doc, cfg)
    payload = build_document_payload(doc_id=doc.doc_id, source_relpath=doc.source_relpath, results=results)
    write_result_json_artifact(payload=payload, out_file=args.output)
    if args.text is not None:
        write_text_artifact(results=results, out_file=args.text)

    summary = {
        "ok": payload["ok"],
        "pages": len(results),
        "blocks": sum(len(r.blocks) for r in results),
        "pairs": sum(len(r.pairs) for r in results),
        "titles": sum(len(r.titles) for r in results),
        "warnings": sum(len(r.meta["warnings"]) for r in results),
    }
    print(json.dumps(summary, sort_keys=True, separators=(",", ":"), ensure_ascii=False))

    return 0 if payload["ok"] else 2


if __name__ == "__main__":
    raise SystemExit(main())
