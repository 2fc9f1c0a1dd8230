from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from contracts.fragments import FragmentDocument
from contracts.layout import ReconstructError, ReconstructResult

from .render_text import render_grid_text


def _stable_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"), indent=2) + "\n"


def build_document_payload(
    *,
    doc_id: str | None,
    source_relpath: str | None,
    results: list[ReconstructResult],
    errors: list[ReconstructError] | None = None,
) -> dict[str, Any]:
    errs = list(errors or [])
    return {
        "doc_id": doc_id,
        "source_relpath": source_relpath,
        "ok": not errs and all(r.ok for r in results),
        "errors": [e.to_dict() for e in errs],
        "pages": [r.to_dict() for r in results],
    }


def serialize_document_payload(payload: dict[str, Any]) -> str:
    return _stable_json(payload)


def write_result_json_artifact(*, payload: dict[str, Any], out_file: Path) -> None:
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(serialize_document_payload(payload), encoding="utf-8")


def write_text_artifact(*, results: list[ReconstructResult], out_file: Path, include_warning: bool = True) -> None:
    # Pages are separated by a form feed, like pdftotext output.
    pages = [render_grid_text(r.grid, include_warning=include_warning) for r in results]
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text("\f".join(pages) + "\n", encoding="utf-8")


def load_fragment_document(path: Path) -> tuple[FragmentDocument | None, ReconstructError | None]:
    """
    Read a fragment JSON artifact. Failures come back as a coded error, never raised.
    """

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None, ReconstructError(
            code="RECON_INPUT_NOT_FOUND",
            message="Fragment artifact not found",
            detail={"input": str(path)},
        )
    except json.JSONDecodeError as e:
        return None, ReconstructError(
            code="RECON_INPUT_INVALID_JSON",
            message="Failed to parse fragment JSON",
            detail={"input": str(path), "error": repr(e)},
        )

    if not isinstance(raw, dict):
        return None, ReconstructError(
            code="RECON_INPUT_BAD_SHAPE",
            message="Fragment artifact must be a JSON object",
            detail={"input": str(path)},
        )
    try:
        return FragmentDocument.from_dict(raw), None
    except (KeyError, TypeError, ValueError) as e:
        return None, ReconstructError(
            code="RECON_INPUT_BAD_SHAPE",
            message="Fragment artifact is missing required fields",
            detail={"input": str(path), "error": repr(e)},
        )
