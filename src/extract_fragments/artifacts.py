from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .contracts import ExtractResult


def serialize_extract_result(result: ExtractResult) -> str:
    payload: dict[str, Any] = result.to_dict()
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def write_fragments_json(*, result: ExtractResult, out_file: Path) -> None:
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(serialize_extract_result(result), encoding="utf-8")
