from __future__ import annotations

import logging
from typing import Any

from contracts.fragments import FragmentDocument, FragmentPage
from contracts.layout import ReconstructResult

from .blocks import group_vertical_blocks
from .column_solver import render_automatic, render_simple
from .config import ReconstructConfig, RenditionMode
from .metrics import median_height
from .pairing import consolidate_items, pair_labels_with_values
from .projection import project_fragments
from .report import format_group_report
from .titles import classify_titles

logger = logging.getLogger(__name__)

_ALGORITHM = "blocks_pairs_titles_grid"
_VERSION = "reconstruct_v1"


def _page_meta(
    *,
    cfg: ReconstructConfig,
    derived: dict[str, Any],
    fragments_in: int,
    fragments_used: int,
    blocks: int,
    pairs: int,
    titles: int,
    grid_rows: int,
    dropped_fragments: list[dict[str, Any]],
    warnings: list[dict[str, Any]],
) -> dict[str, Any]:
    # Same schema on every path, including empty pages.
    return {
        "algorithm": _ALGORITHM,
        "version": _VERSION,
        "params": cfg.to_params(),
        "derived": dict(derived),
        "counts": {
            "fragments_in": int(fragments_in),
            "fragments_used": int(fragments_used),
            "blocks": int(blocks),
            "pairs": int(pairs),
            "titles": int(titles),
            "grid_rows": int(grid_rows),
            "dropped_fragments_count": int(len(dropped_fragments)),
            "warnings_count": int(len(warnings)),
        },
        "dropped_fragments": list(dropped_fragments),
        "warnings": list(warnings),
    }


def reconstruct_page(page: FragmentPage, config: ReconstructConfig | None = None) -> ReconstructResult:
    """
    Full recompute for one page: project, group, pair, classify titles, lay out the grid.

    Pure function of (page, config); nothing is retained between calls.
    """

    cfg = config if config is not None else ReconstructConfig()

    fragments, dropped = project_fragments(page)
    blocks = group_vertical_blocks(
        fragments,
        x_threshold=cfg.horizontal_tolerance,
        y_threshold=cfg.vertical_proximity,
        page_num=page.page_num,
    )
    items = consolidate_items(fragments, blocks)
    pairs = pair_labels_with_values(items, y_tolerance=cfg.y_axis_tolerance)

    med_h = median_height(fragments)
    titles = classify_titles(items, pairs, fragments, median_height=med_h, title_ratio=cfg.title_ratio)

    if cfg.rendition_mode == RenditionMode.SIMPLE:
        grid, grid_derived = render_simple(items, fragments)
    else:
        grid, grid_derived = render_automatic(fragments)

    warnings: list[dict[str, Any]] = []
    if grid.warning is not None:
        warnings.append(
            {
                "code": "RECON_SOLVER_MAX_PASSES",
                "message": "Column solver reached its pass cap; layout may be imprecise.",
                "detail": {"passes": grid_derived.get("passes")},
            }
        )

    report = format_group_report(
        fragments=fragments,
        blocks=blocks,
        pairs=pairs,
        titles=titles,
        median_height=med_h,
        title_ratio=cfg.title_ratio,
    )

    logger.debug(
        "page %d: fragments=%d blocks=%d pairs=%d titles=%d rows=%d",
        page.page_num,
        len(fragments),
        len(blocks),
        len(pairs),
        len(titles),
        len(grid.rows),
    )

    meta = _page_meta(
        cfg=cfg,
        derived={"median_height": med_h, **grid_derived},
        fragments_in=len(page.fragments),
        fragments_used=len(fragments),
        blocks=len(blocks),
        pairs=len(pairs),
        titles=len(titles),
        grid_rows=len(grid.rows),
        dropped_fragments=dropped,
        warnings=warnings,
    )

    return ReconstructResult(
        ok=True,
        page_num=page.page_num,
        errors=[],
        meta=meta,
        fragments=fragments,
        blocks=blocks,
        items=items,
        pairs=pairs,
        titles=titles,
        median_height=med_h,
        grid=grid,
        report=report,
    )


def reconstruct_document(doc: FragmentDocument, config: ReconstructConfig | None = None) -> list[ReconstructResult]:
    # Pages are independent; order follows page_num.
    return [reconstruct_page(p, config) for p in sorted(doc.pages, key=lambda p: p.page_num)]
