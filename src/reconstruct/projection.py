from __future__ import annotations

from typing import Any, Sequence

from contracts.fragments import BBox, FragmentPage, PositionedFragment

Matrix = Sequence[float]

# Local glyph box height in text space units (one em).
_LOCAL_HEIGHT = 1.0


def _multiply(m: Matrix, n: Matrix) -> tuple[float, float, float, float, float, float]:
    # m x n for affine [a, b, c, d, e, f] matrices (column-vector convention).
    return (
        m[0] * n[0] + m[2] * n[1],
        m[1] * n[0] + m[3] * n[1],
        m[0] * n[2] + m[2] * n[3],
        m[1] * n[2] + m[3] * n[3],
        m[0] * n[4] + m[2] * n[5] + m[4],
        m[1] * n[4] + m[3] * n[5] + m[5],
    )


def _apply(m: Matrix, x: float, y: float) -> tuple[float, float]:
    return (m[0] * x + m[2] * y + m[4], m[1] * x + m[3] * y + m[5])


def project_bbox(transform: Matrix, width: float, viewport_transform: Matrix) -> BBox:
    """
    Axis-aligned box of one fragment in viewport pixel space.

    The text axis points up, the viewport axis points down: the local y column (c, d)
    is negated before composing with the viewport transform. The glyph run spans
    (0, 0)..(width / x_scale, -1) in local units.
    """

    local = (transform[0], transform[1], -transform[2], -transform[3], transform[4], transform[5])
    m = _multiply(viewport_transform, local)

    x_scale = transform[0]
    local_width = width / x_scale if x_scale != 0 else 0.0

    corners = [
        _apply(m, 0.0, 0.0),
        _apply(m, local_width, 0.0),
        _apply(m, local_width, -_LOCAL_HEIGHT),
        _apply(m, 0.0, -_LOCAL_HEIGHT),
    ]
    xs = [p[0] for p in corners]
    ys = [p[1] for p in corners]
    return BBox(x0=min(xs), y0=min(ys), x1=max(xs), y1=max(ys))


def project_fragments(page: FragmentPage) -> tuple[list[PositionedFragment], list[dict[str, Any]]]:
    """
    Drop whitespace-only fragments, then project the rest.

    Returns (positioned fragments in input order, dropped-fragment records).
    Arena indices are assigned after filtering.
    """

    positioned: list[PositionedFragment] = []
    dropped: list[dict[str, Any]] = []
    for frag in page.fragments:
        if frag.text.strip() == "":
            dropped.append({"source_index": frag.source_index, "reason": "WHITESPACE"})
            continue
        bbox = project_bbox(frag.transform, frag.width, page.viewport.transform)
        positioned.append(
            PositionedFragment(index=len(positioned), source_index=frag.source_index, text=frag.text, bbox=bbox)
        )
    return positioned, dropped
