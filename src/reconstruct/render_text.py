from __future__ import annotations

from contracts.layout import GridCell, RenditionGrid


def render_row(cells: list[GridCell]) -> str:
    out: list[str] = []
    last_col = 0
    for cell in sorted(cells, key=lambda c: c.col):
        out.append(" " * max(0, cell.col - last_col))
        out.append(cell.text)
        last_col = cell.col + len(cell.text)
    return "".join(out)


def render_grid_text(grid: RenditionGrid, *, include_warning: bool = False) -> str:
    """
    Plain-text form of the grid. Cells are padded to their columns; an overlapping cell
    is appended directly after the previous one. Leading/trailing whitespace of the whole
    text is stripped.
    """

    text = "".join(render_row(row) + "\n" for row in grid.rows).strip()
    if include_warning and grid.warning:
        return grid.warning + "\n" + text
    return text
