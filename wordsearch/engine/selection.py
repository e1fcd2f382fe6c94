"""Mapping drag gestures to straight lines of grid cells."""

from typing import List, Optional, Sequence, Tuple

from .models import Cell, GridCell
from .grid import DIRECTIONS, in_bounds, read_cells


def cells_between(
    start: Tuple[int, int],
    end: Tuple[int, int],
    grid_size: Optional[int] = None,
) -> List[Cell]:
    """
    Cells on the straight line from `start` to `end`, inclusive.

    Horizontal, vertical and exact 45 degree diagonals are accepted. Any
    other drag collapses to the start cell alone.

    Raises:
        ValueError: If `grid_size` is given and a coordinate falls outside it
    """
    start = Cell(*start)
    end = Cell(*end)

    if grid_size is not None:
        for point in (start, end):
            if not in_bounds(point, grid_size):
                raise ValueError(f"Cell {tuple(point)} outside {grid_size}x{grid_size} grid")

    dr = end.row - start.row
    dc = end.col - start.col
    steps = max(abs(dr), abs(dc))

    if steps == 0:
        return [start]

    if dr != 0 and dc != 0 and abs(dr) != abs(dc):
        return [start]

    ir = dr // steps if dr else 0
    ic = dc // steps if dc else 0
    return [Cell(start.row + i * ir, start.col + i * ic) for i in range(steps + 1)]


def read_letters(grid: List[List[GridCell]], cells: Sequence[Tuple[int, int]]) -> str:
    """Letters along a selection, in selection order."""
    return read_cells(grid, cells)


def match_selection(letters: str, candidates: Sequence[str]) -> Optional[str]:
    """Return the candidate spelled by `letters` forward, else reversed."""
    if not letters:
        return None
    if letters in candidates:
        return letters
    backwards = letters[::-1]
    if backwards in candidates:
        return backwards
    return None


def is_straight_line(cells: Sequence[Tuple[int, int]]) -> bool:
    """Check that consecutive cells advance by one constant direction step."""
    if len(cells) < 2:
        return True

    step = (cells[1][0] - cells[0][0], cells[1][1] - cells[0][1])
    if step not in DIRECTIONS:
        return False

    return all(
        (b[0] - a[0], b[1] - a[1]) == step
        for a, b in zip(cells, cells[1:])
    )
