"""Grid building and rendering utilities."""

from typing import Dict, List, Optional, Sequence, Tuple

from .models import Cell, GridCell

# 8 straight-line directions as (row delta, col delta), in draw order
DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (0, 1), (1, 0), (1, 1), (-1, 1),
    (0, -1), (-1, 0), (-1, -1), (1, -1),
)

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def empty_letters(size: int) -> List[List[str]]:
    """A size x size matrix of empty letters."""
    return [["" for _ in range(size)] for _ in range(size)]


def blank_grid(size: int) -> List[List[GridCell]]:
    """A size x size grid with no letters (the failure sentinel)."""
    return [[GridCell(letter="", row=r, col=c) for c in range(size)] for r in range(size)]


def to_grid_cells(letters: List[List[str]]) -> List[List[GridCell]]:
    """Convert a letter matrix into GridCell rows."""
    return [
        [GridCell(letter=letter, row=r, col=c) for c, letter in enumerate(row)]
        for r, row in enumerate(letters)
    ]


def in_bounds(cell: Tuple[int, int], size: int) -> bool:
    """Check that a coordinate lies inside a size x size grid."""
    return 0 <= cell[0] < size and 0 <= cell[1] < size


def read_cells(grid: List[List[GridCell]], cells: Sequence[Tuple[int, int]]) -> str:
    """Join the letters found along `cells`."""
    return "".join(grid[r][c].letter for r, c in cells)


def render_grid(
    grid: List[List[GridCell]],
    highlight: Optional[Dict[str, List[Cell]]] = None,
) -> str:
    """
    Render the grid to a string, one row per line.

    When `highlight` placements are given, cells outside every placement
    are shown as '.' (a solution view).
    """
    if not grid:
        return ""

    keep = None
    if highlight is not None:
        keep = {tuple(cell) for cells in highlight.values() for cell in cells}

    lines = []
    for r, row in enumerate(grid):
        letters = []
        for c, cell in enumerate(row):
            if keep is not None and (r, c) not in keep:
                letters.append(".")
            else:
                letters.append(cell.letter or "?")
        lines.append(" ".join(letters))

    return "\n".join(lines)


def find_word(grid: List[List[GridCell]], word: str) -> List[List[Cell]]:
    """Find every straight-line occurrence of `word` in the grid."""
    size = len(grid)
    hits: List[List[Cell]] = []
    if not word:
        return hits

    for r in range(size):
        for c in range(size):
            if grid[r][c].letter != word[0]:
                continue
            for dr, dc in DIRECTIONS:
                cells = [Cell(r + i * dr, c + i * dc) for i in range(len(word))]
                if not in_bounds(cells[-1], size):
                    continue
                if read_cells(grid, cells) == word:
                    hits.append(cells)
                # single-letter words match once, not once per direction
                if len(word) == 1 and hits:
                    break

    return hits
