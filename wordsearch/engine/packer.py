"""
Word-search grid packing.

Places every word of a level along one of 8 straight directions inside a
square grid, letting words cross where their letters agree, then fills the
remaining cells with random letters. The whole process is a pure function of
(size, words, seed): the same level always produces the same puzzle.
"""

import logging
import random
import re
import time
from typing import Dict, List, Optional, Sequence

from .models import Cell, GridResult
from .rng import SeededRandom
from .grid import ALPHABET, DIRECTIONS, blank_grid, empty_letters, to_grid_cells

logger = logging.getLogger(__name__)

MAX_RETRIES = 100
RETRY_SEED_STEP = 7919  # prime; spreads retry seeds apart
TIME_BUDGET_SECONDS = 1.0

_WORD_RE = re.compile(r"^[A-Z]+$")


def max_word_attempts(size: int) -> int:
    """Random placement attempts allowed per word for a grid size."""
    return 150 if size > 6 else 80


def can_place(letters: List[List[str]], word: str, row: int, col: int, dr: int, dc: int) -> bool:
    """Check bounds and compatibility (crossing allowed on identical letters)."""
    size = len(letters)
    for i, ch in enumerate(word):
        r = row + i * dr
        c = col + i * dc
        if r < 0 or r >= size or c < 0 or c >= size:
            return False
        if letters[r][c] and letters[r][c] != ch:
            return False
    return True


def place(letters: List[List[str]], word: str, row: int, col: int, dr: int, dc: int) -> List[Cell]:
    """Write the word on the grid and return its cells in reading order."""
    cells = []
    for i, ch in enumerate(word):
        r = row + i * dr
        c = col + i * dc
        letters[r][c] = ch
        cells.append(Cell(r, c))
    return cells


def _pack_once(size: int, ordered_words: Sequence[str], rng: SeededRandom) -> Optional[GridResult]:
    """One packing attempt; None when some word could not be placed."""
    letters = empty_letters(size)
    placements: Dict[str, List[Cell]] = {}
    attempts_allowed = max_word_attempts(size)

    for word in ordered_words:
        placed = False
        attempts = 0

        while not placed and attempts < attempts_allowed:
            dr, dc = DIRECTIONS[rng.randint(len(DIRECTIONS))]
            row = rng.randint(size)
            col = rng.randint(size)

            if can_place(letters, word, row, col, dr, dc):
                placements[word] = place(letters, word, row, col, dr, dc)
                placed = True
            attempts += 1

        if not placed:
            logger.debug("Could not place '%s' after %d attempts", word, attempts)
            return None

    for r in range(size):
        for c in range(size):
            if not letters[r][c]:
                letters[r][c] = ALPHABET[rng.randint(len(ALPHABET))]

    return GridResult(size=size, grid=to_grid_cells(letters), placements=placements)


def failed_result(size: int) -> GridResult:
    """The degraded result: blank cells and no placements."""
    return GridResult(size=size, grid=blank_grid(size), placements={})


def generate_grid(
    size: int,
    words: Sequence[str],
    seed: Optional[int] = None,
    max_retries: int = MAX_RETRIES,
    time_budget: float = TIME_BUDGET_SECONDS,
) -> GridResult:
    """
    Generate a word-search grid containing every word.

    Each retry derives its own seed (`seed + retry * 7919`) and starts from an
    empty grid. Words are placed longest first. When every retry fails, or
    the time budget runs out, the degraded result is returned instead of
    raising: callers must check `result.is_complete(words)`.

    Args:
        size: Grid side length
        words: Uppercase A-Z words to hide
        seed: Base seed; None draws a fresh random seed per retry
        max_retries: Number of packing attempts
        time_budget: Wall-clock seconds after which no further retry starts

    Returns:
        GridResult with the grid and each word's placement

    Raises:
        ValueError: If the size is not positive or a word is malformed
    """
    if size < 1:
        raise ValueError(f"Grid size must be positive, got {size}")

    for word in words:
        if not _WORD_RE.match(word):
            raise ValueError(f"Words must be uppercase A-Z only, got '{word}'")

    too_long = [w for w in words if len(w) > size]
    if too_long:
        logger.warning("Words longer than grid size %d cannot be placed: %s", size, too_long)
        return failed_result(size)

    ordered_words = sorted(words, key=len, reverse=True)
    started = time.monotonic()

    for retry in range(max_retries):
        if retry > 0 and time.monotonic() - started > time_budget:
            logger.warning(
                "Grid generation exceeded %.2fs after %d retries, giving up",
                time_budget, retry
            )
            break

        if seed is None:
            effective_seed = random.randrange(1 << 32)
        else:
            effective_seed = seed + retry * RETRY_SEED_STEP

        result = _pack_once(size, ordered_words, SeededRandom(effective_seed))
        if result is not None:
            logger.debug(
                "Packed %d words into %dx%d grid (seed=%s, retry=%d)",
                len(ordered_words), size, size, seed, retry
            )
            return result

    logger.warning(
        "Failed to pack %d words into %dx%d grid (seed=%s)",
        len(ordered_words), size, size, seed
    )
    return failed_result(size)
