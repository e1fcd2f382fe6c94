"""Grid generation and selection tracking for word-search puzzles."""

from .models import Cell, GridCell, GridResult
from .rng import SeededRandom, mulberry32, seeded_shuffle
from .packer import generate_grid, MAX_RETRIES, RETRY_SEED_STEP, TIME_BUDGET_SECONDS
from .selection import cells_between, read_letters, match_selection, is_straight_line
from .grid import DIRECTIONS, render_grid, find_word

__all__ = [
    # Models
    "Cell",
    "GridCell",
    "GridResult",
    # Randomness
    "SeededRandom",
    "mulberry32",
    "seeded_shuffle",
    # Packing
    "generate_grid",
    "MAX_RETRIES",
    "RETRY_SEED_STEP",
    "TIME_BUDGET_SECONDS",
    # Selection
    "cells_between",
    "read_letters",
    "match_selection",
    "is_straight_line",
    # Grid utilities
    "DIRECTIONS",
    "render_grid",
    "find_word",
]
