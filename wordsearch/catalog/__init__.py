"""Level and world catalog derived from the curated word bank."""

from .models import Difficulty, Language, Tier, Level, Trophy, LevelBlock, BlockSummary
from .levels import (
    LevelCatalog,
    calculate_stars,
    clamp_level_id,
    block_index_for_level,
    tier_for_index,
    DIFFICULTY_TIERS,
    STAR_THRESHOLDS,
    LEVELS_PER_BLOCK,
    TOTAL_LEVELS,
    TOTAL_BLOCKS,
)
from .word_bank import WordBank, load_word_bank, get_word_bank

__all__ = [
    # Models
    "Difficulty",
    "Language",
    "Tier",
    "Level",
    "Trophy",
    "LevelBlock",
    "BlockSummary",
    # Catalog
    "LevelCatalog",
    "calculate_stars",
    "clamp_level_id",
    "block_index_for_level",
    "tier_for_index",
    "DIFFICULTY_TIERS",
    "STAR_THRESHOLDS",
    "LEVELS_PER_BLOCK",
    "TOTAL_LEVELS",
    "TOTAL_BLOCKS",
    # Word bank
    "WordBank",
    "load_word_bank",
    "get_word_bank",
]
