"""
Deterministic level and world derivation.

A level is a pure function of its id and language: its world (block) picks the
category, its position in the block picks the difficulty tier, and the level
id seeds the word selection. Grid packing later reuses the same id as its own
seed, so one integer reproduces the whole puzzle.
"""

import logging
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from ..engine.rng import seeded_shuffle
from .models import BlockSummary, Level, LevelBlock, Tier, Trophy
from .word_bank import WordBank, get_word_bank

logger = logging.getLogger(__name__)

LEVELS_PER_BLOCK = 50
TOTAL_LEVELS = 1000
TOTAL_BLOCKS = (TOTAL_LEVELS + LEVELS_PER_BLOCK - 1) // LEVELS_PER_BLOCK

# (first index in block, tier) in ascending order
DIFFICULTY_TIERS: List[Tuple[int, Tier]] = [
    (0, Tier("Easy", 4, 3, 10)),
    (10, Tier("Medium", 5, 4, 15)),
    (25, Tier("Hard", 6, 6, 20)),
    (40, Tier("Expert", 8, 8, 25)),
]

# Seconds allowed for (3 stars, 2 stars); anything slower earns 1 star
STAR_THRESHOLDS: Dict[str, Tuple[int, int]] = {
    "Easy": (30, 60),
    "Medium": (45, 90),
    "Hard": (75, 150),
    "Expert": (120, 240),
}


def clamp_level_id(level_id: int) -> int:
    """Clamp a level id into [1, TOTAL_LEVELS]."""
    return max(1, min(int(level_id), TOTAL_LEVELS))


def block_index_for_level(level_id: int) -> int:
    """Index of the block containing a level."""
    return (clamp_level_id(level_id) - 1) // LEVELS_PER_BLOCK


def tier_for_index(index_in_block: int) -> Tier:
    """Difficulty tier for a position inside a block."""
    chosen = DIFFICULTY_TIERS[0][1]
    for first_index, tier in DIFFICULTY_TIERS:
        if index_in_block >= first_index:
            chosen = tier
    return chosen


def calculate_stars(
    time_elapsed: int,
    difficulty: str,
    thresholds: Optional[Dict[str, Tuple[int, int]]] = None,
) -> int:
    """
    Stars earned for finishing a level in `time_elapsed` seconds.

    Both thresholds are inclusive: finishing exactly on the 3-star limit
    still earns 3 stars.
    """
    thresholds = thresholds or STAR_THRESHOLDS
    three, two = thresholds[difficulty]

    if time_elapsed <= three:
        return 3
    if time_elapsed <= two:
        return 2
    return 1


class LevelCatalog:
    """
    Memoising accessor for levels and worlds.

    Construct once and pass it to consumers. Results are cached per
    (language, id); `invalidate` drops a language partition.

    Attributes:
        language: Default language for lookups
        word_bank: Source of words and localized labels
    """

    def __init__(self, language: str = "en", word_bank: Optional[WordBank] = None):
        self.word_bank = word_bank or get_word_bank()
        self.language = self.word_bank.resolve_language(language)
        self._levels: Dict[Tuple[str, int], Level] = {}
        self._blocks: Dict[Tuple[str, int], LevelBlock] = {}

    def _lang(self, language: Optional[str]) -> str:
        if language is None:
            return self.language
        return self.word_bank.resolve_language(language)

    @property
    def cached_levels(self) -> int:
        return len(self._levels)

    @property
    def cached_blocks(self) -> int:
        return len(self._blocks)

    def generate_level(self, level_id: int, language: Optional[str] = None) -> Level:
        """
        Derive a level from its id.

        Out-of-range ids are clamped into [1, TOTAL_LEVELS].

        Args:
            level_id: 1-based level id
            language: Word bank language (defaults to the catalog's)

        Returns:
            The (cached) Level
        """
        lang = self._lang(language)
        safe_id = clamp_level_id(level_id)
        if safe_id != level_id:
            logger.warning("Level id %s out of range, clamped to %d", level_id, safe_id)

        key = (lang, safe_id)
        if key in self._levels:
            return self._levels[key]

        block_index = (safe_id - 1) // LEVELS_PER_BLOCK
        index_in_block = (safe_id - 1) % LEVELS_PER_BLOCK

        categories = self.word_bank.category_keys()
        category = categories[block_index % len(categories)]
        tier = tier_for_index(index_in_block)

        pool = [w for w in self.word_bank.words(category, lang) if len(w) <= tier.grid_size]
        words = seeded_shuffle(pool, safe_id)[:tier.word_count]

        level = Level(
            id=safe_id,
            title=self.word_bank.category_name(category, lang),
            category=category,
            words=tuple(words),
            grid_size=tier.grid_size,
            difficulty=tier.difficulty,
            reward_coins=tier.reward_coins,
            language=lang,
        )

        self._levels[key] = level
        return level

    def get_block_metadata(self, block_index: int, language: Optional[str] = None) -> BlockSummary:
        """World id, name, trophy and level range without generating levels."""
        self._check_block_index(block_index)
        lang = self._lang(language)

        world_name = self.word_bank.world_name(block_index, lang)
        block_id = f"block_{block_index + 1}"
        text = self.word_bank.trophy(lang)

        trophy = Trophy(
            id=f"trophy_{block_id}",
            name=text.title.format(world=world_name),
            icon="Trophy",
            description=text.description.format(world=world_name),
            unlocked_at_block_id=block_id,
        )

        first = block_index * LEVELS_PER_BLOCK + 1
        last = min((block_index + 1) * LEVELS_PER_BLOCK, TOTAL_LEVELS)

        return BlockSummary(
            id=block_id,
            index=block_index,
            name=world_name,
            trophy=trophy,
            level_range=(first, last),
        )

    def get_block(self, block_index: int, language: Optional[str] = None) -> LevelBlock:
        """A complete world with all its levels (generated on first access)."""
        lang = self._lang(language)
        key = (lang, block_index)
        if key in self._blocks:
            return self._blocks[key]

        meta = self.get_block_metadata(block_index, lang)
        first, last = meta.level_range
        levels = tuple(self.generate_level(level_id, lang) for level_id in range(first, last + 1))

        block = LevelBlock(
            id=meta.id,
            index=block_index,
            name=meta.name,
            levels=levels,
            trophy=meta.trophy,
        )

        self._blocks[key] = block
        return block

    def get_block_for_level(self, level_id: int, language: Optional[str] = None) -> LevelBlock:
        return self.get_block(block_index_for_level(level_id), language)

    def get_level_with_block(self, level_id: int, language: Optional[str] = None) -> Tuple[Level, LevelBlock]:
        """A level together with the world that contains it."""
        level = self.generate_level(level_id, language)
        block = self.get_block_for_level(level.id, language)
        return level, block

    def get_block_list(self, language: Optional[str] = None) -> List[BlockSummary]:
        """Lightweight listing of every world."""
        return [self.get_block_metadata(i, language) for i in range(TOTAL_BLOCKS)]

    def iter_blocks(self, language: Optional[str] = None) -> Iterator[LevelBlock]:
        """Iterate over all worlds in order, generating each on demand."""
        for i in range(TOTAL_BLOCKS):
            yield self.get_block(i, language)

    def find_level(
        self,
        predicate: Callable[[Level], bool],
        language: Optional[str] = None,
    ) -> Optional[Level]:
        """First level (in id order) matching `predicate`."""
        for level_id in range(1, TOTAL_LEVELS + 1):
            level = self.generate_level(level_id, language)
            if predicate(level):
                return level
        return None

    def preload_levels(self, start_id: int, count: int = 5, language: Optional[str] = None) -> None:
        """Warm the cache for upcoming levels."""
        for level_id in range(start_id, min(start_id + count, TOTAL_LEVELS + 1)):
            self.generate_level(level_id, language)

    def invalidate(self, language: Optional[str] = None) -> None:
        """Drop cached levels and blocks for one language, or all of them."""
        if language is None:
            self._levels.clear()
            self._blocks.clear()
            return

        lang = self.word_bank.resolve_language(language)
        self._levels = {k: v for k, v in self._levels.items() if k[0] != lang}
        self._blocks = {k: v for k, v in self._blocks.items() if k[0] != lang}

    def set_language(self, language: str) -> None:
        """Switch the default language, dropping the old language's cache."""
        old = self.language
        self.language = self.word_bank.resolve_language(language)
        if old != self.language:
            self.invalidate(old)

    @staticmethod
    def _check_block_index(block_index: int) -> None:
        if not 0 <= block_index < TOTAL_BLOCKS:
            raise ValueError(f"Block index {block_index} out of range [0, {TOTAL_BLOCKS})")
