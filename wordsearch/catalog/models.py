"""Data models for levels and worlds."""

from typing import List, Literal, NamedTuple, Tuple
from pydantic import BaseModel, ConfigDict, Field


Difficulty = Literal["Easy", "Medium", "Hard", "Expert"]
Language = Literal["en", "es"]


class Tier(NamedTuple):
    """Difficulty tier parameters for a range of positions inside a block."""
    difficulty: str
    grid_size: int
    word_count: int
    reward_coins: int


class Level(BaseModel):
    """A single puzzle, derived purely from its id and language."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1)
    title: str
    category: str
    words: Tuple[str, ...]
    grid_size: int = Field(..., ge=1)
    difficulty: Difficulty
    reward_coins: int = Field(..., ge=0)
    language: Language = "en"


class Trophy(BaseModel):
    """Reward for completing every level of a world."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    icon: str = "Trophy"
    description: str
    unlocked_at_block_id: str


class BlockSummary(BaseModel):
    """World metadata without its levels, for listings."""
    model_config = ConfigDict(frozen=True)

    id: str
    index: int = Field(..., ge=0)
    name: str
    trophy: Trophy
    level_range: Tuple[int, int]


class LevelBlock(BaseModel):
    """A world: a contiguous run of levels sharing a theme and a trophy."""
    model_config = ConfigDict(frozen=True)

    id: str
    index: int = Field(..., ge=0)
    name: str
    levels: Tuple[Level, ...]
    trophy: Trophy

    @property
    def level_range(self) -> Tuple[int, int]:
        """First and last level id of the block."""
        return self.levels[0].id, self.levels[-1].id

    @property
    def last_level_id(self) -> int:
        """Id of the level that earns the trophy."""
        return self.levels[-1].id

    def level_ids(self) -> List[int]:
        """All level ids in order."""
        return [level.id for level in self.levels]
