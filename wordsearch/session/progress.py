"""
Player progress and economy bookkeeping.

Consumes the facts a GameSession emits (LevelCompletion, revealed hint
cells) and keeps the long-lived totals: coins, completed levels, best stars,
unlocked trophies and play statistics.
"""

import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..engine import Cell
from ..catalog import TOTAL_LEVELS
from .config import GameConfig
from .models import HintKind, LevelCompletion

logger = logging.getLogger(__name__)

FAST_LEVEL_SECONDS = 30
PERFECT_STARS = 3


class PlayerStats(BaseModel):
    """Lifetime play statistics."""
    total_words_found: int = 0
    total_levels_completed: int = 0
    total_stars_earned: int = 0
    perfect_levels: int = 0
    no_hint_levels: int = 0
    fast_levels: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    total_play_time: int = 0
    hints_used: int = 0
    coins_earned: int = 0
    last_play_date: Optional[date] = None


def hint_cost(kind: HintKind, config: GameConfig) -> int:
    """Coin price of a hint."""
    if kind == "single_letter":
        return config.hint_cost_letter
    if kind == "full_word":
        return config.hint_cost_word
    raise ValueError(f"Unknown hint kind: {kind}")


class PlayerProgress(BaseModel):
    """
    Everything a player keeps between sessions.

    Attributes:
        coins: Spendable balance
        current_level_id: Furthest unlocked level
        completed_level_ids: Levels completed at least once
        stars: Best star rating per level
        unlocked_trophy_ids: Trophies earned so far
        stats: Lifetime statistics
    """
    coins: int = Field(default=200, ge=0)
    current_level_id: int = Field(default=1, ge=1)
    completed_level_ids: List[int] = Field(default_factory=list)
    stars: Dict[int, int] = Field(default_factory=dict)
    unlocked_trophy_ids: List[str] = Field(default_factory=list)
    stats: PlayerStats = Field(default_factory=PlayerStats)

    @classmethod
    def create(cls, config: Optional[GameConfig] = None) -> "PlayerProgress":
        """Fresh progress for a new player."""
        config = config or GameConfig()
        return cls(coins=config.starting_coins)

    def is_completed(self, level_id: int) -> bool:
        return level_id in self.completed_level_ids

    def record_play(self, today: Optional[date] = None) -> int:
        """
        Update the daily streak for a play on `today`.

        Returns:
            The current streak
        """
        today = today or date.today()
        stats = self.stats
        last = stats.last_play_date

        if last is None:
            stats.current_streak = 1
        elif last == today:
            pass
        elif last == today - timedelta(days=1):
            stats.current_streak += 1
        else:
            stats.current_streak = 1

        stats.longest_streak = max(stats.longest_streak, stats.current_streak)
        stats.last_play_date = today
        return stats.current_streak

    def record_completion(self, completion: LevelCompletion) -> None:
        """Apply the facts of a completed level."""
        level_id = completion.level_id

        self.coins += completion.coins_earned
        if level_id not in self.completed_level_ids:
            self.completed_level_ids.append(level_id)
        if completion.is_first_completion:
            self.current_level_id = max(self.current_level_id, min(level_id + 1, TOTAL_LEVELS))

        self.stars[level_id] = max(self.stars.get(level_id, 0), completion.stars_earned)

        if completion.trophy and completion.trophy.id not in self.unlocked_trophy_ids:
            self.unlocked_trophy_ids.append(completion.trophy.id)
            logger.info("Trophy unlocked: %s", completion.trophy.name)

        stats = self.stats
        stats.total_words_found += completion.words_found
        stats.total_levels_completed += 1
        stats.total_stars_earned += completion.stars_earned
        stats.total_play_time += completion.time_elapsed
        stats.hints_used += completion.hints_used
        stats.coins_earned += completion.coins_earned
        if completion.stars_earned == PERFECT_STARS:
            stats.perfect_levels += 1
        if completion.hints_used == 0:
            stats.no_hint_levels += 1
        if completion.time_elapsed <= FAST_LEVEL_SECONDS:
            stats.fast_levels += 1

    def add_coins(self, amount: int) -> None:
        self.coins += amount

    def spend_coins(self, amount: int) -> bool:
        """Deduct coins if the balance allows it."""
        if amount < 0:
            raise ValueError(f"Cannot spend a negative amount: {amount}")
        if self.coins < amount:
            return False
        self.coins -= amount
        return True

    def purchase_hint(self, session, kind: HintKind, config: Optional[GameConfig] = None) -> List[Cell]:
        """
        Buy a hint for a running session.

        Coins are only charged when the balance suffices and the hint actually
        reveals something.

        Args:
            session: The GameSession to reveal into
            kind: "single_letter" or "full_word"
            config: Prices (defaults to the session's config)

        Returns:
            Cells revealed
        """
        config = config or session.config
        cost = hint_cost(kind, config)
        if self.coins < cost:
            logger.info("Not enough coins for %s hint (%d < %d)", kind, self.coins, cost)
            return []

        revealed = session.use_hint(kind)
        if revealed:
            self.spend_coins(cost)
        return revealed
