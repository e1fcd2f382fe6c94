"""Game configuration and YAML loading."""

from pathlib import Path
from typing import Dict, List, Tuple

import yaml
from pydantic import BaseModel, Field

from ..catalog.levels import STAR_THRESHOLDS
from ..engine.packer import MAX_RETRIES, TIME_BUDGET_SECONDS

DEFAULT_COLORS: List[str] = [
    "#f87171",  # Red
    "#fb923c",  # Orange
    "#facc15",  # Yellow
    "#a3e635",  # Lime
    "#34d399",  # Emerald
    "#22d3ee",  # Cyan
    "#60a5fa",  # Blue
    "#818cf8",  # Indigo
    "#c084fc",  # Purple
    "#e879f9",  # Fuchsia
    "#fb7185",  # Rose
    "#2dd4bf",  # Teal
]


class GameConfig(BaseModel):
    """Tunable rules for a game session and its economy."""
    language: str = "en"
    max_retries: int = Field(default=MAX_RETRIES, ge=1)
    time_budget_seconds: float = Field(default=TIME_BUDGET_SECONDS, gt=0)
    fallback_seed_offset: int = 9999
    replay_reward: int = Field(default=5, ge=0)
    hint_cost_letter: int = Field(default=50, ge=0)
    hint_cost_word: int = Field(default=150, ge=0)
    starting_coins: int = Field(default=200, ge=0)
    snapshot_max_age_hours: float = Field(default=24, gt=0)
    colors: List[str] = Field(default_factory=lambda: list(DEFAULT_COLORS), min_length=1)
    star_thresholds: Dict[str, Tuple[int, int]] = Field(
        default_factory=lambda: dict(STAR_THRESHOLDS)
    )


def load_config(config_path: str | Path) -> GameConfig:
    """Load game configuration from a YAML file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return GameConfig(**data)
