"""Game session state machine, snapshots and player progress."""

from .config import GameConfig, load_config, DEFAULT_COLORS
from .models import (
    SessionStatus,
    HintKind,
    WordInfo,
    FoundCell,
    LevelCompletion,
    SessionSnapshot,
)
from .game import GameSession
from .snapshot import save_snapshot, load_snapshot, clear_snapshot, snapshot_summary, is_stale
from .progress import PlayerStats, PlayerProgress, hint_cost

__all__ = [
    # Config
    "GameConfig",
    "load_config",
    "DEFAULT_COLORS",
    # Models
    "SessionStatus",
    "HintKind",
    "WordInfo",
    "FoundCell",
    "LevelCompletion",
    "SessionSnapshot",
    # Session
    "GameSession",
    # Snapshots
    "save_snapshot",
    "load_snapshot",
    "clear_snapshot",
    "snapshot_summary",
    "is_stale",
    # Progress
    "PlayerStats",
    "PlayerProgress",
    "hint_cost",
]
