"""
Pydantic models for the session layer.

Per-word tracking records, found/hinted cell markers, completion facts and
the resumable snapshot. The state machine itself lives in game.py.
"""

from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from ..engine.models import Cell, GridCell
from ..catalog.models import Trophy


# Type aliases
SessionStatus = Literal["idle", "playing", "complete", "failed"]
HintKind = Literal["single_letter", "full_word"]
SnapshotView = Literal["game", "complete"]


class WordInfo(BaseModel):
    """Live tracking record for one word of the active level."""
    word: str
    found: bool = False
    color: str
    cells: List[Cell] = Field(default_factory=list)


class FoundCell(BaseModel):
    """A grid cell belonging to a found word, tagged with its colour."""
    row: int
    col: int
    color: str

    @property
    def cell(self) -> Cell:
        return Cell(self.row, self.col)


class LevelCompletion(BaseModel):
    """Facts emitted once when a level is completed."""
    level_id: int
    words_found: int
    stars_earned: int = Field(..., ge=1, le=3)
    time_elapsed: int
    hints_used: int
    is_first_completion: bool
    coins_earned: int
    trophy: Optional[Trophy] = None


class SessionSnapshot(BaseModel):
    """Everything needed to rebuild a session after the app is closed."""
    level_id: int = Field(..., ge=1)
    block_id: str
    language: str = "en"
    grid: List[List[GridCell]] = Field(..., min_length=1)
    words_info: List[WordInfo] = Field(..., min_length=1)
    found_words_cells: List[FoundCell] = Field(default_factory=list)
    hinted_cells: List[Cell] = Field(default_factory=list)
    time_elapsed: int = Field(default=0, ge=0)
    hints_used: int = Field(default=0, ge=0)
    has_processed_completion: bool = False
    view: SnapshotView = "game"
    saved_at: datetime
