import logging
from datetime import datetime, timedelta
from typing import Collection, Dict, List, Optional, Sequence, Set, Tuple
from pydantic import BaseModel, Field, ConfigDict

from ..engine import Cell, GridCell, GridResult, generate_grid, seeded_shuffle
from ..engine.selection import cells_between, read_letters, match_selection, is_straight_line
from ..catalog import LevelCatalog, Level, LevelBlock, Trophy, calculate_stars, TOTAL_LEVELS
from .config import GameConfig
from .models import (
    SessionStatus,
    HintKind,
    WordInfo,
    FoundCell,
    LevelCompletion,
    SessionSnapshot,
)
from .snapshot import is_stale, utc_now

logger = logging.getLogger(__name__)


class GameSession(BaseModel):
    """
    State machine for one play-through of a level.

    idle -> start() -> playing <-> paused; playing -> (last word found) ->
    complete -> next_level()/leave() -> playing/idle. A level whose grid
    cannot be packed leaves the session in `failed`.

    Attributes:
        config: Game rules and economy
        catalog: Level source shared with the rest of the app
        status: Current state
        current_level: The active level
        current_block: The world containing the active level
        grid: Letter grid of the active level
        words_info: Tracking record per word, in level order
        found_words_cells: Cells of found words, tagged with word colours
        hinted_cells: Cells revealed by single-letter hints
        time_elapsed: Seconds played (advanced by tick())
        is_paused: Whether the timer is paused
        hints_used: Hints that revealed something this run
        has_processed_completion: Whether complete() already emitted its facts
        earned_trophy: Trophy earned by finishing the last level of a world
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    config: GameConfig = Field(default_factory=GameConfig)
    catalog: Optional[LevelCatalog] = Field(default=None, exclude=True)
    status: SessionStatus = "idle"
    current_level: Optional[Level] = None
    current_block: Optional[LevelBlock] = None
    grid: List[List[GridCell]] = Field(default_factory=list)
    words_info: List[WordInfo] = Field(default_factory=list)
    found_words_cells: List[FoundCell] = Field(default_factory=list)
    hinted_cells: List[Cell] = Field(default_factory=list)
    time_elapsed: int = 0
    is_paused: bool = False
    hints_used: int = 0
    has_processed_completion: bool = False
    earned_trophy: Optional[Trophy] = None

    def model_post_init(self, __context) -> None:
        """Create a catalog if none was shared with us."""
        if self.catalog is None:
            self.catalog = LevelCatalog(language=self.config.language)

    @classmethod
    def create(
        cls,
        config: Optional[GameConfig] = None,
        catalog: Optional[LevelCatalog] = None,
    ) -> "GameSession":
        """Factory method for an idle session."""
        return cls(config=config or GameConfig(), catalog=catalog)

    @property
    def state(self) -> str:
        """Status with the pause flag folded in."""
        if self.status == "playing" and self.is_paused:
            return "paused"
        return self.status

    def get_state(self) -> Dict:
        """
        Get the current session state as a dictionary.

        Useful for serialization and logging.
        """
        return {
            "state": self.state,
            "level_id": self.current_level.id if self.current_level else None,
            "words_found": self.words_found,
            "words_total": len(self.words_info),
            "time_elapsed": self.time_elapsed,
            "hints_used": self.hints_used,
        }

    @property
    def grid_size(self) -> int:
        return len(self.grid)

    @property
    def unfound_words(self) -> List[str]:
        return [w.word for w in self.words_info if not w.found]

    @property
    def words_found(self) -> int:
        return sum(1 for w in self.words_info if w.found)

    def _reset(self) -> None:
        """Discard everything about the current level."""
        self.status = "idle"
        self.current_level = None
        self.current_block = None
        self.grid = []
        self.words_info = []
        self.found_words_cells = []
        self.hinted_cells = []
        self.time_elapsed = 0
        self.is_paused = False
        self.hints_used = 0
        self.has_processed_completion = False
        self.earned_trophy = None

    def _pack(self, level: Level, seed: int) -> GridResult:
        return generate_grid(
            level.grid_size,
            level.words,
            seed=seed,
            max_retries=self.config.max_retries,
            time_budget=self.config.time_budget_seconds,
        )

    def start(self, level_id: int) -> bool:
        """
        Start a level, discarding any session in progress.

        The grid is packed with the level id as seed; if that fails, once more
        with a fixed offset. A level that still cannot be packed leaves the
        session in `failed` instead of presenting an incomplete puzzle.

        Args:
            level_id: 1-based level id (clamped by the catalog)

        Returns:
            True if the level is now being played
        """
        self._reset()
        level, block = self.catalog.get_level_with_block(level_id)

        if not level.words:
            logger.warning("Level %d has no words, cannot start", level.id)
            self.status = "failed"
            return False

        result = self._pack(level, level.id)
        if not result.is_complete(level.words):
            fallback_seed = level.id + self.config.fallback_seed_offset
            logger.warning("Level %d did not pack, retrying with seed %d", level.id, fallback_seed)
            result = self._pack(level, fallback_seed)

        if not result.is_complete(level.words):
            logger.warning("Level %d could not be packed, returning to menu", level.id)
            self.status = "failed"
            return False

        colors = seeded_shuffle(self.config.colors, level.id)
        self.words_info = [
            WordInfo(word=word, color=colors[i % len(colors)], cells=result.placements[word])
            for i, word in enumerate(level.words)
        ]
        self.current_level = level
        self.current_block = block
        self.grid = result.grid
        self.status = "playing"

        logger.info(
            "Started level %d (%s, %s, %dx%d, %d words)",
            level.id, level.title, level.difficulty,
            level.grid_size, level.grid_size, len(level.words)
        )
        return True

    def next_level(self) -> bool:
        """Start the level after the current one."""
        if self.current_level is None or self.current_level.id >= TOTAL_LEVELS:
            return False
        return self.start(self.current_level.id + 1)

    def leave(self) -> None:
        """Abandon the current level and go back to idle."""
        self._reset()

    def _mark_found(self, info: WordInfo, cells: Sequence[Cell]) -> None:
        info.found = True
        self.found_words_cells.extend(
            FoundCell(row=cell.row, col=cell.col, color=info.color) for cell in cells
        )

        # hints on a found word are no longer useful
        covered = set(cells)
        self.hinted_cells = [cell for cell in self.hinted_cells if cell not in covered]

        if all(w.found for w in self.words_info):
            self.status = "complete"
            if self.current_block is not None and self.current_level is not None:
                if self.current_block.last_level_id == self.current_level.id:
                    self.earned_trophy = self.current_block.trophy
            logger.info("Level %d complete in %ds", self.current_level.id, self.time_elapsed)

    def word_found(self, word: str, cells: Sequence[Tuple[int, int]]) -> bool:
        """
        Record a found word.

        Words that are not part of the level, or already found, are ignored.
        This is how the caller's forward/backward spelling attempts get
        filtered: only the matching orientation succeeds.

        Args:
            word: The spelled word
            cells: Grid cells of the selection

        Returns:
            True if the word was newly found
        """
        if self.status != "playing":
            return False

        info = next((w for w in self.words_info if w.word == word and not w.found), None)
        if info is None:
            return False

        self._mark_found(info, [Cell(*cell) for cell in cells])
        return True

    def submit_selection(self, start: Tuple[int, int], end: Tuple[int, int]) -> Optional[str]:
        """
        Validate a drag from `start` to `end` against the unfound words.

        Returns:
            The word found, or None
        """
        if self.status != "playing":
            return None

        cells = cells_between(start, end, grid_size=self.grid_size)
        letters = read_letters(self.grid, cells)
        word = match_selection(letters, self.unfound_words)
        if word is None:
            return None

        ordered = cells if word == letters else cells[::-1]
        if self.word_found(word, ordered):
            return word
        return None

    def difficulty_order(self) -> List[WordInfo]:
        """Unfound words, longest and least hinted first (stable)."""
        hinted = set(self.hinted_cells)
        unfound = [w for w in self.words_info if not w.found]
        return sorted(
            unfound,
            key=lambda w: (-len(w.word), sum(1 for cell in w.cells if cell in hinted)),
        )

    @staticmethod
    def _pick_hint_cell(cells: Sequence[Cell], taken: Set[Cell]) -> Optional[Cell]:
        """First letter, then last letter, then the first free one."""
        if not cells:
            return None
        if cells[0] not in taken:
            return cells[0]
        if cells[-1] not in taken:
            return cells[-1]
        return next((cell for cell in cells if cell not in taken), None)

    def use_hint(self, kind: HintKind) -> List[Cell]:
        """
        Reveal part of the puzzle.

        `full_word` finds the hardest unfound word outright; `single_letter`
        reveals one cell of the hardest word that still has an unrevealed cell.

        Args:
            kind: "single_letter" or "full_word"

        Returns:
            Cells revealed (empty when there is nothing left to reveal)
        """
        if kind not in ("single_letter", "full_word"):
            raise ValueError(f"Unknown hint kind: {kind}")

        if self.status != "playing":
            return []

        ordered = self.difficulty_order()
        if not ordered:
            return []

        if kind == "full_word":
            target = ordered[0]
            self._mark_found(target, list(target.cells))
            self.hints_used += 1
            return list(target.cells)

        taken = set(self.hinted_cells) | {fc.cell for fc in self.found_words_cells}
        for info in ordered:
            cell = self._pick_hint_cell(info.cells, taken)
            if cell is not None:
                self.hinted_cells.append(cell)
                self.hints_used += 1
                return [cell]

        return []

    def tick(self) -> None:
        """Advance the timer by one second while playing and not paused."""
        if self.status != "playing" or self.is_paused:
            return
        self.time_elapsed += 1

    def pause(self) -> None:
        self.is_paused = True

    def resume(self) -> None:
        self.is_paused = False

    def toggle_pause(self) -> None:
        self.is_paused = not self.is_paused

    def complete(self, completed_level_ids: Collection[int] = ()) -> Optional[LevelCompletion]:
        """
        Emit the completion facts for a finished level, once.

        Args:
            completed_level_ids: Levels the player had completed before this run

        Returns:
            LevelCompletion, or None if the level is not complete or was
            already processed
        """
        if self.current_level is None or self.current_block is None:
            return None
        if self.has_processed_completion or self.status != "complete":
            return None

        level = self.current_level
        stars = calculate_stars(self.time_elapsed, level.difficulty, self.config.star_thresholds)
        is_first = level.id not in completed_level_ids
        coins = level.reward_coins if is_first else self.config.replay_reward
        trophy = self.current_block.trophy if self.current_block.last_level_id == level.id else None

        self.has_processed_completion = True
        logger.info(
            "Level %d processed: %d stars, %d coins%s",
            level.id, stars, coins, " (first completion)" if is_first else ""
        )

        return LevelCompletion(
            level_id=level.id,
            words_found=self.words_found,
            stars_earned=stars,
            time_elapsed=self.time_elapsed,
            hints_used=self.hints_used,
            is_first_completion=is_first,
            coins_earned=coins,
            trophy=trophy,
        )

    def snapshot(self, now: Optional[datetime] = None) -> Optional[SessionSnapshot]:
        """Capture the session for later resumption (None when idle/failed)."""
        if self.current_level is None or self.current_block is None:
            return None
        if self.status not in ("playing", "complete"):
            return None

        return SessionSnapshot(
            level_id=self.current_level.id,
            block_id=self.current_block.id,
            language=self.current_level.language,
            grid=[[cell.model_copy() for cell in row] for row in self.grid],
            words_info=[w.model_copy(deep=True) for w in self.words_info],
            found_words_cells=[fc.model_copy() for fc in self.found_words_cells],
            hinted_cells=list(self.hinted_cells),
            time_elapsed=self.time_elapsed,
            hints_used=self.hints_used,
            has_processed_completion=self.has_processed_completion,
            view="complete" if self.status == "complete" else "game",
            saved_at=now or utc_now(),
        )

    def _snapshot_problem(self, snapshot: SessionSnapshot, level: Level, block: LevelBlock) -> Optional[str]:
        """Describe why a snapshot cannot be restored, or None if it can."""
        if level.id != snapshot.level_id or block.id != snapshot.block_id:
            return "level or block id mismatch"

        if [w.word for w in snapshot.words_info] != list(level.words):
            return "word list no longer matches the level"

        size = level.grid_size
        grid = snapshot.grid
        if len(grid) != size or any(len(row) != size for row in grid):
            return "grid size mismatch"

        for r, row in enumerate(grid):
            for c, cell in enumerate(row):
                if (cell.row, cell.col) != (r, c) or not ("A" <= cell.letter <= "Z"):
                    return f"bad grid cell at ({r}, {c})"

        for info in snapshot.words_info:
            if len(info.cells) != len(info.word):
                return f"placement of '{info.word}' has wrong length"
            if any(not (0 <= r < size and 0 <= c < size) for r, c in info.cells):
                return f"placement of '{info.word}' out of bounds"
            if not is_straight_line(info.cells):
                return f"placement of '{info.word}' is not a straight line"
            if read_letters(grid, info.cells) != info.word:
                return f"placement of '{info.word}' does not spell it"

        if any(not (0 <= fc.row < size and 0 <= fc.col < size) for fc in snapshot.found_words_cells):
            return "found cell out of bounds"

        if any(not (0 <= r < size and 0 <= c < size) for r, c in snapshot.hinted_cells):
            return "hinted cell out of bounds"

        if snapshot.view == "complete" and not all(w.found for w in snapshot.words_info):
            return "complete view with unfound words"

        if snapshot.has_processed_completion and snapshot.view != "complete":
            return "completion processed for an unfinished level"

        return None

    def restore(self, snapshot: SessionSnapshot, now: Optional[datetime] = None) -> bool:
        """
        Resume a session from a snapshot.

        Stale or inconsistent snapshots are rejected and leave the session
        untouched; the caller should discard them and start fresh.

        Returns:
            True if the session was restored
        """
        max_age = timedelta(hours=self.config.snapshot_max_age_hours)
        if is_stale(snapshot, now, max_age):
            logger.info("Snapshot for level %d is stale, not restoring", snapshot.level_id)
            return False

        level, block = self.catalog.get_level_with_block(snapshot.level_id, snapshot.language)
        problem = self._snapshot_problem(snapshot, level, block)
        if problem:
            logger.warning("Snapshot for level %d rejected: %s", snapshot.level_id, problem)
            return False

        self._reset()
        self.current_level = level
        self.current_block = block
        self.grid = [[cell.model_copy() for cell in row] for row in snapshot.grid]
        self.words_info = [w.model_copy(deep=True) for w in snapshot.words_info]
        self.found_words_cells = [fc.model_copy() for fc in snapshot.found_words_cells]
        self.hinted_cells = [Cell(*cell) for cell in snapshot.hinted_cells]
        self.time_elapsed = snapshot.time_elapsed
        self.hints_used = snapshot.hints_used
        self.has_processed_completion = snapshot.has_processed_completion

        if all(w.found for w in self.words_info):
            self.status = "complete"
            if block.last_level_id == level.id:
                self.earned_trophy = block.trophy
        else:
            self.status = "playing"

        logger.info("Restored level %d at %ds", level.id, self.time_elapsed)
        return True
