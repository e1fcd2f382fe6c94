"""
Tests for the game session state machine.

Covers starting levels, finding words by drag selection, hints, the timer,
pause handling and the one-shot completion facts.
"""

import pytest
from wordsearch.catalog import LevelCatalog
from wordsearch.engine.packer import failed_result
from wordsearch.session import GameSession, GameConfig
import wordsearch.session.game as game_module


@pytest.fixture(scope="module")
def catalog():
    return LevelCatalog()


@pytest.fixture
def session(catalog):
    session = GameSession.create(catalog=catalog)
    assert session.start(1)
    return session


def find_all(session):
    """Find every remaining word through its placement."""
    for info in list(session.words_info):
        if not info.found:
            assert session.word_found(info.word, info.cells)


class TestStart:
    """Test starting levels."""

    def test_new_session_is_idle(self, catalog):
        """Sessions begin idle."""
        session = GameSession.create(catalog=catalog)
        assert session.state == "idle"
        assert session.complete() is None
        assert session.snapshot() is None

    def test_start_level_one(self, session):
        """Level 1 starts playing with three placed words."""
        assert session.status == "playing"
        assert session.current_level.id == 1
        assert session.current_block.id == "block_1"
        assert session.grid_size == 4
        assert len(session.words_info) == 3
        assert [w.word for w in session.words_info] == list(session.current_level.words)

    def test_words_have_placements_and_colors(self, session):
        """Each word carries a readable placement and a palette colour."""
        for info in session.words_info:
            assert "".join(session.grid[r][c].letter for r, c in info.cells) == info.word
            assert info.color in session.config.colors
            assert not info.found

    def test_start_is_deterministic(self, catalog):
        """Two sessions of one level see the same puzzle."""
        a = GameSession.create(catalog=catalog)
        b = GameSession.create(catalog=catalog)
        a.start(137)
        b.start(137)
        assert [[c.letter for c in row] for row in a.grid] == [[c.letter for c in row] for row in b.grid]
        assert [w.color for w in a.words_info] == [w.color for w in b.words_info]

    def test_start_resets_previous_session(self, session):
        """Starting again discards progress."""
        info = session.words_info[0]
        session.word_found(info.word, info.cells)
        session.tick()
        session.use_hint("single_letter")

        assert session.start(2)
        assert session.words_found == 0
        assert session.time_elapsed == 0
        assert session.hints_used == 0
        assert session.hinted_cells == []
        assert session.found_words_cells == []

    def test_unpackable_level_fails(self, catalog, monkeypatch):
        """A level that cannot be packed ends in the failed state."""
        calls = []

        def never_packs(size, words, **kwargs):
            calls.append(kwargs["seed"])
            return failed_result(size)

        monkeypatch.setattr(game_module, "generate_grid", never_packs)
        session = GameSession.create(catalog=catalog)

        assert session.start(5) is False
        assert session.status == "failed"
        assert session.words_info == []
        assert calls == [5, 5 + 9999]

    def test_next_level(self, session):
        """next_level moves to the following id."""
        assert session.next_level()
        assert session.current_level.id == 2

    def test_next_level_past_end(self, catalog):
        """There is no level after the last one."""
        session = GameSession.create(catalog=catalog)
        assert session.next_level() is False
        session.start(1000)
        assert session.next_level() is False

    def test_leave(self, session):
        """Leaving returns to idle."""
        session.leave()
        assert session.state == "idle"
        assert session.current_level is None


class TestFindingWords:
    """Test word_found and submit_selection."""

    def test_word_found(self, session):
        """Finding a word colours its cells."""
        info = session.words_info[0]
        assert session.word_found(info.word, info.cells)
        assert info.found
        assert len(session.found_words_cells) == len(info.word)
        assert all(fc.color == info.color for fc in session.found_words_cells)

    def test_wrong_word_is_noop(self, session):
        """Words outside the level are ignored."""
        assert session.word_found("ZZZZ", [(0, 0)]) is False
        assert session.words_found == 0

    def test_duplicate_find_is_noop(self, session):
        """A word cannot be found twice."""
        info = session.words_info[0]
        assert session.word_found(info.word, info.cells)
        assert session.word_found(info.word, info.cells) is False
        assert len(session.found_words_cells) == len(info.word)

    def test_submit_selection_forward(self, session):
        """Dragging along a placement finds the word."""
        info = session.words_info[0]
        start, end = info.cells[0], info.cells[-1]
        assert session.submit_selection(start, end) == info.word
        assert info.found

    def test_submit_selection_backward(self, session):
        """Dragging from the last letter to the first also finds it."""
        others = {w.word for w in session.words_info}
        info = next(w for w in session.words_info if w.word[::-1] not in others - {w.word})
        assert session.submit_selection(info.cells[-1], info.cells[0]) == info.word
        assert info.found

    def test_submit_non_line(self, session):
        """A bent drag finds nothing."""
        assert session.submit_selection((0, 0), (1, 3)) is None

    def test_last_word_completes(self, session):
        """Finding every word completes the level."""
        find_all(session)
        assert session.status == "complete"
        assert session.earned_trophy is None

    def test_no_finds_after_complete(self, session):
        """A complete level accepts no more finds."""
        find_all(session)
        info = session.words_info[0]
        assert session.word_found(info.word, info.cells) is False

    def test_last_level_of_block_earns_trophy(self, catalog):
        """Completing level 50 earns the first world's trophy."""
        session = GameSession.create(catalog=catalog)
        assert session.start(50)
        find_all(session)
        assert session.earned_trophy is not None
        assert session.earned_trophy.id == "trophy_block_1"


class TestHints:
    """Test hint reveal order and exhaustion."""

    def test_single_letter_reveals_first_letter(self, session):
        """The first hint shows the first letter of the hardest word."""
        hardest = session.difficulty_order()[0]
        revealed = session.use_hint("single_letter")
        assert revealed == [hardest.cells[0]]
        assert session.hinted_cells == revealed
        assert session.hints_used == 1

    def test_difficulty_order_prefers_long_words(self, session):
        """Longer words come first; ties keep level order."""
        order = session.difficulty_order()
        lengths = [len(w.word) for w in order]
        assert lengths == sorted(lengths, reverse=True)

    def test_single_letter_exhaustion_terminates(self, session):
        """Hinting every cell eventually becomes a no-op."""
        all_cells = {cell for w in session.words_info for cell in w.cells}
        for _ in range(len(all_cells)):
            assert session.use_hint("single_letter")

        assert set(session.hinted_cells) == all_cells
        assert len(session.hinted_cells) == len(all_cells)
        assert session.use_hint("single_letter") == []
        assert session.hints_used == len(all_cells)
        assert session.status == "playing"

    def test_full_word_finds_hardest(self, session):
        """A word hint finds the hardest word outright."""
        hardest = session.difficulty_order()[0]
        revealed = session.use_hint("full_word")
        assert revealed == list(hardest.cells)
        assert hardest.found
        assert session.hints_used == 1

    def test_full_word_clears_its_hinted_cells(self, session):
        """Hinted cells inside a found word are dropped."""
        session.use_hint("single_letter")
        session.use_hint("full_word")
        found = {fc.cell for fc in session.found_words_cells}
        assert not set(session.hinted_cells) & found

    def test_full_word_hints_complete_level(self, session):
        """Hinting every word completes the level."""
        for _ in range(len(session.words_info)):
            assert session.use_hint("full_word")
        assert session.status == "complete"
        assert session.use_hint("full_word") == []

    def test_unknown_hint_kind(self, session):
        """Unknown hint kinds are rejected."""
        with pytest.raises(ValueError):
            session.use_hint("vowel")


class TestTimer:
    """Test tick and pause."""

    def test_tick_while_playing(self, session):
        """Each tick adds a second."""
        for _ in range(5):
            session.tick()
        assert session.time_elapsed == 5

    def test_pause_freezes_timer(self, session):
        """Paused sessions do not advance."""
        session.tick()
        session.pause()
        assert session.state == "paused"
        session.tick()
        session.tick()
        assert session.time_elapsed == 1

        session.resume()
        assert session.state == "playing"
        session.tick()
        assert session.time_elapsed == 2

    def test_toggle_pause(self, session):
        """toggle_pause flips the flag."""
        session.toggle_pause()
        assert session.is_paused
        session.toggle_pause()
        assert not session.is_paused

    def test_no_tick_when_complete(self, session):
        """The timer stops once the level is complete."""
        find_all(session)
        session.tick()
        assert session.time_elapsed == 0


class TestCompletion:
    """Test the completion facts."""

    def test_complete_once(self, session):
        """Completion facts are emitted exactly once."""
        for _ in range(12):
            session.tick()
        find_all(session)

        result = session.complete()
        assert result is not None
        assert result.level_id == 1
        assert result.words_found == 3
        assert result.stars_earned == 3
        assert result.time_elapsed == 12
        assert result.is_first_completion
        assert result.coins_earned == 10
        assert result.trophy is None

        assert session.complete() is None

    def test_replay_reward(self, session):
        """Replaying a completed level pays the replay reward."""
        find_all(session)
        result = session.complete(completed_level_ids={1})
        assert not result.is_first_completion
        assert result.coins_earned == 5

    def test_not_complete_yet(self, session):
        """complete() does nothing before the last word is found."""
        assert session.complete() is None
        assert not session.has_processed_completion

    def test_slow_completion_stars(self, session):
        """Slow finishes earn fewer stars."""
        for _ in range(61):
            session.tick()
        find_all(session)
        assert session.complete().stars_earned == 1

    def test_hints_counted(self, session):
        """Hints show up in the completion facts."""
        session.use_hint("single_letter")
        session.use_hint("full_word")
        find_all(session)
        assert session.complete().hints_used == 2

    def test_custom_replay_reward(self, catalog):
        """The replay reward comes from the config."""
        session = GameSession.create(config=GameConfig(replay_reward=1), catalog=catalog)
        session.start(1)
        find_all(session)
        assert session.complete(completed_level_ids=[1]).coins_earned == 1

    def test_get_state(self, session):
        """The state dictionary summarises the session."""
        state = session.get_state()
        assert state["state"] == "playing"
        assert state["level_id"] == 1
        assert state["words_total"] == 3
