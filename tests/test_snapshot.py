"""Tests for saving, loading and restoring session snapshots."""

import json
import logging
from datetime import datetime, timedelta, timezone

import pytest
from wordsearch.catalog import LevelCatalog
from wordsearch.engine import Cell
from wordsearch.session import (
    GameSession,
    FoundCell,
    SessionSnapshot,
    save_snapshot,
    load_snapshot,
    clear_snapshot,
    snapshot_summary,
)

SAVED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="module")
def catalog():
    return LevelCatalog()


@pytest.fixture
def session(catalog):
    session = GameSession.create(catalog=catalog)
    assert session.start(7)
    info = session.words_info[0]
    session.word_found(info.word, info.cells)
    session.use_hint("single_letter")
    for _ in range(9):
        session.tick()
    return session


class TestSnapshotFiles:
    """Test snapshot persistence."""

    def test_round_trip(self, session, tmp_path):
        """A saved snapshot loads back unchanged."""
        path = tmp_path / "saves" / "session.json"
        snapshot = session.snapshot(now=SAVED_AT)
        save_snapshot(snapshot, path)

        loaded = load_snapshot(path, now=SAVED_AT + timedelta(hours=1))
        assert loaded == snapshot

    def test_missing_file(self, tmp_path):
        """No file, no snapshot."""
        assert load_snapshot(tmp_path / "none.json") is None

    def test_stale_snapshot_discarded(self, session, tmp_path):
        """Snapshots older than a day are deleted on load."""
        path = tmp_path / "session.json"
        save_snapshot(session.snapshot(now=SAVED_AT), path)

        assert load_snapshot(path, now=SAVED_AT + timedelta(hours=25)) is None
        assert not path.exists()

    def test_corrupt_json_discarded(self, tmp_path):
        """Unreadable files are deleted on load."""
        path = tmp_path / "session.json"
        path.write_text("{not json")

        assert load_snapshot(path) is None
        assert not path.exists()

    def test_schema_violation_discarded(self, session, tmp_path):
        """Files that do not match the snapshot schema are deleted."""
        path = tmp_path / "session.json"
        data = session.snapshot(now=SAVED_AT).model_dump(mode="json")
        data["words_info"] = []
        path.write_text(json.dumps(data))

        assert load_snapshot(path, now=SAVED_AT) is None
        assert not path.exists()

    def test_clear(self, session, tmp_path):
        """Clearing removes the file and tolerates a missing one."""
        path = tmp_path / "session.json"
        save_snapshot(session.snapshot(now=SAVED_AT), path)
        clear_snapshot(path)
        assert not path.exists()
        clear_snapshot(path)

    def test_summary(self, session):
        """The summary reports found/total and time."""
        summary = snapshot_summary(session.snapshot(now=SAVED_AT))
        assert summary == {"level_id": 7, "progress": "1/3", "time_elapsed": 9}


class TestRestore:
    """Test restoring a session from a snapshot."""

    def test_restore(self, session, catalog):
        """A fresh session picks up where the old one left off."""
        snapshot = session.snapshot(now=SAVED_AT)
        restored = GameSession.create(catalog=catalog)

        assert restored.restore(snapshot, now=SAVED_AT + timedelta(minutes=5))
        assert restored.status == "playing"
        assert not restored.is_paused
        assert restored.current_level == session.current_level
        assert restored.words_info == session.words_info
        assert restored.hinted_cells == session.hinted_cells
        assert restored.time_elapsed == 9
        assert restored.hints_used == 1
        assert not restored.has_processed_completion

    def test_restored_session_is_independent(self, session, catalog):
        """Playing the restored session leaves the snapshot untouched."""
        snapshot = session.snapshot(now=SAVED_AT)
        restored = GameSession.create(catalog=catalog)
        restored.restore(snapshot, now=SAVED_AT)

        for info in restored.words_info:
            restored.word_found(info.word, info.cells)
        assert restored.status == "complete"
        assert sum(1 for w in snapshot.words_info if w.found) == 1

    def test_restore_complete_view(self, session, catalog):
        """A finished level restores as complete and is not paid out twice."""
        for info in session.words_info:
            session.word_found(info.word, info.cells)
        assert session.complete() is not None
        snapshot = session.snapshot(now=SAVED_AT)
        assert snapshot.view == "complete"
        assert snapshot.has_processed_completion

        restored = GameSession.create(catalog=catalog)
        assert restored.restore(snapshot, now=SAVED_AT)
        assert restored.status == "complete"
        assert restored.has_processed_completion
        assert restored.complete() is None

    def test_restore_complete_before_processing(self, session, catalog):
        """Completion facts not yet emitted are emitted once after restore."""
        for info in session.words_info:
            session.word_found(info.word, info.cells)
        snapshot = session.snapshot(now=SAVED_AT)

        restored = GameSession.create(catalog=catalog)
        assert restored.restore(snapshot, now=SAVED_AT)
        assert restored.complete() is not None
        assert restored.complete() is None

    def test_processed_flag_on_unfinished_level_rejected(self, session, catalog):
        """A processed completion needs a finished level."""
        snapshot = session.snapshot(now=SAVED_AT)
        tampered = snapshot.model_copy(update={"has_processed_completion": True})

        restored = GameSession.create(catalog=catalog)
        assert restored.restore(tampered, now=SAVED_AT) is False

    def test_stale_restore_rejected(self, session, catalog):
        """Old snapshots are not restored."""
        snapshot = session.snapshot(now=SAVED_AT)
        restored = GameSession.create(catalog=catalog)
        assert restored.restore(snapshot, now=SAVED_AT + timedelta(days=2)) is False
        assert restored.state == "idle"

    def test_word_mismatch_rejected(self, session, catalog):
        """Snapshots whose words no longer match the level are discarded."""
        snapshot = session.snapshot(now=SAVED_AT)
        words = [w.model_copy(update={"word": "ZZZ"}) if i == 0 else w
                 for i, w in enumerate(snapshot.words_info)]
        tampered = snapshot.model_copy(update={"words_info": words})

        restored = GameSession.create(catalog=catalog)
        assert restored.restore(tampered, now=SAVED_AT) is False

    def test_inconsistent_placement_rejected(self, session, catalog):
        """A placement that no longer spells its word is discarded."""
        snapshot = session.snapshot(now=SAVED_AT)
        first = snapshot.words_info[0]
        broken = first.model_copy(update={"cells": list(reversed(first.cells))})
        if first.word == first.word[::-1]:
            broken = first.model_copy(update={"cells": first.cells[:-1]})
        tampered = snapshot.model_copy(update={"words_info": [broken] + snapshot.words_info[1:]})

        restored = GameSession.create(catalog=catalog)
        assert restored.restore(tampered, now=SAVED_AT) is False

    def test_grid_size_mismatch_rejected(self, session, catalog):
        """A grid of the wrong size is discarded."""
        snapshot = session.snapshot(now=SAVED_AT)
        tampered = snapshot.model_copy(update={"grid": snapshot.grid[:-1]})

        restored = GameSession.create(catalog=catalog)
        assert restored.restore(tampered, now=SAVED_AT) is False

    def test_loaded_snapshot_restores(self, session, catalog, tmp_path):
        """A snapshot read back from disk restores cleanly."""
        path = tmp_path / "session.json"
        save_snapshot(session.snapshot(now=SAVED_AT), path)
        loaded = load_snapshot(path, now=SAVED_AT)

        restored = GameSession.create(catalog=catalog)
        assert restored.restore(loaded, now=SAVED_AT)
        assert restored.hinted_cells == session.hinted_cells
        assert isinstance(loaded, SessionSnapshot)

    def test_bent_placement_rejected(self, session, catalog, caplog):
        """Placements must run along one straight direction."""
        snapshot = session.snapshot(now=SAVED_AT)
        first = snapshot.words_info[0]
        bent = [Cell(0, 0), Cell(0, 1), Cell(1, 1), Cell(1, 2)][:len(first.word)]
        broken = first.model_copy(update={"cells": bent})
        tampered = snapshot.model_copy(update={"words_info": [broken] + snapshot.words_info[1:]})

        restored = GameSession.create(catalog=catalog)
        with caplog.at_level(logging.WARNING, logger="wordsearch.session.game"):
            assert restored.restore(tampered, now=SAVED_AT) is False
        assert "not a straight line" in caplog.text

    def test_found_cell_out_of_bounds_rejected(self, session, catalog, caplog):
        """Found cells outside the grid are discarded."""
        snapshot = session.snapshot(now=SAVED_AT)
        stray = FoundCell(row=snapshot.words_info[0].cells[0].row + 20, col=0, color="#ffffff")
        tampered = snapshot.model_copy(update={"found_words_cells": snapshot.found_words_cells + [stray]})

        restored = GameSession.create(catalog=catalog)
        with caplog.at_level(logging.WARNING, logger="wordsearch.session.game"):
            assert restored.restore(tampered, now=SAVED_AT) is False
        assert "found cell out of bounds" in caplog.text
