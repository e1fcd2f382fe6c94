"""
Resumable session snapshots.

A snapshot is written as JSON whenever the presentation layer wants to be
able to resume a level later. Loading never raises: missing, corrupt or
stale files are discarded and reported as None.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .models import SessionSnapshot

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = timedelta(hours=24)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def is_stale(
    snapshot: SessionSnapshot,
    now: Optional[datetime] = None,
    max_age: timedelta = DEFAULT_MAX_AGE,
) -> bool:
    """Check whether a snapshot is older than `max_age`."""
    now = _as_utc(now or utc_now())
    return now - _as_utc(snapshot.saved_at) > max_age


def save_snapshot(snapshot: SessionSnapshot, path: str | Path) -> None:
    """
    Save a snapshot to a JSON file.

    Args:
        snapshot: The snapshot to persist
        path: Destination file (parent directories are created)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(snapshot.model_dump(mode="json"), f, indent=2, default=str)


def clear_snapshot(path: str | Path) -> None:
    """Delete a saved snapshot if there is one."""
    Path(path).unlink(missing_ok=True)


def load_snapshot(
    path: str | Path,
    now: Optional[datetime] = None,
    max_age: timedelta = DEFAULT_MAX_AGE,
) -> Optional[SessionSnapshot]:
    """
    Load a saved snapshot if it is present, well formed and fresh.

    Corrupt or expired files are deleted.

    Args:
        path: Snapshot file
        now: Reference time for the age check (defaults to the current time)
        max_age: Oldest snapshot still accepted

    Returns:
        The snapshot, or None
    """
    path = Path(path)
    if not path.exists():
        return None

    try:
        with open(path) as f:
            data = json.load(f)
        snapshot = SessionSnapshot.model_validate(data)
    except (OSError, ValueError, ValidationError) as e:
        logger.warning("Discarding unreadable session snapshot %s: %s", path, e)
        clear_snapshot(path)
        return None

    if is_stale(snapshot, now, max_age):
        logger.info("Discarding stale session snapshot for level %d", snapshot.level_id)
        clear_snapshot(path)
        return None

    return snapshot


def snapshot_summary(snapshot: SessionSnapshot) -> Dict[str, Any]:
    """Short description of a snapshot for a "continue" prompt."""
    found = sum(1 for w in snapshot.words_info if w.found)
    return {
        "level_id": snapshot.level_id,
        "progress": f"{found}/{len(snapshot.words_info)}",
        "time_elapsed": snapshot.time_elapsed,
    }
