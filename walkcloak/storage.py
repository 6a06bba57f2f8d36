from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator


logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS processed_activities (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    activity_id INTEGER NOT NULL UNIQUE,
    processed_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""


class StoreError(Exception):
    pass


class StoreUnavailableError(StoreError):
    pass


class DuplicateActivityError(StoreError):
    def __init__(self, activity_id: int):
        super().__init__(f"Activity {activity_id} is already recorded as processed.")
        self.activity_id = activity_id


def _parse_processed_at(raw: object) -> datetime | None:
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    # CURRENT_TIMESTAMP is UTC without a designator.
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class ProcessedActivityStore:
    """Append-only record of activity ids that were renamed and made private.

    Every call opens its own short-lived connection so the store can be
    shared by the dispatch threads without application locking. The
    UNIQUE constraint on ``activity_id`` is the authoritative guard
    against double processing; ``has_processed`` is only a shortcut.
    """

    def __init__(self, path: Path, timeout_seconds: float = 30.0):
        self.path = Path(path)
        self.timeout_seconds = timeout_seconds

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.path, timeout=self.timeout_seconds)
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"Cannot open {self.path}: {exc}") from exc
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def initialize(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreUnavailableError(f"Cannot create {self.path.parent}: {exc}") from exc
        try:
            with self._connect() as conn:
                conn.execute("PRAGMA journal_mode=WAL;")
                conn.execute(SCHEMA)
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"Cannot initialize {self.path}: {exc}") from exc
        logger.info("Processed-activity store ready at %s", self.path)

    def has_processed(self, activity_id: int) -> bool:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT 1 FROM processed_activities WHERE activity_id = ? LIMIT 1",
                    (int(activity_id),),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreUnavailableError(str(exc)) from exc
        return row is not None

    def mark_processed(self, activity_id: int) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT INTO processed_activities (activity_id) VALUES (?)",
                    (int(activity_id),),
                )
        except sqlite3.IntegrityError as exc:
            raise DuplicateActivityError(int(activity_id)) from exc
        except sqlite3.Error as exc:
            raise StoreUnavailableError(str(exc)) from exc

    def processed_at(self, activity_id: int) -> datetime | None:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT processed_at FROM processed_activities WHERE activity_id = ? LIMIT 1",
                    (int(activity_id),),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreUnavailableError(str(exc)) from exc
        if row is None:
            return None
        return _parse_processed_at(row[0])

    def count(self) -> int:
        try:
            with self._connect() as conn:
                row = conn.execute("SELECT COUNT(*) FROM processed_activities").fetchone()
        except sqlite3.Error as exc:
            raise StoreUnavailableError(str(exc)) from exc
        return int(row[0]) if row else 0
