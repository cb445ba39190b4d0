"""SQLite-backed record store.

One connection is shared by all callers and guarded by a lock, so the store
can be used from FastAPI's threadpool. Each write commits in its own
transaction before returning, which is what lets the registry release its
gate knowing the change is durable.
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path

from stream_quota.core.config import IN_MEMORY_DB
from stream_quota.core.exceptions import StorageError
from stream_quota.core.logging import get_logger
from stream_quota.core.types import IdentityRecord
from stream_quota.persistence.base import check_update_fields

logger = get_logger(__name__)

# Record field -> column ("limit" is reserved in SQL)
_COLUMNS = {"limit": "stream_limit", "active": "active"}

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
  user_id TEXT PRIMARY KEY,
  stream_limit INTEGER NOT NULL,
  active INTEGER NOT NULL DEFAULT 0
)
"""


class SQLiteRecordStore:
    """Record store persisting identities to a SQLite database file.

    Args:
        path: Database file, or ":memory:" for a throwaway database

    Raises:
        StorageError: If the database cannot be opened or initialized
    """

    def __init__(self, path: str | Path = IN_MEMORY_DB) -> None:
        self.path = str(path)
        self._lock = threading.Lock()
        if self.path != IN_MEMORY_DB:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(self.path, check_same_thread=False)
            with self._conn:
                if self.path != IN_MEMORY_DB:
                    self._conn.execute("PRAGMA journal_mode=WAL;")
                self._conn.execute(_SCHEMA)
        except sqlite3.Error as e:
            logger.exception("Failed to open database %s", self.path)
            raise StorageError(f"Cannot open database {self.path}: {e}") from e
        logger.info("Opened SQLite store at %s", self.path)

    def _query(self, sql: str, params: tuple[object, ...] = ()) -> list[tuple[object, ...]]:
        """Run a read statement and return all rows.

        Must be called with self._lock held.
        """
        try:
            with self._conn:
                return self._conn.execute(sql, params).fetchall()
        except (sqlite3.Error, OverflowError) as e:
            logger.exception("SQLite query failed")
            raise StorageError(f"Storage read failed: {e}") from e

    def _write(self, sql: str, params: tuple[object, ...] = ()) -> int:
        """Run a write statement in its own transaction and return the row count.

        Must be called with self._lock held. IntegrityError is left to the caller.
        """
        try:
            with self._conn:
                return self._conn.execute(sql, params).rowcount
        except sqlite3.IntegrityError:
            raise
        except (sqlite3.Error, OverflowError) as e:
            logger.exception("SQLite write failed")
            raise StorageError(f"Storage write failed: {e}") from e

    def fetch(self, user_id: str) -> IdentityRecord | None:
        with self._lock:
            rows = self._query(
                "SELECT user_id, stream_limit, active FROM users WHERE user_id = ?",
                (user_id,),
            )
        if not rows:
            return None
        user, limit, active = rows[0]
        return IdentityRecord(id=str(user), limit=int(limit), active=int(active))  # type: ignore[call-overload]

    def insert(self, record: IdentityRecord) -> None:
        with self._lock:
            try:
                self._write(
                    "INSERT INTO users (user_id, stream_limit, active) VALUES (?, ?, ?)",
                    (record.id, record.limit, record.active),
                )
            except sqlite3.IntegrityError as e:
                raise KeyError(f"Record already exists: {record.id}") from e

    def update_fields(self, user_id: str, **fields: int) -> None:
        check_update_fields(fields)
        names = sorted(fields)
        assignments = ", ".join(f"{_COLUMNS[name]} = ?" for name in names)
        params = (*(int(fields[name]) for name in names), user_id)
        with self._lock:
            updated = self._write(f"UPDATE users SET {assignments} WHERE user_id = ?", params)
        if updated == 0:
            raise KeyError(f"Record not found: {user_id}")

    def remove(self, user_id: str) -> None:
        with self._lock:
            self._write("DELETE FROM users WHERE user_id = ?", (user_id,))

    def close(self) -> None:
        with self._lock:
            self._conn.close()
        logger.info("Closed SQLite store at %s", self.path)

    def __len__(self) -> int:
        with self._lock:
            rows = self._query("SELECT COUNT(1) FROM users")
        return int(rows[0][0]) if rows else 0  # type: ignore[call-overload]
