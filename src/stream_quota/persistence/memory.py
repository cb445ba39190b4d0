"""In-memory record store.

Appropriate for tests and single-process deployments where counters need not
survive a restart. Records are frozen dataclasses, so handing them out
directly is safe.
"""

from __future__ import annotations

import dataclasses
import threading
from typing import TYPE_CHECKING

from stream_quota.core.logging import get_logger
from stream_quota.persistence.base import check_update_fields

if TYPE_CHECKING:
    from stream_quota.core.types import IdentityRecord

logger = get_logger(__name__)


class InMemoryRecordStore:
    """Thread-safe dict-backed record store.

    Usage:
        store = InMemoryRecordStore()
        store.insert(IdentityRecord(id="u1", limit=3))
        store.update_fields("u1", active=1)
    """

    def __init__(self) -> None:
        self._records: dict[str, IdentityRecord] = {}
        self._lock = threading.Lock()

    def fetch(self, user_id: str) -> IdentityRecord | None:
        with self._lock:
            return self._records.get(user_id)

    def insert(self, record: IdentityRecord) -> None:
        with self._lock:
            if record.id in self._records:
                raise KeyError(f"Record already exists: {record.id}")
            self._records[record.id] = record

    def update_fields(self, user_id: str, **fields: int) -> None:
        check_update_fields(fields)
        with self._lock:
            record = self._records.get(user_id)
            if record is None:
                raise KeyError(f"Record not found: {user_id}")
            self._records[user_id] = dataclasses.replace(record, **fields)

    def remove(self, user_id: str) -> None:
        with self._lock:
            self._records.pop(user_id, None)

    def close(self) -> None:
        logger.debug("Closing in-memory store with %d records", len(self))

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
