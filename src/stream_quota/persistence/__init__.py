"""Record stores backing the identity registry."""

from stream_quota.persistence.base import UPDATABLE_FIELDS, RecordStore
from stream_quota.persistence.memory import InMemoryRecordStore
from stream_quota.persistence.sqlite import SQLiteRecordStore

__all__ = [
    "UPDATABLE_FIELDS",
    "InMemoryRecordStore",
    "RecordStore",
    "SQLiteRecordStore",
]
