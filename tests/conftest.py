"""Shared test fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from stream_quota.core.exceptions import StorageError
from stream_quota.persistence import InMemoryRecordStore, SQLiteRecordStore
from stream_quota.registry import Registry

if TYPE_CHECKING:
    from collections.abc import Generator

    from stream_quota.core.types import IdentityRecord


class FlakyRecordStore(InMemoryRecordStore):
    """In-memory store whose writes can be made to fail on demand."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False
        self.fail_reads = False

    def _maybe_fail(self, flag: bool) -> None:
        if flag:
            raise StorageError("disk on fire")

    def fetch(self, user_id: str) -> IdentityRecord | None:
        self._maybe_fail(self.fail_reads)
        return super().fetch(user_id)

    def insert(self, record: IdentityRecord) -> None:
        self._maybe_fail(self.fail_writes)
        super().insert(record)

    def update_fields(self, user_id: str, **fields: int) -> None:
        self._maybe_fail(self.fail_writes)
        super().update_fields(user_id, **fields)

    def remove(self, user_id: str) -> None:
        self._maybe_fail(self.fail_writes)
        super().remove(user_id)


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    """Create an empty in-memory store."""
    return InMemoryRecordStore()


@pytest.fixture
def sqlite_store() -> Generator[SQLiteRecordStore, None, None]:
    """Create a throwaway in-memory SQLite store."""
    store = SQLiteRecordStore(":memory:")
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def flaky_store() -> FlakyRecordStore:
    """Create a store that can be told to fail."""
    return FlakyRecordStore()


@pytest.fixture(params=["memory", "sqlite"])
def registry(request: pytest.FixtureRequest) -> Generator[Registry, None, None]:
    """Create a registry without a ceiling, once per store backend."""
    store = InMemoryRecordStore() if request.param == "memory" else SQLiteRecordStore(":memory:")
    try:
        yield Registry(store)
    finally:
        store.close()
