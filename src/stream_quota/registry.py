"""Identity registry enforcing per-identity stream limits.

Each registered identity may hold at most `limit` concurrent streams. The
registry is the only component that reads or writes identity records, and it
does so exclusively inside a single gate (one re-entrant lock), so a
check-then-act sequence such as "is active < limit? then active += 1" can
never interleave with another caller's.

Architecture:
- The record store is the source of truth; there is no in-memory mirror
- Every operation fetches the record, validates, writes, then releases
- A store failure raises StorageError before anything was written, or from
  the single write itself, so there is never a partial mutation to undo
- Precondition failures raise a PreconditionError subclass and write nothing

Note: One registry per process. Several processes sharing one database file
would each have their own gate and could over-admit.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

from stream_quota.core.config import get_settings
from stream_quota.core.exceptions import (
    AlreadyExistsError,
    InvalidLimitError,
    LimitBelowActiveError,
    LimitReachedError,
    NotFoundError,
    ZeroActiveError,
)
from stream_quota.core.logging import get_logger
from stream_quota.core.types import MAX_LIMIT, IdentityRecord
from stream_quota.persistence import InMemoryRecordStore, SQLiteRecordStore

if TYPE_CHECKING:
    from collections.abc import Iterator

    from stream_quota.core.config import Settings
    from stream_quota.persistence import RecordStore

logger = get_logger(__name__)


class Registry:
    """Thread-safe admission control over a record store.

    Usage:
        registry = Registry(InMemoryRecordStore(), max_concurrency=10)
        registry.register("u1", 3)
        registry.start_stream("u1")
        registry.has_capacity("u1")  # True, 1 of 3 in use
        registry.stop_stream("u1")
    """

    def __init__(self, store: RecordStore, *, max_concurrency: int | None = None) -> None:
        """Initialize the registry.

        Args:
            store: Persistence backend for identity records
            max_concurrency: Ceiling applied to every limit, or None for no ceiling

        Raises:
            ValueError: If max_concurrency is given and below 1
        """
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self._store = store
        self._max_concurrency = max_concurrency
        self._gate = threading.RLock()

    @property
    def max_concurrency(self) -> int | None:
        """System-wide ceiling on per-identity limits (None if unbounded)."""
        return self._max_concurrency

    @property
    def store(self) -> RecordStore:
        return self._store

    def _validate_limit(self, user_id: str, limit: object) -> int:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            logger.warning("Rejected limit %r for %s: not a positive integer", limit, user_id)
            raise InvalidLimitError(
                f"Limit must be a positive integer, got {limit!r}", user_id=user_id
            )
        if limit > MAX_LIMIT:
            logger.warning("Rejected limit %d for %s: above storable maximum", limit, user_id)
            raise InvalidLimitError(
                f"Limit exceeds the maximum storable value of {MAX_LIMIT}", user_id=user_id
            )
        if self._max_concurrency is not None and limit > self._max_concurrency:
            logger.warning(
                "Rejected limit %d for %s: above ceiling %d",
                limit,
                user_id,
                self._max_concurrency,
            )
            raise InvalidLimitError(
                f"Limit {limit} exceeds the maximum of {self._max_concurrency}",
                user_id=user_id,
            )
        return limit

    def _require(self, user_id: str) -> IdentityRecord:
        """Fetch a record or raise NotFoundError. Caller must hold the gate."""
        record = self._store.fetch(user_id)
        if record is None:
            logger.warning("Unknown user %s", user_id)
            raise NotFoundError(f"User not found: {user_id}", user_id=user_id)
        return record

    def register(self, user_id: str, limit: int) -> IdentityRecord:
        """Register a new identity with no open streams.

        Raises:
            InvalidLimitError: If limit is not a positive integer or above the ceiling
            AlreadyExistsError: If the identity is already registered
            StorageError: If the store fails
        """
        with self._gate:
            limit = self._validate_limit(user_id, limit)
            if self._store.fetch(user_id) is not None:
                logger.warning("Cannot register %s: already exists", user_id)
                raise AlreadyExistsError(f"User already exists: {user_id}", user_id=user_id)

            record = IdentityRecord(id=user_id, limit=limit, active=0)
            self._store.insert(record)
            logger.info("Registered user %s with limit %d", user_id, limit)
            return record

    def delete_user(self, user_id: str) -> None:
        """Remove an identity, discarding any open streams.

        Raises:
            NotFoundError: If the identity is not registered
            StorageError: If the store fails
        """
        with self._gate:
            record = self._require(user_id)
            self._store.remove(user_id)
            logger.info("Deleted user %s (%d streams discarded)", user_id, record.active)

    def has_capacity(self, user_id: str) -> bool:
        """Return whether the identity can start one more stream.

        Raises:
            NotFoundError: If the identity is not registered
            StorageError: If the store fails
        """
        with self._gate:
            return self._require(user_id).has_capacity

    def get_user(self, user_id: str) -> IdentityRecord:
        """Return a snapshot of the identity's record.

        Raises:
            NotFoundError: If the identity is not registered
            StorageError: If the store fails
        """
        with self._gate:
            return self._require(user_id)

    def update_limit(self, user_id: str, new_limit: int) -> IdentityRecord:
        """Change the identity's limit without touching open streams.

        Raises:
            NotFoundError: If the identity is not registered
            InvalidLimitError: If new_limit is not a positive integer or above the ceiling
            LimitBelowActiveError: If new_limit is lower than the open stream count
            StorageError: If the store fails
        """
        with self._gate:
            record = self._require(user_id)
            new_limit = self._validate_limit(user_id, new_limit)
            if new_limit < record.active:
                logger.warning(
                    "Cannot set limit of %s to %d: %d streams active",
                    user_id,
                    new_limit,
                    record.active,
                )
                raise LimitBelowActiveError(
                    f"New limit {new_limit} is below the {record.active} active streams",
                    user_id=user_id,
                )

            self._store.update_fields(user_id, limit=new_limit)
            logger.info("Updated limit of %s from %d to %d", user_id, record.limit, new_limit)
            return IdentityRecord(id=user_id, limit=new_limit, active=record.active)

    def start_stream(self, user_id: str) -> IdentityRecord:
        """Admit one more stream for the identity.

        Returns:
            The record after the increment

        Raises:
            NotFoundError: If the identity is not registered
            LimitReachedError: If the identity already holds `limit` streams
            StorageError: If the store fails
        """
        with self._gate:
            record = self._require(user_id)
            if record.active + 1 > record.limit:
                logger.warning("Cannot start stream for %s: limit %d reached", user_id, record.limit)
                raise LimitReachedError(
                    f"User {user_id} reached the limit of {record.limit} streams",
                    user_id=user_id,
                )

            active = record.active + 1
            self._store.update_fields(user_id, active=active)
            logger.info("Started stream for %s (%d/%d)", user_id, active, record.limit)
            return IdentityRecord(id=user_id, limit=record.limit, active=active)

    def stop_stream(self, user_id: str) -> None:
        """Release one of the identity's streams.

        Raises:
            NotFoundError: If the identity is not registered
            ZeroActiveError: If the identity has no open streams
            StorageError: If the store fails
        """
        with self._gate:
            record = self._require(user_id)
            if record.active == 0:
                logger.warning("Cannot stop stream for %s: no active streams", user_id)
                raise ZeroActiveError(f"User {user_id} has no active streams", user_id=user_id)

            active = record.active - 1
            self._store.update_fields(user_id, active=active)
            logger.info("Stopped stream for %s (%d/%d)", user_id, active, record.limit)

    @contextmanager
    def stream(self, user_id: str) -> Iterator[IdentityRecord]:
        """Hold one stream slot for the duration of a with-block.

        Usage:
            with registry.stream("u1") as record:
                ...  # slot held
            # slot released, also when the block raised

        Raises:
            LimitReachedError: On entry, if no slot is free
        """
        record = self.start_stream(user_id)
        try:
            yield record
        finally:
            self.stop_stream(user_id)

    def __len__(self) -> int:
        """Return number of registered identities."""
        with self._gate:
            return len(self._store)


def build_store(settings: Settings) -> RecordStore:
    """Create the record store selected by settings."""
    if settings.storage_backend == "memory":
        return InMemoryRecordStore()
    return SQLiteRecordStore(settings.db_path)


# Global registry instance
# Initialized by the API lifespan or the CLI
registry: Registry | None = None


def get_registry() -> Registry:
    """Get the global registry instance.

    Raises:
        RuntimeError: If registry not initialized
    """
    if registry is None:
        raise RuntimeError("Registry not initialized. Call init_registry() first.")
    return registry


def init_registry(
    store: RecordStore | None = None,
    *,
    settings: Settings | None = None,
) -> Registry:
    """Initialize the global registry.

    Args:
        store: Record store to use (default: built from settings)
        settings: Settings to read the ceiling and backend from (default: global)

    Returns:
        The initialized Registry
    """
    global registry
    settings = settings or get_settings()
    if store is None:
        store = build_store(settings)
    registry = Registry(store, max_concurrency=settings.max_concurrency)
    logger.info(
        "Registry initialized (backend=%s, max_concurrency=%s)",
        type(store).__name__,
        settings.max_concurrency,
    )
    return registry
