"""Persistence port consumed by the registry.

The registry treats the store as the source of truth for "current state":
every operation fetches the record inside its critical section and writes
back before releasing it. Implementations raise StorageError on I/O failure
and must never hand out objects the caller could mutate behind their back.
Inserting a duplicate id or updating a missing one raises KeyError: the
registry checks existence first, so either one indicates a caller bug.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from stream_quota.core.types import IdentityRecord

# Fields the registry may change after a record is created
UPDATABLE_FIELDS = frozenset({"limit", "active"})


def check_update_fields(fields: dict[str, int]) -> None:
    """Validate keyword fields passed to update_fields().

    Raises:
        ValueError: If no fields are given or an unknown field is present
    """
    if not fields:
        raise ValueError("update_fields() requires at least one field")
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update fields: {sorted(unknown)}")


@runtime_checkable
class RecordStore(Protocol):
    """Durable key/record store for identity records."""

    def fetch(self, user_id: str) -> IdentityRecord | None:
        """Return the stored record, or None if absent."""
        ...

    def insert(self, record: IdentityRecord) -> None:
        """Store a new record."""
        ...

    def update_fields(self, user_id: str, **fields: int) -> None:
        """Overwrite the given fields of an existing record."""
        ...

    def remove(self, user_id: str) -> None:
        """Delete a record."""
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...

    def __len__(self) -> int: ...
