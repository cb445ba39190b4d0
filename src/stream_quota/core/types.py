"""Shared type definitions."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

RECORD_FIELDS = frozenset({"id", "limit", "active"})

# Largest value a SQLite INTEGER column holds
MAX_LIMIT = 2**63 - 1


@dataclass(frozen=True)
class IdentityRecord:
    """Admission-control state for a single identity.

    Attributes:
        id: Opaque unique key
        limit: Maximum concurrent streams allowed (>= 1)
        active: Streams currently open (0 <= active <= limit at rest)
    """

    id: str
    limit: int
    active: int = 0

    @property
    def has_capacity(self) -> bool:
        """Whether one more stream can be started."""
        return self.active < self.limit

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict with exactly the record fields."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IdentityRecord:
        """Build a record from a dict produced by to_dict().

        Raises:
            ValueError: If keys are missing or unexpected keys are present
        """
        keys = set(data)
        if keys != RECORD_FIELDS:
            raise ValueError(
                f"Record must have exactly {sorted(RECORD_FIELDS)}, got {sorted(keys)}"
            )
        return cls(id=str(data["id"]), limit=int(data["limit"]), active=int(data["active"]))
