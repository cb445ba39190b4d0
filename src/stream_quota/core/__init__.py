"""Core utilities for stream-quota."""

from stream_quota.core.config import Settings, settings
from stream_quota.core.exceptions import (
    AlreadyExistsError,
    InvalidLimitError,
    LimitBelowActiveError,
    LimitReachedError,
    NotFoundError,
    PreconditionError,
    StorageError,
    StreamQuotaError,
    ZeroActiveError,
)
from stream_quota.core.types import IdentityRecord

__all__ = [
    "AlreadyExistsError",
    "IdentityRecord",
    "InvalidLimitError",
    "LimitBelowActiveError",
    "LimitReachedError",
    "NotFoundError",
    "PreconditionError",
    "Settings",
    "StorageError",
    "StreamQuotaError",
    "ZeroActiveError",
    "settings",
]
