"""Custom exceptions for stream-quota."""

from __future__ import annotations


class StreamQuotaError(Exception):
    """Base exception for stream-quota."""


class PreconditionError(StreamQuotaError):
    """A request was rejected because the identity's state does not allow it.

    These are expected outcomes: the registry validates, rejects, and leaves
    state untouched. Callers decide whether to retry.

    Attributes:
        code: Stable snake_case identifier for transport layers
        user_id: The identity the request concerned
    """

    code = "precondition_failed"

    def __init__(self, message: str, *, user_id: str | None = None) -> None:
        super().__init__(message)
        self.user_id = user_id


class AlreadyExistsError(PreconditionError):
    """The identity is already registered."""

    code = "already_exists"


class NotFoundError(PreconditionError):
    """The identity is not registered."""

    code = "not_found"


class InvalidLimitError(PreconditionError):
    """Limit is not a positive integer or exceeds the configured ceiling."""

    code = "invalid_limit"


class LimitBelowActiveError(PreconditionError):
    """New limit is lower than the number of streams currently open."""

    code = "limit_below_active"


class LimitReachedError(PreconditionError):
    """The identity already holds as many streams as its limit allows."""

    code = "limit_reached"


class ZeroActiveError(PreconditionError):
    """Stop requested for an identity with no open streams."""

    code = "zero_active"


class StorageError(StreamQuotaError):
    """The record store failed to read or write."""

    code = "storage_error"
