"""Pydantic schemas for API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from stream_quota.core.types import MAX_LIMIT, IdentityRecord


class RegisterRequest(BaseModel):
    """Request body for POST /api/users."""

    userId: str = Field(..., min_length=1, description="Identity to register")
    # strict: reject "3" and 3.0 before they reach the registry
    limit: int = Field(
        ..., ge=1, le=MAX_LIMIT, strict=True, description="Maximum concurrent streams"
    )


class UpdateLimitRequest(BaseModel):
    """Request body for PUT /api/users/{user_id}/limit."""

    newLimit: int = Field(
        ..., ge=1, le=MAX_LIMIT, strict=True, description="New maximum concurrent streams"
    )


class UserResponse(BaseModel):
    """Current state of one identity."""

    userId: str
    limit: int
    active: int

    @classmethod
    def from_record(cls, record: IdentityRecord) -> UserResponse:
        return cls(userId=record.id, limit=record.limit, active=record.active)


class UserMessageResponse(BaseModel):
    """Confirmation message carrying the identity's state after the change."""

    message: str
    user: UserResponse


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


class CapacityResponse(BaseModel):
    """Response for GET /api/users/{user_id}/limit."""

    canStart: bool = Field(..., description="Whether one more stream would be admitted")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(..., description="Error description")
    error: str = Field(..., description="Machine-readable error kind")
