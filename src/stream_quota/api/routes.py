"""API route handlers for stream admission control.

Handlers are sync defs: FastAPI runs them in its threadpool, and the
registry's gate serializes them. Registry errors are not caught here; the
exception handlers in api.errors translate them to HTTP responses.
"""

from __future__ import annotations

from fastapi import APIRouter

from stream_quota.api.schemas import (
    CapacityResponse,
    ErrorResponse,
    MessageResponse,
    RegisterRequest,
    UpdateLimitRequest,
    UserMessageResponse,
    UserResponse,
)
from stream_quota.core.logging import get_logger
from stream_quota.registry import get_registry

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "User not found"}}


@router.post(
    "",
    response_model=UserMessageResponse,
    status_code=201,
    responses={
        201: {"description": "User registered"},
        400: {"model": ErrorResponse, "description": "Limit above the configured maximum"},
        409: {"model": ErrorResponse, "description": "User already exists"},
    },
)
def register_user(body: RegisterRequest) -> UserMessageResponse:
    """Register a user with a concurrent stream limit."""
    logger.debug("Register request for %s (limit=%d)", body.userId, body.limit)
    record = get_registry().register(body.userId, body.limit)
    return UserMessageResponse(
        message="User registered successfully",
        user=UserResponse.from_record(record),
    )


@router.get("/{user_id}", response_model=UserResponse, responses=_NOT_FOUND)
def get_user(user_id: str) -> UserResponse:
    """Get a user's limit and active stream count."""
    return UserResponse.from_record(get_registry().get_user(user_id))


@router.delete("/{user_id}", response_model=MessageResponse, responses=_NOT_FOUND)
def delete_user(user_id: str) -> MessageResponse:
    """Delete a user. Open streams are discarded."""
    get_registry().delete_user(user_id)
    return MessageResponse(message="User deleted successfully")


@router.get("/{user_id}/limit", response_model=CapacityResponse, responses=_NOT_FOUND)
def check_capacity(user_id: str) -> CapacityResponse:
    """Check whether the user may start another stream."""
    return CapacityResponse(canStart=get_registry().has_capacity(user_id))


@router.put(
    "/{user_id}/limit",
    response_model=UserMessageResponse,
    responses={
        **_NOT_FOUND,
        400: {"model": ErrorResponse, "description": "Limit above the configured maximum"},
        409: {"model": ErrorResponse, "description": "Limit below active streams"},
    },
)
def update_limit(user_id: str, body: UpdateLimitRequest) -> UserMessageResponse:
    """Change a user's stream limit."""
    record = get_registry().update_limit(user_id, body.newLimit)
    return UserMessageResponse(
        message="Limit updated successfully",
        user=UserResponse.from_record(record),
    )


@router.post(
    "/{user_id}/streams",
    response_model=UserMessageResponse,
    responses={
        **_NOT_FOUND,
        429: {"model": ErrorResponse, "description": "Stream limit reached"},
    },
)
def start_stream(user_id: str) -> UserMessageResponse:
    """Start a stream for the user if under the limit."""
    record = get_registry().start_stream(user_id)
    return UserMessageResponse(
        message="Stream started successfully",
        user=UserResponse.from_record(record),
    )


@router.delete(
    "/{user_id}/streams",
    response_model=MessageResponse,
    responses={
        **_NOT_FOUND,
        409: {"model": ErrorResponse, "description": "No active streams"},
    },
)
def stop_stream(user_id: str) -> MessageResponse:
    """Stop one of the user's streams."""
    get_registry().stop_stream(user_id)
    return MessageResponse(message="Stream stopped successfully")
