"""Pydantic request/response schemas."""

from app.schemas.auth import (
    MessageResponse,
    RefreshRequest,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    TokenPair,
    UpdateUserRequest,
    UserMessageResponse,
    UserPublic,
    VerifyPasswordRequest,
)
from app.schemas.health import HealthResponse

__all__ = [
    "HealthResponse",
    "MessageResponse",
    "RefreshRequest",
    "SignInRequest",
    "SignInResponse",
    "SignUpRequest",
    "TokenPair",
    "UpdateUserRequest",
    "UserMessageResponse",
    "UserPublic",
    "VerifyPasswordRequest",
]
