"""Request/response schemas for auth and account endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.core.security import (
    NICKNAME_MAX_LEN,
    NICKNAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USER_ID_MAX_LEN,
    USER_ID_MIN_LEN,
)


class SignUpRequest(BaseModel):
    """New account: login id, password and profile fields."""

    id: str = Field(
        ..., min_length=USER_ID_MIN_LEN, max_length=USER_ID_MAX_LEN, description="Login id"
    )
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )
    nickname: str = Field(
        ..., min_length=NICKNAME_MIN_LEN, max_length=NICKNAME_MAX_LEN, description="Nickname"
    )
    profile_image: str | None = Field(
        default=None, max_length=2048, description="Profile image URL"
    )


class SignInRequest(BaseModel):
    """Credentials for sign-in."""

    id: str = Field(..., min_length=USER_ID_MIN_LEN, max_length=USER_ID_MAX_LEN)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token from sign-in")


class UpdateUserRequest(BaseModel):
    """
    Profile update. An empty (or omitted) password means "keep the current
    password"; any other value must meet the normal length rules.
    """

    password: str = Field(default="", max_length=PASSWORD_MAX_LEN)
    nickname: str | None = Field(
        default=None, min_length=NICKNAME_MIN_LEN, max_length=NICKNAME_MAX_LEN
    )
    profile_image: str | None = Field(default=None, max_length=2048)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if v != "" and len(v) < PASSWORD_MIN_LEN:
            raise ValueError(f"password must be empty or at least {PASSWORD_MIN_LEN} characters")
        return v


class VerifyPasswordRequest(BaseModel):
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)


class UserPublic(BaseModel):
    """User as returned to clients: no password hash, refresh token or row id."""

    id: str
    nickname: str
    profile_image: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    message: str


class UserMessageResponse(BaseModel):
    """Message plus the affected (sanitized) user."""

    message: str
    user: UserPublic


class TokenPair(BaseModel):
    """Access and refresh tokens returned after sign-in or refresh."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")


class SignInResponse(TokenPair):
    user: UserPublic
