"""Endpoints for the signed-in user's own account."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.v1.auth import get_auth_service, get_current_user_id, to_http_exception
from app.schemas.auth import (
    MessageResponse,
    UpdateUserRequest,
    UserMessageResponse,
    UserPublic,
    VerifyPasswordRequest,
)
from app.services.auth import AuthService, AuthServiceError

router = APIRouter()


@router.get("/me", response_model=UserPublic)
def get_me(
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserPublic:
    try:
        return service.get_profile(user_id)
    except AuthServiceError as e:
        raise to_http_exception(e) from e


@router.patch("/me", response_model=UserMessageResponse)
def update_me(
    body: UpdateUserRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserMessageResponse:
    """
    Update nickname, profile image and/or password.

    Send password as "" to keep the current one.
    """
    try:
        return service.update_account(user_id, body)
    except AuthServiceError as e:
        raise to_http_exception(e) from e


@router.post("/me/verify-password", response_model=MessageResponse)
def verify_my_password(
    body: VerifyPasswordRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Check a password against the signed-in account (e.g. before sensitive changes)."""
    try:
        return service.verify_password(user_id, body.password)
    except AuthServiceError as e:
        raise to_http_exception(e) from e


@router.delete("/me", response_model=MessageResponse)
def delete_me(
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    try:
        return service.delete_account(user_id)
    except AuthServiceError as e:
        raise to_http_exception(e) from e
