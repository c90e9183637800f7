"""Account and session lifecycle: sign-up, sign-in, token refresh and profile changes."""

from __future__ import annotations

import logging
from typing import Any

from app.core.security import PasswordHasher, TokenError, TokenIssuer, TokenKind
from app.models.user import User
from app.repositories.users import (
    UserAlreadyExistsError,
    UserNotFoundError,
    UserRepository,
)
from app.schemas.auth import (
    MessageResponse,
    SignInResponse,
    SignUpRequest,
    TokenPair,
    UpdateUserRequest,
    UserMessageResponse,
    UserPublic,
)

logger = logging.getLogger(__name__)

# Shared by every sign-in failure so callers cannot tell which part was wrong.
INVALID_CREDENTIALS_MESSAGE = "Invalid id or password."
INVALID_REFRESH_TOKEN_MESSAGE = "Invalid refresh token."


class AuthServiceError(Exception):
    """Base class for auth service failures; message is safe to show clients."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UnauthorizedError(AuthServiceError):
    """Bad credentials, bad or stale token, or an account that must not be revealed."""


class ConflictError(AuthServiceError):
    """Id or nickname already taken."""


class NotFoundError(AuthServiceError):
    """Account lookup for an already-authenticated caller found nothing."""


def to_public_user(user: User) -> UserPublic:
    """Build the client-facing view of a stored account. The record is not modified."""
    return UserPublic.model_validate(user)


def _conflict_message(field: str) -> str:
    if field == "nickname":
        return "Nickname is already in use."
    return "Id is already in use."


class AuthService:
    def __init__(
        self,
        repository: UserRepository,
        token_issuer: TokenIssuer,
        hasher: PasswordHasher,
    ) -> None:
        self.repository = repository
        self.token_issuer = token_issuer
        self.hasher = hasher

    def sign_up(self, body: SignUpRequest) -> UserMessageResponse:
        """Create an account. Raises ConflictError when id or nickname is taken."""
        if self.repository.find_by_id(body.id) is not None:
            raise ConflictError(_conflict_message("id"))
        if self.repository.find_by_nickname(body.nickname) is not None:
            raise ConflictError(_conflict_message("nickname"))

        user = User(
            id=body.id,
            password_hash=self.hasher.hash(body.password),
            nickname=body.nickname,
            profile_image=body.profile_image,
        )
        try:
            # The store's unique constraints settle races the checks above miss.
            created = self.repository.insert(user)
        except UserAlreadyExistsError as e:
            raise ConflictError(_conflict_message(e.field)) from e
        logger.info("Account created: id=%s", created.id)
        return UserMessageResponse(message="Sign-up completed.", user=to_public_user(created))

    def sign_in(self, user_id: str, password: str) -> SignInResponse:
        """
        Verify credentials and issue a fresh token pair.

        The refresh token is stored on the account, replacing any earlier one.
        Unknown id and wrong password raise the same UnauthorizedError.
        """
        user = self.repository.find_by_id(user_id)
        # Unknown ids still pay for a bcrypt check so timing matches a wrong password.
        stored_hash = user.password_hash if user is not None else self.hasher.dummy_hash
        if not self.hasher.verify(password, stored_hash) or user is None:
            logger.info("Sign-in rejected for id=%s", user_id)
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

        tokens = self._rotate_tokens(user.id)
        return SignInResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            user=to_public_user(user),
        )

    def refresh(self, refresh_token: str) -> TokenPair:
        """
        Exchange the account's current refresh token for a new pair.

        Only the most recently issued refresh token is accepted; an older one
        is rejected even while its signature and expiry are still valid.
        """
        try:
            user_id = self.token_issuer.verify(refresh_token, TokenKind.REFRESH)
        except TokenError as e:
            logger.info("Refresh rejected: %s", e.message)
            raise UnauthorizedError(INVALID_REFRESH_TOKEN_MESSAGE) from e

        access_token = self.token_issuer.issue(user_id, TokenKind.ACCESS)
        new_refresh_token = self.token_issuer.issue(user_id, TokenKind.REFRESH)
        # Compare-and-set in the store: of two requests presenting the same
        # token, only the first swap matches a row.
        if not self.repository.replace_refresh_token(user_id, refresh_token, new_refresh_token):
            logger.warning(
                "Refresh rejected: token for id=%s is superseded or the account is gone",
                user_id,
            )
            raise UnauthorizedError(INVALID_REFRESH_TOKEN_MESSAGE)
        return TokenPair(access_token=access_token, refresh_token=new_refresh_token)

    def sign_out(self, user_id: str) -> MessageResponse:
        """Forget the stored refresh token so no outstanding one can be rotated."""
        try:
            self.repository.update(user_id, {"refresh_token": None})
        except UserNotFoundError as e:
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE) from e
        return MessageResponse(message="Signed out.")

    def get_profile(self, user_id: str) -> UserPublic:
        user = self.repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return to_public_user(user)

    def update_account(self, user_id: str, body: UpdateUserRequest) -> UserMessageResponse:
        """
        Apply profile changes. An empty password keeps the stored hash as is;
        any other value is re-hashed.
        """
        if self.repository.find_by_id(user_id) is None:
            raise NotFoundError("User not found.")

        changes: dict[str, Any] = {}
        if body.password != "":
            changes["password_hash"] = self.hasher.hash(body.password)
        if body.nickname is not None:
            changes["nickname"] = body.nickname
        if "profile_image" in body.model_fields_set:
            changes["profile_image"] = body.profile_image

        try:
            updated = self.repository.update(user_id, changes)
        except UserAlreadyExistsError as e:
            raise ConflictError(_conflict_message(e.field)) from e
        except UserNotFoundError as e:
            raise NotFoundError("User not found.") from e
        logger.info("Account updated: id=%s fields=%s", user_id, sorted(changes))
        return UserMessageResponse(
            message="Account information updated.", user=to_public_user(updated)
        )

    def verify_password(self, user_id: str, password: str) -> MessageResponse:
        user = self.repository.find_by_id(user_id)
        if user is None or not self.hasher.verify(password, user.password_hash):
            raise UnauthorizedError("Password does not match.")
        return MessageResponse(message="Password matches.")

    def delete_account(self, user_id: str) -> MessageResponse:
        try:
            self.repository.delete(user_id)
        except UserNotFoundError as e:
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE) from e
        logger.info("Account deleted: id=%s", user_id)
        return MessageResponse(message="Account deleted.")

    def check_duplicate_id(self, user_id: str) -> MessageResponse:
        if self.repository.find_by_id(user_id) is not None:
            raise ConflictError(_conflict_message("id"))
        return MessageResponse(message="Id is available.")

    def check_duplicate_nickname(self, nickname: str) -> MessageResponse:
        if self.repository.find_by_nickname(nickname) is not None:
            raise ConflictError(_conflict_message("nickname"))
        return MessageResponse(message="Nickname is available.")

    def _rotate_tokens(self, user_id: str) -> TokenPair:
        access_token = self.token_issuer.issue(user_id, TokenKind.ACCESS)
        refresh_token = self.token_issuer.issue(user_id, TokenKind.REFRESH)
        try:
            self.repository.update(user_id, {"refresh_token": refresh_token})
        except UserNotFoundError as e:
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE) from e
        return TokenPair(access_token=access_token, refresh_token=refresh_token)
