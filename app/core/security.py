"""Password hashing and JWT issuance/verification for authentication."""

import uuid
from datetime import UTC, datetime, timedelta
from enum import Enum
from functools import lru_cache
from typing import Any

import bcrypt
import jwt

from app.core.config import Settings

# Min/max lengths for id, nickname and password validation.
USER_ID_MIN_LEN = 1
USER_ID_MAX_LEN = 255
NICKNAME_MIN_LEN = 1
NICKNAME_MAX_LEN = 64
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


@lru_cache
def _dummy_hash(rounds: int) -> str:
    """Hash of a random throwaway password, computed once per cost factor."""
    return bcrypt.hashpw(uuid.uuid4().bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


class PasswordHasher:
    """Salted one-way hashing; the salt is embedded in the returned hash."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain_password: str, hashed: str) -> bool:
        """Verify a plain password against a stored hash."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    @property
    def dummy_hash(self) -> str:
        """A valid hash no password matches; verify against it when there is no account."""
        return _dummy_hash(self.rounds)


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class TokenError(Exception):
    """Base class for token verification failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TokenExpiredError(TokenError):
    """Raised when a token's signature is valid but its exp is in the past."""


class TokenInvalidError(TokenError):
    """Raised for bad signatures, malformed tokens, wrong kind or missing subject."""


class TokenIssuer:
    """
    Mints and verifies signed, time-limited tokens bound to a user id.

    Access and refresh tokens are signed with different secrets so one kind
    can never be replayed as the other.
    """

    def __init__(self, settings: Settings) -> None:
        self._algorithm = settings.JWT_ALGORITHM
        self._secrets = {
            TokenKind.ACCESS: settings.JWT_ACCESS_SECRET.get_secret_value(),
            TokenKind.REFRESH: settings.JWT_REFRESH_SECRET.get_secret_value(),
        }
        self._lifetimes = {
            TokenKind.ACCESS: timedelta(minutes=settings.JWT_ACCESS_EXPIRE_MINUTES),
            TokenKind.REFRESH: timedelta(minutes=settings.JWT_REFRESH_EXPIRE_MINUTES),
        }

    def issue(self, sub: str, kind: TokenKind) -> str:
        """Create a token with sub, type, iat, exp and a unique jti."""
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(sub),
            "type": kind.value,
            "iat": now,
            "exp": now + self._lifetimes[kind],
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._secrets[kind], algorithm=self._algorithm)

    def decode(self, token: str, kind: TokenKind) -> dict[str, Any]:
        """
        Decode and validate a token of the given kind; return its payload.
        Raises TokenExpiredError or TokenInvalidError.
        """
        try:
            payload = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.PyJWTError as e:
            raise TokenInvalidError("Invalid token") from e
        if payload.get("type") != kind.value:
            raise TokenInvalidError("Invalid token type")
        if not payload.get("sub"):
            raise TokenInvalidError("Invalid token payload")
        return payload

    def verify(self, token: str, kind: TokenKind) -> str:
        """Return the subject id of a valid token; raise TokenError otherwise."""
        return self.decode(token, kind)["sub"]
