"""Unit tests for app.core.security (bcrypt hasher, JWT issuer) and token-related settings."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt
from pydantic import ValidationError

from app.core.config import Settings
from app.core.security import (
    PasswordHasher,
    TokenExpiredError,
    TokenInvalidError,
    TokenIssuer,
    TokenKind,
)

ACCESS_SECRET = "unit-access-secret-0123456789abcdefghijkl"
REFRESH_SECRET = "unit-refresh-secret-0123456789abcdefghijkl"


def _settings(**kwargs: object) -> Settings:
    """Build Settings for tests with distinct signing secrets and an in-memory DB."""
    defaults = {
        "DATABASE_URL": "sqlite://",
        "BCRYPT_ROUNDS": 4,
        "JWT_ACCESS_SECRET": ACCESS_SECRET,
        "JWT_REFRESH_SECRET": REFRESH_SECRET,
    }
    defaults.update(kwargs)
    return Settings(**defaults)


class TestPasswordHasher(unittest.TestCase):
    """Salted hashing: correct password verifies, others do not."""

    def setUp(self) -> None:
        self.hasher = PasswordHasher(rounds=4)

    def test_hash_verifies_original_password(self) -> None:
        hashed = self.hasher.hash("secret1")
        self.assertTrue(self.hasher.verify("secret1", hashed))

    def test_wrong_password_returns_false(self) -> None:
        hashed = self.hasher.hash("secret1")
        self.assertFalse(self.hasher.verify("secret2", hashed))
        self.assertFalse(self.hasher.verify("", hashed))

    def test_hash_is_not_plaintext(self) -> None:
        hashed = self.hasher.hash("secret1")
        self.assertNotEqual(hashed, "secret1")
        self.assertTrue(hashed.startswith("$2"))

    def test_same_password_hashes_differently(self) -> None:
        first = self.hasher.hash("secret1")
        second = self.hasher.hash("secret1")
        self.assertNotEqual(first, second)
        self.assertTrue(self.hasher.verify("secret1", first))
        self.assertTrue(self.hasher.verify("secret1", second))

    def test_malformed_hash_returns_false(self) -> None:
        self.assertFalse(self.hasher.verify("secret1", "not-a-bcrypt-hash"))

    def test_rounds_embedded_in_hash(self) -> None:
        hashed = self.hasher.hash("secret1")
        self.assertEqual(hashed.split("$")[2], "04")

    def test_long_password_truncated_to_bcrypt_limit(self) -> None:
        password = "a" * 100
        hashed = self.hasher.hash(password)
        self.assertTrue(self.hasher.verify(password, hashed))


class TestTokenIssuer(unittest.TestCase):
    """Issue and verify access/refresh tokens."""

    def setUp(self) -> None:
        self.issuer = TokenIssuer(_settings())

    def test_access_token_roundtrip(self) -> None:
        token = self.issuer.issue("alice", TokenKind.ACCESS)
        self.assertEqual(self.issuer.verify(token, TokenKind.ACCESS), "alice")

    def test_refresh_token_roundtrip(self) -> None:
        token = self.issuer.issue("alice", TokenKind.REFRESH)
        self.assertEqual(self.issuer.verify(token, TokenKind.REFRESH), "alice")

    def test_payload_claims(self) -> None:
        token = self.issuer.issue("alice", TokenKind.ACCESS)
        payload = self.issuer.decode(token, TokenKind.ACCESS)
        self.assertEqual(payload["sub"], "alice")
        self.assertEqual(payload["type"], "access")
        self.assertIn("iat", payload)
        self.assertIn("jti", payload)
        self.assertEqual(payload["exp"] - payload["iat"], 60 * 60)

    def test_refresh_outlives_access(self) -> None:
        access = self.issuer.decode(self.issuer.issue("a", TokenKind.ACCESS), TokenKind.ACCESS)
        refresh = self.issuer.decode(self.issuer.issue("a", TokenKind.REFRESH), TokenKind.REFRESH)
        self.assertGreater(refresh["exp"], access["exp"])

    def test_access_token_not_accepted_as_refresh(self) -> None:
        token = self.issuer.issue("alice", TokenKind.ACCESS)
        with self.assertRaises(TokenInvalidError):
            self.issuer.verify(token, TokenKind.REFRESH)

    def test_refresh_token_not_accepted_as_access(self) -> None:
        token = self.issuer.issue("alice", TokenKind.REFRESH)
        with self.assertRaises(TokenInvalidError):
            self.issuer.verify(token, TokenKind.ACCESS)

    def test_wrong_type_claim_rejected(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "alice", "type": "refresh", "iat": now, "exp": now + timedelta(minutes=5)},
            ACCESS_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(TokenInvalidError):
            self.issuer.verify(token, TokenKind.ACCESS)

    def test_expired_token_raises_expired(self) -> None:
        past = datetime.now(UTC) - timedelta(hours=2)
        token = jwt.encode(
            {"sub": "alice", "type": "refresh", "iat": past, "exp": past + timedelta(minutes=1)},
            REFRESH_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(TokenExpiredError):
            self.issuer.verify(token, TokenKind.REFRESH)

    def test_tampered_token_rejected(self) -> None:
        token = self.issuer.issue("alice", TokenKind.ACCESS)
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        with self.assertRaises(TokenInvalidError):
            self.issuer.verify(tampered, TokenKind.ACCESS)

    def test_garbage_token_rejected(self) -> None:
        with self.assertRaises(TokenInvalidError):
            self.issuer.verify("not-a-jwt", TokenKind.ACCESS)

    def test_missing_subject_rejected(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"type": "access", "iat": now, "exp": now + timedelta(minutes=5)},
            ACCESS_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(TokenInvalidError):
            self.issuer.verify(token, TokenKind.ACCESS)

    def test_tokens_issued_back_to_back_differ(self) -> None:
        first = self.issuer.issue("alice", TokenKind.REFRESH)
        second = self.issuer.issue("alice", TokenKind.REFRESH)
        self.assertNotEqual(first, second)


class TestTokenSettings(unittest.TestCase):
    """Settings reject token configurations that would break the access/refresh split."""

    def test_identical_secrets_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_REFRESH_SECRET=ACCESS_SECRET)

    def test_refresh_must_outlive_access(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_ACCESS_EXPIRE_MINUTES=60, JWT_REFRESH_EXPIRE_MINUTES=30)

    def test_non_hmac_algorithm_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_ALGORITHM="RS256")

    def test_unsupported_database_url_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(DATABASE_URL="mysql://localhost/db")

    def test_settings_are_immutable(self) -> None:
        settings = _settings()
        with self.assertRaises(ValidationError):
            settings.JWT_ACCESS_EXPIRE_MINUTES = 5


if __name__ == "__main__":
    unittest.main()
