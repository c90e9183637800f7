"""Test environment: in-memory SQLite and cheap bcrypt before app modules load settings."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret-0123456789abcdefghij")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-0123456789abcdefghij")
