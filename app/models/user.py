"""ORM model for user accounts (credentials, profile and current refresh token)."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from app.models.base import Base


class User(Base):
    """
    User account for sign-in and JWT session management.

    idx is the internal row id; id is the login identifier the user chose.
    refresh_token holds the most recently issued refresh token (one active
    session per account).
    """

    __tablename__ = "users"

    idx = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    nickname = Column(String(64), nullable=False, unique=True, index=True)
    profile_image = Column(String(2048), nullable=True)
    refresh_token = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
