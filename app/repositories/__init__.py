"""Data-access layer."""

from app.repositories.users import (
    SqlAlchemyUserRepository,
    UserAlreadyExistsError,
    UserNotFoundError,
    UserRepository,
)

__all__ = [
    "SqlAlchemyUserRepository",
    "UserAlreadyExistsError",
    "UserNotFoundError",
    "UserRepository",
]
