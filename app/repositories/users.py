"""Credential store: persistence of user accounts behind a small interface."""

import logging
from typing import Any, Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User

logger = logging.getLogger(__name__)

# Columns callers may change through update(); idx and created_at are fixed.
UPDATABLE_FIELDS = frozenset(
    {"password_hash", "nickname", "profile_image", "refresh_token"}
)


class UserAlreadyExistsError(Exception):
    """Raised when an insert or update violates the unique id or nickname."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"User with this {field} already exists")


class UserNotFoundError(Exception):
    """Raised when update or delete targets an id that is not stored."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id!r} not found")


class UserRepository(Protocol):
    """Capabilities the auth service needs from account storage."""

    def find_by_id(self, user_id: str) -> User | None: ...

    def find_by_nickname(self, nickname: str) -> User | None: ...

    def insert(self, user: User) -> User: ...

    def update(self, user_id: str, changes: dict[str, Any]) -> User: ...

    def delete(self, user_id: str) -> None: ...

    def replace_refresh_token(self, user_id: str, expected: str, new: str) -> bool: ...


# Unique index on users.nickname (see app.models.base naming convention).
NICKNAME_INDEX = "ix_users_nickname"


def _violated_field(error: IntegrityError) -> str:
    """
    Map a unique-constraint error to the column involved.

    Matches on the constraint name (psycopg2 diag, else the message header)
    rather than the whole message, whose DETAIL line echoes the rejected value.
    """
    diag = getattr(error.orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    if constraint:
        return "nickname" if constraint == NICKNAME_INDEX else "id"
    message = str(error.orig)
    header = message.splitlines()[0].lower() if message else ""
    if "users.nickname" in header or f"\"{NICKNAME_INDEX}\"" in header:
        return "nickname"
    return "id"


class SqlAlchemyUserRepository:
    """UserRepository backed by a SQLAlchemy session. Each write commits."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_id(self, user_id: str) -> User | None:
        return self.session.query(User).filter(User.id == user_id).first()

    def find_by_nickname(self, nickname: str) -> User | None:
        return self.session.query(User).filter(User.nickname == nickname).first()

    def insert(self, user: User) -> User:
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            field = _violated_field(e)
            logger.info("Insert rejected by unique constraint on %s", field)
            raise UserAlreadyExistsError(field) from e
        self.session.refresh(user)
        return user

    def update(self, user_id: str, changes: dict[str, Any]) -> User:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        user = self.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        for field, value in changes.items():
            setattr(user, field, value)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            field = _violated_field(e)
            logger.info("Update of %r rejected by unique constraint on %s", user_id, field)
            raise UserAlreadyExistsError(field) from e
        self.session.refresh(user)
        return user

    def delete(self, user_id: str) -> None:
        deleted = (
            self.session.query(User)
            .filter(User.id == user_id)
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            self.session.rollback()
            raise UserNotFoundError(user_id)
        self.session.commit()

    def replace_refresh_token(self, user_id: str, expected: str, new: str) -> bool:
        """
        Swap the stored refresh token only if it still equals expected.

        Runs as one conditional UPDATE so two requests holding the same token
        cannot both win. Returns False when no row matched.
        """
        replaced = (
            self.session.query(User)
            .filter(User.id == user_id, User.refresh_token == expected)
            .update({User.refresh_token: new}, synchronize_session=False)
        )
        self.session.commit()
        return replaced == 1
