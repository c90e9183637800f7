"""Unit tests for app.repositories.users: unique-constraint mapping and migration config."""

import configparser
import unittest
from pathlib import Path
from types import SimpleNamespace

from sqlalchemy.exc import IntegrityError

from app.repositories.users import _violated_field

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


class _DriverError(Exception):
    """Stand-in for a DBAPI error, optionally carrying psycopg2-style diag."""

    def __init__(self, message: str, constraint_name: str | None = None) -> None:
        super().__init__(message)
        if constraint_name is not None:
            self.diag = SimpleNamespace(constraint_name=constraint_name)


def _integrity_error(message: str, constraint_name: str | None = None) -> IntegrityError:
    return IntegrityError("INSERT INTO users ...", {}, _DriverError(message, constraint_name))


class TestViolatedField(unittest.TestCase):
    """The column is taken from the constraint name, never from the echoed value."""

    def test_postgres_id_with_nickname_in_value(self) -> None:
        err = _integrity_error(
            'duplicate key value violates unique constraint "ix_users_id"\n'
            "DETAIL:  Key (id)=(nickname_fan) already exists.",
            constraint_name="ix_users_id",
        )
        self.assertEqual(_violated_field(err), "id")

    def test_postgres_nickname_constraint(self) -> None:
        err = _integrity_error(
            'duplicate key value violates unique constraint "ix_users_nickname"\n'
            "DETAIL:  Key (nickname)=(alice) already exists.",
            constraint_name="ix_users_nickname",
        )
        self.assertEqual(_violated_field(err), "nickname")

    def test_message_header_without_diag(self) -> None:
        err = _integrity_error(
            'duplicate key value violates unique constraint "ix_users_id"\n'
            "DETAIL:  Key (id)=(nickname_fan) already exists."
        )
        self.assertEqual(_violated_field(err), "id")

    def test_sqlite_messages(self) -> None:
        self.assertEqual(
            _violated_field(_integrity_error("UNIQUE constraint failed: users.nickname")),
            "nickname",
        )
        self.assertEqual(
            _violated_field(_integrity_error("UNIQUE constraint failed: users.id")), "id"
        )


class TestAlembicIni(unittest.TestCase):
    """alembic/env.py hands alembic.ini straight to logging.config.fileConfig."""

    def test_logging_sections_present(self) -> None:
        parser = configparser.ConfigParser()
        parser.read(ALEMBIC_INI)
        for section in ("loggers", "handlers", "formatters", "logger_root"):
            self.assertTrue(parser.has_section(section), section)
        self.assertEqual(parser.get("alembic", "script_location"), "alembic")


if __name__ == "__main__":
    unittest.main()
