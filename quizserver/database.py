"""SQLite storage of user accounts with hashed passwords."""

from __future__ import annotations

import logging
import sqlite3
from os import PathLike
from types import TracebackType

from quizserver.sha384 import sha384_hex

log = logging.getLogger(__name__)

DEFAULT_PATH = "project_data.db"

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS users ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "login TEXT UNIQUE NOT NULL, "
    "password TEXT NOT NULL)"
)


def hash_password(password: str) -> str:
    """Return the stored form of a password: its SHA-384 hex digest."""
    return sha384_hex(password)


class UserDatabase:
    """A table of users keyed by login, each with a password hash."""

    def __init__(self, path: str | PathLike[str] = DEFAULT_PATH) -> None:
        self._connection = sqlite3.connect(path)
        try:
            self._connection.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as exc:
            log.warning("Failed to enable foreign keys: %s", exc)
        with self._connection:
            self._connection.execute(_SCHEMA)
        log.info("Database opened successfully")

    def user_exists(self, login: str) -> bool:
        """Tell whether a user with this login is registered."""
        row = self._connection.execute(
            "SELECT id FROM users WHERE login = ?", (login,)
        ).fetchone()
        return row is not None

    def add_user(self, login: str, password: str) -> None:
        """Register a user, storing the hash of the password.

        Raises sqlite3.IntegrityError if the login is already taken.
        """
        with self._connection:
            self._connection.execute(
                "INSERT INTO users (login, password) VALUES (?, ?)",
                (login, hash_password(password)),
            )

    def password_hash(self, login: str) -> str | None:
        """Return the stored password hash for a login, or None if unknown."""
        row = self._connection.execute(
            "SELECT password FROM users WHERE login = ?", (login,)
        ).fetchone()
        return None if row is None else row[0]

    def close(self) -> None:
        """Close the underlying connection."""
        self._connection.close()

    def __enter__(self) -> UserDatabase:
        return self

    def __exit__(
        self,
        *args: type[BaseException] | BaseException | TracebackType | None,
    ) -> None:
        self.close()