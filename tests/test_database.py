import sqlite3

import pytest

from quizserver.database import UserDatabase, hash_password
from quizserver.sha384 import sha384_hex


@pytest.fixture
def db():
    with UserDatabase(":memory:") as database:
        yield database


def test_hash_password_is_sha384_hex():
    password = "password"
    digest = hash_password(password)
    assert digest == sha384_hex(password)
    assert len(digest) == 96


def test_unknown_user(db):
    assert db.user_exists("alice") is False
    assert db.password_hash("alice") is None


def test_add_user_stores_hash(db):
    password = "password"
    db.add_user("alice", password)
    assert db.user_exists("alice") is True
    assert db.password_hash("alice") == hash_password(password)
    assert db.password_hash("alice") != password


def test_duplicate_login_rejected(db):
    db.add_user("alice", "password")
    with pytest.raises(sqlite3.IntegrityError):
        db.add_user("alice", "secret")
    assert db.password_hash("alice") == hash_password("password")


def test_users_are_independent(db):
    db.add_user("alice", "password")
    db.add_user("bob", "secret")
    assert db.password_hash("alice") == hash_password("password")
    assert db.password_hash("bob") == hash_password("secret")


def test_persists_across_connections(tmp_path):
    path = tmp_path / "users.db"
    with UserDatabase(path) as first:
        first.add_user("carol", "password")
    with UserDatabase(path) as second:
        assert second.user_exists("carol") is True
        assert second.password_hash("carol") == hash_password("password")


def test_close_ends_connection(tmp_path):
    database = UserDatabase(tmp_path / "users.db")
    database.close()
    with pytest.raises(sqlite3.ProgrammingError):
        database.user_exists("alice")