"""Multiplayer TCP quiz server with SQLite-backed player accounts and SHA-384 password hashing."""

__version__ = "0.1.0"
__all__ = ["sha384", "database", "quiz", "server"]