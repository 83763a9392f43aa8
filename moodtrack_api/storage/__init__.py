"""Storage layer for users, emotion records and playlists."""

from .database import Database, get_db, init_database

__all__ = ["Database", "get_db", "init_database"]
