"""Database layer for kidsmoney application."""

from kidsmoney.database.base import Database
from kidsmoney.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
