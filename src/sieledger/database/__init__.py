"""Database layer for sieledger application."""

from sieledger.database.base import Database
from sieledger.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
