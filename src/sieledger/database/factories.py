"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from sieledger.config.settings import get_settings
from sieledger.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks SIELEDGER_DB_PATH
            environment variable, then defaults to ~/.sieledger/sieledger.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("SIELEDGER_DB_PATH")

    if database_path is None:
        # Default to ~/.sieledger/sieledger.db
        home = Path.home()
        db_dir = home / ".sieledger"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "sieledger.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def create_database(database_url: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a database instance from a URL or the configured settings.

    Args:
        database_url: SQLAlchemy URL. If None, uses SIELEDGER_DATABASE_URL,
            falling back to a SQLite file (see create_sqlite_database).
    """
    settings = get_settings()
    if database_url is None:
        database_url = settings.database_url
    if database_url is None:
        return create_sqlite_database(settings.db_path)
    return SQLAlchemyDatabase(database_url)
