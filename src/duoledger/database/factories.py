"""Storage factory functions for creating storage instances."""

import os
from pathlib import Path
from typing import Optional

from duoledger.database.base import Storage
from duoledger.database.json_file import JsonFileStorage
from duoledger.database.sqlalchemy_db import SQLAlchemyStorage

DATA_PATH_ENV = "DUOLEDGER_DATA_PATH"


def default_data_path() -> str:
    """Default storage location, ~/.duoledger/duoledger.db."""
    data_dir = Path.home() / ".duoledger"
    data_dir.mkdir(exist_ok=True)
    return str(data_dir / "duoledger.db")


def create_sqlite_storage(database_path: Optional[str] = None) -> SQLAlchemyStorage:
    """Create a SQLite storage instance.

    Args:
        database_path: Path to SQLite database file. If None, checks
            DUOLEDGER_DATA_PATH environment variable, then defaults to
            ~/.duoledger/duoledger.db

    Returns:
        SQLAlchemyStorage instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get(DATA_PATH_ENV) or default_data_path()

    return SQLAlchemyStorage(f"sqlite:///{database_path}")


def create_storage(data_path: Optional[str] = None) -> Storage:
    """Create a storage adapter for a data path.

    A path ending in ``.json`` is stored as a single JSON file; anything
    else is a SQLite database.
    """
    if data_path is None:
        data_path = os.environ.get(DATA_PATH_ENV) or default_data_path()

    if Path(data_path).suffix.lower() == ".json":
        return JsonFileStorage(data_path)
    return create_sqlite_storage(data_path)
