"""Storage layer for duoledger application."""

from duoledger.database.base import Storage
from duoledger.database.factories import create_sqlite_storage, create_storage

__all__ = ["Storage", "create_sqlite_storage", "create_storage"]
