"""Abstract storage interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    # domain/__init__.py imports the services, which import this module
    from duoledger.domain.entities import Document


class Storage(ABC):
    """Abstract storage adapter for the ledger document.

    The ledger is persisted and restored as a whole: ``save`` replaces the
    stored document with the given one, except for change log entries, which
    adapters never drop once written.
    """

    @abstractmethod
    def connect(self) -> None:
        """Open the underlying store."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release the underlying store."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Create tables or files the adapter needs."""
        pass

    @abstractmethod
    def load(self) -> Document:
        """Load the stored document, or a default document if none is stored."""
        pass

    @abstractmethod
    def save(self, document: Document) -> None:
        """Persist a document."""
        pass
