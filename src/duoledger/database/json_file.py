"""Single JSON file storage implementation."""

import os
from pathlib import Path

import structlog

from duoledger.database.base import Storage
from duoledger.domain.entities import Document
from duoledger.domain.serialization import dumps, loads

logger = structlog.get_logger(__name__)


class JsonFileStorage(Storage):
    """Keeps the whole document in one JSON file, in the export layout."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def initialize_schema(self) -> None:
        """Create the parent directory of the data file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> Document:
        """Load the stored document; a missing or empty file loads as a default document.

        Raises:
            ImportFormatError: If the file exists but is not a ledger document
        """
        if not self.path.exists() or self.path.stat().st_size == 0:
            return Document()
        document = loads(self.path.read_text(encoding="utf-8"))
        logger.debug("storage_loaded", adapter="json", path=str(self.path))
        return document

    def save(self, document: Document) -> None:
        """Write the document, replacing the file atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(dumps(document), encoding="utf-8")
        os.replace(tmp_path, self.path)
        logger.debug("storage_saved", adapter="json", path=str(self.path))
