"""Shared pytest fixtures for duoledger tests."""

import logging
import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest
import structlog

from duoledger.database.factories import create_sqlite_storage
from duoledger.database.json_file import JsonFileStorage
from duoledger.domain.entities import Currency, Party, Split, SplitMode
from duoledger.domain.ledger import LedgerService
from duoledger.domain.summary import SummaryService


@pytest.fixture
def temp_db():
    """Create a temporary SQLite storage for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    storage = create_sqlite_storage(database_path=db_path)
    # Store the path for tests that need it
    storage.database_path = db_path
    storage.connect()
    storage.initialize_schema()

    yield storage

    # Cleanup
    storage.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def json_storage(tmp_path):
    """Create a JSON file storage in a temporary directory."""
    storage = JsonFileStorage(tmp_path / "ledger.json")
    storage.connect()
    storage.initialize_schema()
    return storage


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def summary_service(temp_db):
    """Create a SummaryService with a temporary database."""
    return SummaryService(temp_db)


@pytest.fixture
def sample_ledger(ledger_service):
    """Initialize a ledger for Debi (A) and Bocha (B) with two clients."""
    return ledger_service.initialize("Debi", "Bocha", clients=("Lions", "TGI"))


@pytest.fixture
def lions_id(sample_ledger):
    """Id of the Lions client."""
    return sample_ledger.meta.counterparties[0].id


@pytest.fixture
def sample_transactions(ledger_service, lions_id):
    """Add a small set of income and expense rows.

    - 2024-01-10: income 1000 USD by Debi for Lions
    - 2024-02-05: income 900000 ARS at 1000 by Bocha, 40/60 split
    - 2024-02-20: expense 200 USD paid by Debi
    """
    first = ledger_service.add_income(
        date=date(2024, 1, 10),
        amount=Decimal("1000"),
        responsible_party=Party.A,
        counterparty_id=lions_id,
        invoice_number="INV-1",
    )
    second = ledger_service.add_income(
        date=date(2024, 2, 5),
        amount=Decimal("900000"),
        responsible_party=Party.B,
        currency=Currency.ARS,
        fx_rate=Decimal("1000"),
        split=Split(SplitMode.PERCENT, Decimal("40"), Decimal("60")),
    )
    expense = ledger_service.add_expense(
        date=date(2024, 2, 20),
        amount=Decimal("200"),
        responsible_party=Party.A,
        description="Software",
    )
    return {"first": first, "second": second, "expense": expense}


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo the logging setup a CLI invocation installs."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
