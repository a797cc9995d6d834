"""Domain layer for duoledger application."""

from duoledger.domain.ledger import LedgerService
from duoledger.domain.summary import SummaryService

__all__ = [
    "LedgerService",
    "SummaryService",
]
