"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, making it easy to change when
the database schema changes.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from typing import Optional

from duoledger.domain import entities as domain
from duoledger.database.models import (
    AdjustmentRow,
    ChangeLogRow,
    CounterpartyRow,
    TransactionRow,
)


def _decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _optional_decimal(value) -> Optional[Decimal]:
    return None if value is None else _decimal(value)


def _aware(value: datetime) -> datetime:
    # SQLite drops the offset; stored timestamps are always UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def adjustment_to_domain(row: AdjustmentRow) -> domain.Adjustment:
    """Convert SQLAlchemy AdjustmentRow to domain Adjustment entity."""
    return domain.Adjustment(
        id=row.adjustment_id,
        label=row.label,
        kind=domain.AdjustmentKind(row.kind),
        value=_decimal(row.value),
    )


def adjustment_to_row(adjustment: domain.Adjustment, position: int) -> AdjustmentRow:
    """Convert domain Adjustment entity to SQLAlchemy AdjustmentRow."""
    return AdjustmentRow(
        adjustment_id=adjustment.id,
        position=position,
        label=adjustment.label,
        kind=adjustment.kind.value,
        value=adjustment.value,
    )


def transaction_to_domain(row: TransactionRow) -> domain.Transaction:
    """Convert SQLAlchemy TransactionRow to a domain Income or Expense."""
    common = dict(
        id=row.transaction_id,
        date=row.date,
        currency=domain.Currency(row.currency),
        amount=_decimal(row.amount),
        fx_rate=_decimal(row.fx_rate),
        responsible_party=domain.Party(row.responsible_party),
        adjustments=tuple(adjustment_to_domain(a) for a in row.adjustments),
        split=domain.Split(
            mode=domain.SplitMode(row.split_mode),
            party_a_share=_optional_decimal(row.party_a_share),
            party_b_share=_optional_decimal(row.party_b_share),
        ),
    )
    if row.kind == domain.TransactionKind.INCOME.value:
        return domain.Income(
            counterparty_id=row.counterparty_id,
            invoice_number=row.invoice_number,
            notes=row.notes,
            **common,
        )
    return domain.Expense(description=row.description, **common)


def transaction_to_row(transaction: domain.Transaction, position: int) -> TransactionRow:
    """Convert a domain Income or Expense to SQLAlchemy TransactionRow."""
    row = TransactionRow(
        transaction_id=transaction.id,
        kind=transaction.kind.value,
        position=position,
        date=transaction.date,
        currency=transaction.currency.value,
        amount=transaction.amount,
        fx_rate=transaction.fx_rate,
        responsible_party=transaction.responsible_party.value,
        split_mode=transaction.split.mode.value,
        party_a_share=transaction.split.party_a_share,
        party_b_share=transaction.split.party_b_share,
        adjustments=[
            adjustment_to_row(adjustment, index)
            for index, adjustment in enumerate(transaction.adjustments)
        ],
    )
    if isinstance(transaction, domain.Income):
        row.counterparty_id = transaction.counterparty_id
        row.invoice_number = transaction.invoice_number
        row.notes = transaction.notes
    elif isinstance(transaction, domain.Expense):
        row.description = transaction.description
    return row


def counterparty_to_domain(row: CounterpartyRow) -> domain.Counterparty:
    """Convert SQLAlchemy CounterpartyRow to domain Counterparty entity."""
    return domain.Counterparty(id=row.id, name=row.name)


def change_log_entry_to_domain(row: ChangeLogRow) -> domain.ChangeLogEntry:
    """Convert SQLAlchemy ChangeLogRow to domain ChangeLogEntry entity."""
    return domain.ChangeLogEntry(
        id=row.entry_id,
        timestamp=_aware(row.timestamp),
        actor=row.actor,
        action=row.action,
        payload=dict(row.payload or {}),
    )


def change_log_entry_to_row(entry: domain.ChangeLogEntry) -> ChangeLogRow:
    """Convert domain ChangeLogEntry entity to SQLAlchemy ChangeLogRow."""
    return ChangeLogRow(
        entry_id=entry.id,
        timestamp=_aware(entry.timestamp).astimezone(UTC),
        actor=entry.actor,
        action=entry.action,
        payload=json.loads(json.dumps(dict(entry.payload), default=str)),
    )
