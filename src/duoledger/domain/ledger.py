"""Ledger document reducer and service.

The ledger is an immutable ``Document``. Every change is expressed as an
action and applied by ``reduce``, which returns a new document with one more
change log entry. ``LedgerService`` loads the current document from a
storage adapter, reduces it and saves the result.
"""

from dataclasses import dataclass, fields, replace
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Union
from uuid import uuid4

import structlog

from duoledger.database.base import Storage
from duoledger.domain.entities import (
    Adjustment,
    AdjustmentKind,
    ChangeLogEntry,
    Counterparty,
    Currency,
    Document,
    Expense,
    FilterCriteria,
    Income,
    LedgerMeta,
    LedgerSettings,
    Party,
    Period,
    Split,
    Transaction,
    TransactionKind,
)
from duoledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    adjustment_not_found,
    duplicate_counterparty,
    duplicate_transaction_id,
    transaction_not_found,
)
from duoledger.domain.serialization import dumps, loads
from duoledger.domain.summary import filter_transactions, sort_by_date
from duoledger.domain.validation import raise_for_errors, require_valid, validate_document

logger = structlog.get_logger(__name__)

SYSTEM_ACTOR = "sys"


def new_id() -> str:
    return uuid4().hex[:12]


@dataclass(frozen=True)
class AddTransaction:
    transaction: Transaction


@dataclass(frozen=True)
class UpdateTransaction:
    kind: TransactionKind
    transaction_id: str
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class RemoveTransaction:
    kind: TransactionKind
    transaction_id: str


@dataclass(frozen=True)
class AddAdjustment:
    kind: TransactionKind
    transaction_id: str
    adjustment: Adjustment


@dataclass(frozen=True)
class RemoveAdjustment:
    kind: TransactionKind
    transaction_id: str
    adjustment_id: str


@dataclass(frozen=True)
class AddCounterparty:
    counterparty: Counterparty


@dataclass(frozen=True)
class RenameParty:
    party: Party
    name: str


@dataclass(frozen=True)
class SetDefaultPeriod:
    period: Period


@dataclass(frozen=True)
class SetLogo:
    logo: Optional[str]


@dataclass(frozen=True)
class ImportDocument:
    document: Document


@dataclass(frozen=True)
class InitializeLedger:
    meta: LedgerMeta
    settings: LedgerSettings


Action = Union[
    AddTransaction,
    UpdateTransaction,
    RemoveTransaction,
    AddAdjustment,
    RemoveAdjustment,
    AddCounterparty,
    RenameParty,
    SetDefaultPeriod,
    SetLogo,
    ImportDocument,
    InitializeLedger,
]


def _rows_key(kind: TransactionKind) -> str:
    if kind is TransactionKind.INCOME:
        return "income_transactions"
    return "expense_transactions"


def _find(document: Document, kind: TransactionKind, transaction_id: str) -> Transaction:
    for txn in document.transactions_of(kind):
        if txn.id == transaction_id:
            return txn
    raise NotFoundError(transaction_not_found(kind.value, transaction_id))


def _with_rows(document: Document, kind: TransactionKind, rows) -> Document:
    return replace(document, **{_rows_key(kind): tuple(rows)})


def _replace_row(document: Document, updated: Transaction) -> Document:
    rows = [
        updated if txn.id == updated.id else txn
        for txn in document.transactions_of(updated.kind)
    ]
    return _with_rows(document, updated.kind, rows)


def _check_row(document: Document, transaction: Transaction) -> None:
    warnings = require_valid(
        transaction,
        reporting_currency=document.settings.reporting_currency,
        counterparty_ids=[c.id for c in document.meta.counterparties],
    )
    for issue in warnings:
        logger.warning(
            "validation_warning",
            transaction_id=issue.transaction_id,
            message=issue.message,
        )


def _editable_fields(transaction: Transaction) -> set[str]:
    return {f.name for f in fields(transaction)} - {"id"}


def _apply(document: Document, action: Action) -> tuple[Document, str, dict[str, Any]]:
    """Apply an action, returning the new document, action name and payload."""
    if isinstance(action, AddTransaction):
        txn = action.transaction
        kind = txn.kind
        if any(existing.id == txn.id for existing in document.transactions_of(kind)):
            raise ConflictError(duplicate_transaction_id(kind.value, txn.id))
        _check_row(document, txn)
        rows = (*document.transactions_of(kind), txn)
        return _with_rows(document, kind, rows), f"add_{kind.value}", {"id": txn.id}

    if isinstance(action, UpdateTransaction):
        current = _find(document, action.kind, action.transaction_id)
        unknown = set(action.changes) - _editable_fields(current)
        if unknown:
            raise ValidationError(
                f"Cannot update field(s) {', '.join(sorted(unknown))} "
                f"on {action.kind.value} rows"
            )
        updated = replace(current, **action.changes)
        _check_row(document, updated)
        return (
            _replace_row(document, updated),
            f"update_{action.kind.value}",
            {"id": current.id, "fields": sorted(action.changes)},
        )

    if isinstance(action, RemoveTransaction):
        _find(document, action.kind, action.transaction_id)
        rows = [
            txn
            for txn in document.transactions_of(action.kind)
            if txn.id != action.transaction_id
        ]
        return (
            _with_rows(document, action.kind, rows),
            f"remove_{action.kind.value}",
            {"id": action.transaction_id},
        )

    if isinstance(action, AddAdjustment):
        current = _find(document, action.kind, action.transaction_id)
        updated = replace(current, adjustments=(*current.adjustments, action.adjustment))
        _check_row(document, updated)
        return (
            _replace_row(document, updated),
            "add_adjustment",
            {"id": current.id, "adjustmentId": action.adjustment.id},
        )

    if isinstance(action, RemoveAdjustment):
        current = _find(document, action.kind, action.transaction_id)
        remaining = tuple(a for a in current.adjustments if a.id != action.adjustment_id)
        if len(remaining) == len(current.adjustments):
            raise NotFoundError(adjustment_not_found(action.adjustment_id, current.id))
        updated = replace(current, adjustments=remaining)
        return (
            _replace_row(document, updated),
            "remove_adjustment",
            {"id": current.id, "adjustmentId": action.adjustment_id},
        )

    if isinstance(action, AddCounterparty):
        counterparty = action.counterparty
        if not counterparty.name.strip():
            raise ValidationError("Client name must not be empty")
        for existing in document.meta.counterparties:
            if existing.name.casefold() == counterparty.name.casefold():
                raise ConflictError(duplicate_counterparty(counterparty.name))
            if existing.id == counterparty.id:
                raise ConflictError(duplicate_counterparty(counterparty.id))
        meta = replace(
            document.meta,
            counterparties=(*document.meta.counterparties, counterparty),
        )
        return (
            replace(document, meta=meta),
            "add_client",
            {"id": counterparty.id, "name": counterparty.name},
        )

    if isinstance(action, RenameParty):
        name = action.name.strip()
        if not name:
            raise ValidationError("Party name must not be empty")
        other_name = document.meta.party_name(action.party.other)
        if other_name.casefold() == name.casefold():
            raise ConflictError(f"Both parties cannot be named '{name}'")
        parties = list(document.meta.parties)
        parties[0 if action.party is Party.A else 1] = name
        meta = replace(document.meta, parties=(parties[0], parties[1]))
        return (
            replace(document, meta=meta),
            "rename_party",
            {"party": action.party.value, "name": name},
        )

    if isinstance(action, SetDefaultPeriod):
        settings = replace(document.settings, default_period=action.period)
        return (
            replace(document, settings=settings),
            "set_default_period",
            {"period": action.period.value},
        )

    if isinstance(action, SetLogo):
        meta = replace(document.meta, logo=action.logo)
        return replace(document, meta=meta), "set_logo", {"set": action.logo is not None}

    if isinstance(action, ImportDocument):
        imported = action.document
        for kind in TransactionKind:
            seen: set[str] = set()
            for txn in imported.transactions_of(kind):
                if txn.id in seen:
                    raise ConflictError(duplicate_transaction_id(kind.value, txn.id))
                seen.add(txn.id)
        raise_for_errors(validate_document(imported))
        # Entries already recorded here are kept ahead of the imported ones
        known_ids = {entry.id for entry in document.change_log}
        change_log = (
            *document.change_log,
            *(entry for entry in imported.change_log if entry.id not in known_ids),
        )
        return (
            replace(imported, change_log=change_log),
            "import_document",
            {
                "income": len(imported.income_transactions),
                "expenses": len(imported.expense_transactions),
            },
        )

    if isinstance(action, InitializeLedger):
        # The change log survives re-initialization
        fresh = Document(
            meta=action.meta,
            settings=action.settings,
            change_log=document.change_log,
        )
        return fresh, "initialize", {"parties": list(action.meta.parties)}

    raise TypeError(f"Unsupported ledger action: {type(action).__name__}")


def reduce(
    document: Document,
    action: Action,
    actor: str = SYSTEM_ACTOR,
    timestamp: Optional[datetime] = None,
) -> Document:
    """Apply an action to a document.

    The input document is never modified. The returned document carries one
    additional change log entry describing the action.

    Args:
        document: Current document
        action: Action to apply
        actor: Name recorded in the change log
        timestamp: Change log timestamp, defaults to now (UTC)

    Returns:
        New document

    Raises:
        ValidationError: If a written row fails validation
        NotFoundError: If a referenced row or adjustment does not exist
        ConflictError: If an id or name is already taken
    """
    updated, action_name, payload = _apply(document, action)
    entry = ChangeLogEntry(
        id=new_id(),
        timestamp=timestamp or datetime.now(UTC),
        actor=actor,
        action=action_name,
        payload=payload,
    )
    logger.info("ledger_action", action=action_name, actor=actor, **payload)
    return replace(updated, change_log=(*updated.change_log, entry))


class LedgerService:
    """Service for reading and changing the stored ledger."""

    def __init__(self, storage: Storage):
        """Initialize ledger service.

        Args:
            storage: Storage adapter holding the ledger document
        """
        self.storage = storage

    def load(self) -> Document:
        """Load the current document."""
        return self.storage.load()

    def dispatch(self, action: Action, actor: str = SYSTEM_ACTOR) -> Document:
        """Apply an action to the stored document and persist the result.

        Nothing is saved when the action is rejected.
        """
        document = self.storage.load()
        updated = reduce(document, action, actor=actor)
        self.storage.save(updated)
        return updated

    def initialize(
        self,
        party_a: str,
        party_b: str,
        clients: tuple[str, ...] = (),
        reporting_currency: Currency = Currency.USD,
        force: bool = False,
        actor: str = SYSTEM_ACTOR,
    ) -> Document:
        """Start a fresh ledger with two named parties and a client list.

        Raises:
            ConflictError: If the ledger already has rows and ``force`` is False
            ValidationError: If the party names are empty or identical
        """
        current = self.storage.load()
        if not force and (current.income_transactions or current.expense_transactions):
            raise ConflictError(
                "Ledger already has transactions; use force to start over"
            )
        party_a, party_b = party_a.strip(), party_b.strip()
        if not party_a or not party_b:
            raise ValidationError("Party names must not be empty")
        if party_a.casefold() == party_b.casefold():
            raise ConflictError(f"Both parties cannot be named '{party_a}'")

        counterparties = tuple(
            Counterparty(id=f"c-{new_id()}", name=name) for name in clients
        )
        action = InitializeLedger(
            meta=LedgerMeta(parties=(party_a, party_b), counterparties=counterparties),
            settings=LedgerSettings(reporting_currency=reporting_currency),
        )
        return self.dispatch(action, actor=actor)

    def get_transaction(self, kind: TransactionKind, transaction_id: str) -> Transaction:
        """Get a row by id.

        Raises:
            NotFoundError: If the row does not exist
        """
        return _find(self.storage.load(), kind, transaction_id)

    def list_transactions(
        self, kind: TransactionKind, criteria: Optional[FilterCriteria] = None
    ) -> list[Transaction]:
        """List rows of one kind, newest first, optionally filtered."""
        rows = list(self.storage.load().transactions_of(kind))
        if criteria is not None:
            rows = filter_transactions(rows, criteria)
        return sort_by_date(rows)

    def add_income(
        self,
        date: date,
        amount: Decimal,
        responsible_party: Party,
        currency: Currency = Currency.USD,
        fx_rate: Decimal = Decimal("0"),
        split: Optional[Split] = None,
        counterparty_id: Optional[str] = None,
        invoice_number: Optional[str] = None,
        notes: Optional[str] = None,
        actor: str = SYSTEM_ACTOR,
    ) -> Income:
        """Add an income row.

        Args:
            date: Invoice date
            amount: Amount in ``currency``
            responsible_party: Party who created and collected the invoice
            currency: Invoice currency
            fx_rate: Units of ``currency`` per one unit of the reporting currency
            split: Split definition, defaults to 50/50 percent
            counterparty_id: Client id
            invoice_number: Invoice number
            notes: Free-text notes
            actor: Name recorded in the change log

        Returns:
            The stored income row

        Raises:
            ValidationError: If the row is invalid (e.g. missing exchange rate)
        """
        income = Income(
            id=new_id(),
            date=date,
            amount=amount,
            responsible_party=responsible_party,
            currency=currency,
            fx_rate=fx_rate,
            split=split or Split(),
            counterparty_id=counterparty_id,
            invoice_number=invoice_number,
            notes=notes,
        )
        self.dispatch(AddTransaction(income), actor=actor)
        return income

    def add_expense(
        self,
        date: date,
        amount: Decimal,
        responsible_party: Party,
        currency: Currency = Currency.USD,
        fx_rate: Decimal = Decimal("0"),
        split: Optional[Split] = None,
        description: Optional[str] = None,
        actor: str = SYSTEM_ACTOR,
    ) -> Expense:
        """Add an expense row paid upfront by ``responsible_party``.

        Raises:
            ValidationError: If the row is invalid
        """
        expense = Expense(
            id=new_id(),
            date=date,
            amount=amount,
            responsible_party=responsible_party,
            currency=currency,
            fx_rate=fx_rate,
            split=split or Split(),
            description=description,
        )
        self.dispatch(AddTransaction(expense), actor=actor)
        return expense

    def update_transaction(
        self,
        kind: TransactionKind,
        transaction_id: str,
        actor: str = SYSTEM_ACTOR,
        **changes: Any,
    ) -> Transaction:
        """Update fields of a row.

        Raises:
            NotFoundError: If the row does not exist
            ValidationError: If a field is unknown or the result is invalid
        """
        document = self.dispatch(
            UpdateTransaction(kind, transaction_id, changes), actor=actor
        )
        return _find(document, kind, transaction_id)

    def delete_transaction(
        self, kind: TransactionKind, transaction_id: str, actor: str = SYSTEM_ACTOR
    ) -> None:
        """Delete a row.

        Raises:
            NotFoundError: If the row does not exist
        """
        self.dispatch(RemoveTransaction(kind, transaction_id), actor=actor)

    def add_adjustment(
        self,
        kind: TransactionKind,
        transaction_id: str,
        adjustment_kind: AdjustmentKind,
        value: Decimal,
        label: str = "Adj",
        actor: str = SYSTEM_ACTOR,
    ) -> Adjustment:
        """Append an adjustment to a row; it is applied after existing ones."""
        adjustment = Adjustment(
            id=new_id(), label=label or "Adj", kind=adjustment_kind, value=value
        )
        self.dispatch(AddAdjustment(kind, transaction_id, adjustment), actor=actor)
        return adjustment

    def remove_adjustment(
        self,
        kind: TransactionKind,
        transaction_id: str,
        adjustment_id: str,
        actor: str = SYSTEM_ACTOR,
    ) -> None:
        """Remove an adjustment from a row."""
        self.dispatch(RemoveAdjustment(kind, transaction_id, adjustment_id), actor=actor)

    def add_counterparty(self, name: str, actor: str = SYSTEM_ACTOR) -> Counterparty:
        """Register a client.

        Raises:
            ConflictError: If a client with the same name exists
        """
        counterparty = Counterparty(id=f"c-{new_id()}", name=name.strip())
        self.dispatch(AddCounterparty(counterparty), actor=actor)
        return counterparty

    def rename_party(self, party: Party, name: str, actor: str = SYSTEM_ACTOR) -> None:
        """Change a party's display name."""
        self.dispatch(RenameParty(party, name), actor=actor)

    def set_default_period(self, period: Period, actor: str = SYSTEM_ACTOR) -> None:
        """Change the default summary period."""
        self.dispatch(SetDefaultPeriod(period), actor=actor)

    def set_logo(self, logo: Optional[str], actor: str = SYSTEM_ACTOR) -> None:
        """Store or clear the logo (a data URL)."""
        self.dispatch(SetLogo(logo), actor=actor)

    def import_json(self, text: str, actor: str = SYSTEM_ACTOR) -> Document:
        """Replace the stored document with an imported one.

        Raises:
            ImportFormatError: If the text is not a valid document; the stored
                document is left unchanged
            ValidationError: If an imported row is invalid
        """
        imported = loads(text)
        return self.dispatch(ImportDocument(imported), actor=actor)

    def export_json(self) -> str:
        """Serialize the stored document."""
        return dumps(self.storage.load())

    def recent_changes(self, limit: int = 20) -> list[ChangeLogEntry]:
        """Latest change log entries, newest first."""
        entries = list(reversed(self.storage.load().change_log))
        return entries[:limit]
