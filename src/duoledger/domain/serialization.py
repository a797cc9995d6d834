"""Whole-document JSON import and export.

Decimals are written as strings so that exporting and importing a document
gives back an equal document. Numeric fields are coerced to 0 when the
stored value is blank or not a number.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

import structlog

from duoledger.domain.entities import (
    Adjustment,
    AdjustmentKind,
    ChangeLogEntry,
    Counterparty,
    Currency,
    Document,
    Expense,
    Income,
    LedgerMeta,
    LedgerSettings,
    Period,
    Split,
    SplitMode,
    Transaction,
)
from duoledger.domain.errors import DomainError, ImportFormatError
from duoledger.utils.amount_parser import coerce_amount
from duoledger.utils.party_resolver import resolve_party

logger = structlog.get_logger(__name__)

EXPORT_PREFIX = "duoledger"


def export_filename(today: Optional[date] = None) -> str:
    """Timestamped file name for an export."""
    today = today or date.today()
    return f"{EXPORT_PREFIX}-{today.isoformat()}.json"


def _decimal(value: Decimal) -> str:
    return str(value)


def _optional_decimal(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


def adjustment_to_dict(adjustment: Adjustment) -> dict[str, Any]:
    return {
        "id": adjustment.id,
        "label": adjustment.label,
        "kind": adjustment.kind.value,
        "value": _decimal(adjustment.value),
    }


def transaction_to_dict(transaction: Transaction) -> dict[str, Any]:
    """Convert an income or expense row to its JSON layout."""
    data: dict[str, Any] = {
        "id": transaction.id,
        "date": transaction.date.isoformat(),
        "currency": transaction.currency.value,
        "amount": _decimal(transaction.amount),
        "fxRate": _decimal(transaction.fx_rate),
        "adjustments": [adjustment_to_dict(a) for a in transaction.adjustments],
        "split": {
            "mode": transaction.split.mode.value,
            "partyAShare": _optional_decimal(transaction.split.party_a_share),
            "partyBShare": _optional_decimal(transaction.split.party_b_share),
        },
        "responsibleParty": transaction.responsible_party.value,
    }
    if isinstance(transaction, Income):
        data["counterpartyId"] = transaction.counterparty_id
        data["invoiceNumber"] = transaction.invoice_number
        data["notes"] = transaction.notes
    elif isinstance(transaction, Expense):
        data["description"] = transaction.description
    return data


def change_log_entry_to_dict(entry: ChangeLogEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "timestamp": entry.timestamp.isoformat(),
        "actor": entry.actor,
        "action": entry.action,
        "payload": dict(entry.payload),
    }


def document_to_dict(document: Document) -> dict[str, Any]:
    """Convert a document to its persisted JSON layout."""
    return {
        "meta": {
            "parties": list(document.meta.parties),
            "counterparties": [
                {"id": c.id, "name": c.name} for c in document.meta.counterparties
            ],
            "logo": document.meta.logo,
        },
        "settings": {
            "defaultPeriod": document.settings.default_period.value,
            "reportingCurrency": document.settings.reporting_currency.value,
        },
        "incomeTransactions": [
            transaction_to_dict(t) for t in document.income_transactions
        ],
        "expenseTransactions": [
            transaction_to_dict(t) for t in document.expense_transactions
        ],
        "changeLog": [change_log_entry_to_dict(e) for e in document.change_log],
    }


def dumps(document: Document) -> str:
    """Serialize a document to a JSON string."""
    return json.dumps(document_to_dict(document), indent=2, ensure_ascii=False, default=str)


def _require(data: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in data:
        raise ImportFormatError(f"Missing '{key}' in {where}")
    return data[key]


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ImportFormatError(f"Expected an object for {where}")
    return value


def _list(value: Any, where: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ImportFormatError(f"Expected a list for {where}")
    return value


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _optional_amount(value: Any) -> Optional[Decimal]:
    return None if value is None else coerce_amount(value)


def _enum(enum_cls, value: Any, where: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ImportFormatError(f"Invalid {where} '{value}', expected one of: {allowed}")


def _parse_date(value: Any, where: str) -> date:
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ImportFormatError(f"Invalid date '{value}' in {where}")


def adjustment_from_dict(data: Any, where: str) -> Adjustment:
    data = _mapping(data, where)
    return Adjustment(
        id=str(_require(data, "id", where)),
        label=str(data.get("label") or "Adj"),
        kind=_enum(AdjustmentKind, data.get("kind"), f"adjustment kind in {where}"),
        value=coerce_amount(data.get("value")),
    )


def transaction_from_dict(
    data: Any, meta: LedgerMeta, income: bool, where: str
) -> Transaction:
    """Build an income or expense row from its JSON layout."""
    data = _mapping(data, where)
    transaction_id = str(_require(data, "id", where))
    where = f"{where} '{transaction_id}'"

    split_data = _mapping(data.get("split") or {}, f"split of {where}")
    split = Split(
        mode=_enum(SplitMode, split_data.get("mode", "percent"), f"split mode in {where}"),
        party_a_share=_optional_amount(split_data.get("partyAShare")),
        party_b_share=_optional_amount(split_data.get("partyBShare")),
    )

    try:
        responsible_party = resolve_party(
            meta, str(_require(data, "responsibleParty", where))
        )
    except DomainError as e:
        raise ImportFormatError(f"{e} in {where}")

    common = dict(
        id=transaction_id,
        date=_parse_date(_require(data, "date", where), where),
        currency=_enum(Currency, data.get("currency", "USD"), f"currency in {where}"),
        amount=coerce_amount(data.get("amount")),
        fx_rate=coerce_amount(data.get("fxRate")),
        adjustments=tuple(
            adjustment_from_dict(a, f"adjustments of {where}")
            for a in _list(data.get("adjustments"), f"adjustments of {where}")
        ),
        split=split,
        responsible_party=responsible_party,
    )
    if income:
        return Income(
            counterparty_id=_optional_str(data.get("counterpartyId")),
            invoice_number=_optional_str(data.get("invoiceNumber")),
            notes=_optional_str(data.get("notes")),
            **common,
        )
    return Expense(description=_optional_str(data.get("description")), **common)


def change_log_entry_from_dict(data: Any, where: str) -> ChangeLogEntry:
    data = _mapping(data, where)
    timestamp = _require(data, "timestamp", where)
    try:
        parsed = datetime.fromisoformat(str(timestamp))
    except ValueError:
        raise ImportFormatError(f"Invalid timestamp '{timestamp}' in {where}")
    return ChangeLogEntry(
        id=str(_require(data, "id", where)),
        timestamp=parsed,
        actor=str(data.get("actor") or "sys"),
        action=str(_require(data, "action", where)),
        payload=dict(_mapping(data.get("payload") or {}, f"payload of {where}")),
    )


def document_from_dict(data: Any) -> Document:
    """Build a document from its persisted JSON layout.

    Raises:
        ImportFormatError: If the layout is not a ledger document
    """
    data = _mapping(data, "document")
    meta_data = _mapping(_require(data, "meta", "document"), "meta")
    settings_data = _mapping(data.get("settings") or {}, "settings")

    parties = _list(_require(meta_data, "parties", "meta"), "meta.parties")
    if len(parties) != 2:
        raise ImportFormatError(f"Expected exactly two parties, got {len(parties)}")

    meta = LedgerMeta(
        parties=(str(parties[0]), str(parties[1])),
        counterparties=tuple(
            Counterparty(
                id=str(_require(c, "id", "counterparty")),
                name=str(_require(c, "name", "counterparty")),
            )
            for c in (
                _mapping(item, "counterparty")
                for item in _list(meta_data.get("counterparties"), "meta.counterparties")
            )
        ),
        logo=_optional_str(meta_data.get("logo")),
    )
    settings = LedgerSettings(
        default_period=_enum(
            Period, settings_data.get("defaultPeriod", "6m"), "default period"
        ),
        reporting_currency=_enum(
            Currency, settings_data.get("reportingCurrency", "USD"), "reporting currency"
        ),
    )

    income = tuple(
        transaction_from_dict(t, meta, income=True, where="income")
        for t in _list(data.get("incomeTransactions"), "incomeTransactions")
    )
    expenses = tuple(
        transaction_from_dict(t, meta, income=False, where="expense")
        for t in _list(data.get("expenseTransactions"), "expenseTransactions")
    )
    change_log = tuple(
        change_log_entry_from_dict(e, "change log entry")
        for e in _list(data.get("changeLog"), "changeLog")
    )

    _require_unique_ids(meta.counterparties, "client")
    _require_unique_ids(income, "income")
    _require_unique_ids(expenses, "expense")
    _require_unique_ids(change_log, "change log entry")

    return Document(
        meta=meta,
        settings=settings,
        income_transactions=income,
        expense_transactions=expenses,
        change_log=change_log,
    )


def _require_unique_ids(items, where: str) -> None:
    seen: set[str] = set()
    for item in items:
        if item.id in seen:
            raise ImportFormatError(f"Duplicate {where} id '{item.id}'")
        seen.add(item.id)


def loads(text: str) -> Document:
    """Parse a JSON string into a document.

    Raises:
        ImportFormatError: If the text is not valid JSON or not a document
    """
    try:
        data = json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as e:
        logger.warning("import_rejected", reason="invalid_json", error=str(e))
        raise ImportFormatError(f"Invalid JSON: {e}")

    try:
        return document_from_dict(data)
    except ImportFormatError as e:
        logger.warning("import_rejected", reason="invalid_layout", error=str(e))
        raise
