"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as duplicate identifiers."""


class MissingExchangeRateError(ValidationError):
    """A non-reporting currency amount has no usable exchange rate."""


class ImportFormatError(ValidationError):
    """An imported document is not valid JSON or does not match the layout."""


def transaction_not_found(kind: str, transaction_id: str) -> str:
    """Return message for a missing income or expense row."""
    return f"{kind.capitalize()} {transaction_id} not found"


def adjustment_not_found(adjustment_id: str, transaction_id: str) -> str:
    """Return message for a missing adjustment."""
    return f"Adjustment {adjustment_id} not found on transaction {transaction_id}"


def counterparty_not_found(reference: str) -> str:
    """Return message for a missing counterparty."""
    return f"Client '{reference}' not found"


def party_not_found(reference: str, parties: tuple[str, str]) -> str:
    """Return message for an unknown party reference."""
    return (
        f"Party '{reference}' not found. "
        f"Use A, B, '{parties[0]}' or '{parties[1]}'"
    )


def duplicate_transaction_id(kind: str, transaction_id: str) -> str:
    """Return message when a row id is already taken."""
    return f"{kind.capitalize()} with id '{transaction_id}' already exists"


def duplicate_counterparty(name: str) -> str:
    """Return message when a client name is already registered."""
    return f"Client '{name}' already exists"


def missing_exchange_rate(currency: str, reporting_currency: str) -> str:
    """Return message for a zero or missing FX rate."""
    return (
        f"Exchange rate required for {currency} amounts "
        f"({currency} per 1 {reporting_currency}, must be greater than 0)"
    )
