"""Row and document validation.

Errors block a write; warnings are reported to the caller and never block.
"""

from typing import Iterable, Optional

from duoledger.domain.entities import (
    Currency,
    Document,
    Income,
    IssueSeverity,
    SplitMode,
    Transaction,
    ValidationIssue,
)
from duoledger.domain.errors import ValidationError, missing_exchange_rate
from duoledger.domain.money import HUNDRED, ZERO, net_amount


def validate_transaction(
    transaction: Transaction,
    reporting_currency: Currency = Currency.USD,
    counterparty_ids: Optional[Iterable[str]] = None,
) -> list[ValidationIssue]:
    """Collect validation issues for a single row.

    Args:
        transaction: Income or expense row
        reporting_currency: Unit of account
        counterparty_ids: Known client ids; None skips the reference check

    Returns:
        List of issues, errors first
    """
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    def error(message: str) -> None:
        errors.append(ValidationIssue(IssueSeverity.ERROR, transaction.id, message))

    def warning(message: str) -> None:
        warnings.append(ValidationIssue(IssueSeverity.WARNING, transaction.id, message))

    if transaction.amount < 0:
        error(f"Amount must not be negative, got {transaction.amount}")

    rate_missing = transaction.currency != reporting_currency and (
        transaction.fx_rate is None or transaction.fx_rate <= 0
    )
    if rate_missing:
        error(missing_exchange_rate(transaction.currency.value, reporting_currency.value))

    split = transaction.split
    share_a = split.party_a_share or ZERO
    share_b = split.party_b_share or ZERO
    if split.mode is SplitMode.PERCENT:
        if share_a + share_b != HUNDRED:
            warning(f"Percent split adds up to {share_a + share_b}%, not 100%")
    elif not rate_missing:
        net = net_amount(transaction, reporting_currency=reporting_currency)
        if share_a + share_b != net:
            warning(
                f"Amount split adds up to {share_a + share_b:,.2f}, "
                f"net amount is {net:,.2f}"
            )

    if (
        isinstance(transaction, Income)
        and counterparty_ids is not None
        and transaction.counterparty_id is not None
        and transaction.counterparty_id not in set(counterparty_ids)
    ):
        warning(f"Unknown client '{transaction.counterparty_id}'")

    return errors + warnings


def validate_document(document: Document) -> list[ValidationIssue]:
    """Collect validation issues for every row of a document."""
    counterparty_ids = [c.id for c in document.meta.counterparties]
    issues: list[ValidationIssue] = []
    for transaction in (*document.income_transactions, *document.expense_transactions):
        issues.extend(
            validate_transaction(
                transaction,
                reporting_currency=document.settings.reporting_currency,
                counterparty_ids=counterparty_ids,
            )
        )
    return issues


def errors_only(issues: Iterable[ValidationIssue]) -> list[ValidationIssue]:
    return [issue for issue in issues if issue.severity is IssueSeverity.ERROR]


def warnings_only(issues: Iterable[ValidationIssue]) -> list[ValidationIssue]:
    return [issue for issue in issues if issue.severity is IssueSeverity.WARNING]


def raise_for_errors(issues: Iterable[ValidationIssue]) -> None:
    """Raise a ValidationError describing every error-level issue."""
    errors = errors_only(issues)
    if not errors:
        return
    if len(errors) == 1:
        raise ValidationError(errors[0].message)
    lines = [f"{issue.transaction_id}: {issue.message}" for issue in errors]
    raise ValidationError("Invalid transactions:\n  " + "\n  ".join(lines))


def require_valid(
    transaction: Transaction,
    reporting_currency: Currency = Currency.USD,
    counterparty_ids: Optional[Iterable[str]] = None,
) -> list[ValidationIssue]:
    """Validate a row, raising on errors and returning the warnings.

    Raises:
        ValidationError: If the row has error-level issues
    """
    issues = validate_transaction(
        transaction,
        reporting_currency=reporting_currency,
        counterparty_ids=counterparty_ids,
    )
    raise_for_errors(issues)
    return warnings_only(issues)
