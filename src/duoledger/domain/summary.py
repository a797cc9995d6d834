"""Summary filtering and aggregation domain service."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence, TypeVar

from dateutil.relativedelta import relativedelta

from duoledger.database.base import Storage
from duoledger.domain.entities import (
    Currency,
    DebtBalance,
    Document,
    FilterCriteria,
    Income,
    MonthlyBucket,
    Party,
    SummaryReport,
    SummaryTotals,
    Transaction,
)
from duoledger.domain.debt import debt_balance
from duoledger.domain.money import ZERO, net_amount
from duoledger.domain.split import share_for, split_transaction
from duoledger.domain.validation import errors_only, validate_document, validate_transaction

T = TypeVar("T", bound=Transaction)


def matches_criteria(transaction: Transaction, criteria: FilterCriteria) -> bool:
    """Check a single row against filter criteria.

    The client filter only constrains income rows; expense rows have no
    client and always pass it.
    """
    if criteria.start_date is not None and transaction.date < criteria.start_date:
        return False
    if criteria.end_date is not None and transaction.date > criteria.end_date:
        return False
    if criteria.counterparty_id is not None and isinstance(transaction, Income):
        if transaction.counterparty_id != criteria.counterparty_id:
            return False
    if criteria.responsible_party is not None:
        if transaction.responsible_party is not criteria.responsible_party:
            return False
    return True


def filter_transactions(transactions: Iterable[T], criteria: FilterCriteria) -> list[T]:
    """Return the rows matching the criteria, keeping their order."""
    return [txn for txn in transactions if matches_criteria(txn, criteria)]


def period_key(value: date) -> str:
    return value.strftime("%Y-%m")


def aggregate_monthly(
    income: Iterable[Transaction],
    expenses: Iterable[Transaction],
    reporting_currency: Currency = Currency.USD,
    fill_gaps: bool = False,
) -> list[MonthlyBucket]:
    """Net income minus net expenses per calendar month.

    Args:
        income: Income rows, already filtered
        expenses: Expense rows, already filtered
        reporting_currency: Unit of account
        fill_gaps: If True, emit zero buckets for empty months between the
            first and last month instead of omitting them

    Returns:
        Buckets in ascending chronological order
    """
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)

    for txn in income:
        totals[period_key(txn.date)] += net_amount(txn, reporting_currency)
    for txn in expenses:
        totals[period_key(txn.date)] -= net_amount(txn, reporting_currency)

    keys = sorted(totals)
    if fill_gaps and keys:
        keys = list(_month_range(keys[0], keys[-1]))

    return [MonthlyBucket(period=key, net=totals.get(key, ZERO)) for key in keys]


def _month_range(first: str, last: str) -> Iterable[str]:
    current = date(int(first[:4]), int(first[5:7]), 1)
    end = date(int(last[:4]), int(last[5:7]), 1)
    while current <= end:
        yield period_key(current)
        current += relativedelta(months=1)


def summary_totals(
    income: Iterable[Income],
    current_party: Party,
    reporting_currency: Currency = Currency.USD,
) -> SummaryTotals:
    """Income totals for the summary cards.

    Total income clamps each row at zero. The partner share is the
    remainder of total income minus the current party's share, so any split
    that does not add up to the net lands on the partner.
    """
    total_income = ZERO
    user_share = ZERO
    for txn in income:
        total_income += max(ZERO, net_amount(txn, reporting_currency))
        shares = split_transaction(txn, reporting_currency)
        user_share += share_for(shares, current_party)

    return SummaryTotals(
        total_income=total_income,
        user_share=user_share,
        partner_share=total_income - user_share,
    )


class SummaryService:
    """Service for building summary reports."""

    def __init__(self, storage: Storage):
        """Initialize summary service.

        Args:
            storage: Storage adapter holding the ledger document
        """
        self.storage = storage

    def build_summary_report(
        self,
        criteria: FilterCriteria,
        current_party: Party = Party.A,
        fill_gaps: bool = False,
    ) -> SummaryReport:
        """Build a summary report for the stored document.

        Args:
            criteria: Filter criteria for rows, totals and the monthly series
            current_party: Party whose share is reported as the user's share
            fill_gaps: Zero-fill empty months in the monthly series

        Returns:
            SummaryReport; the debt balance covers every reportable row
        """
        document = self.storage.load()
        return build_summary_report(
            document, criteria, current_party=current_party, fill_gaps=fill_gaps
        )


def build_summary_report(
    document: Document,
    criteria: FilterCriteria,
    current_party: Party = Party.A,
    fill_gaps: bool = False,
) -> SummaryReport:
    """Build a summary report for a document value.

    Rows with error-level issues, such as a foreign row without an exchange
    rate, are left out of every figure and listed in ``issues``.
    """
    currency = document.settings.reporting_currency
    all_income = reportable_rows(document.income_transactions, currency)
    all_expenses = reportable_rows(document.expense_transactions, currency)
    income = filter_transactions(all_income, criteria)
    expenses = filter_transactions(all_expenses, criteria)
    monthly = aggregate_monthly(income, expenses, currency, fill_gaps=fill_gaps)
    totals = summary_totals(income, current_party, currency)
    debt = debt_balance(all_income, all_expenses, currency)

    return SummaryReport(
        criteria=criteria,
        current_party=current_party,
        totals=totals,
        monthly=tuple(monthly),
        debt=debt,
        income=tuple(income),
        expenses=tuple(expenses),
        issues=tuple(validate_document(document)),
    )


def sort_by_date(transactions: Sequence[T]) -> list[T]:
    """Newest first, as the tables list them."""
    return sorted(transactions, key=lambda txn: txn.date, reverse=True)


def reportable_rows(transactions: Iterable[T], reporting_currency: Currency) -> list[T]:
    """Rows that can be normalized, skipping those with error-level issues."""
    return [
        txn
        for txn in transactions
        if not errors_only(validate_transaction(txn, reporting_currency=reporting_currency))
    ]


def ledger_debt(document: Document) -> DebtBalance:
    """Debt balance over every reportable row of a document."""
    currency = document.settings.reporting_currency
    return debt_balance(
        reportable_rows(document.income_transactions, currency),
        reportable_rows(document.expense_transactions, currency),
        currency,
    )
