"""Debt accrual between the two parties.

The balance tracks how much Party B owes Party A. It is always derived
from the full set of rows and never stored.

Policy per row:

- Income: the responsible party collected the money and owes the other
  party that party's share.
- Expense: the responsible party paid upfront and is owed the other
  party's share.
"""

from decimal import Decimal
from typing import Iterable

from duoledger.domain.entities import (
    Currency,
    DebtBalance,
    Party,
    Transaction,
    TransactionKind,
)
from duoledger.domain.money import ZERO
from duoledger.domain.split import share_for, split_transaction


def debt_delta(
    transaction: Transaction,
    reporting_currency: Currency = Currency.USD,
    strict: bool = True,
) -> Decimal:
    """Signed change a single row makes to the "B owes A" balance.

    ==========  ===========  ===============
    kind        responsible  delta
    ==========  ===========  ===============
    income      A            -party B share
    income      B            +party A share
    expense     A            +party B share
    expense     B            -party A share
    ==========  ===========  ===============
    """
    shares = split_transaction(transaction, reporting_currency=reporting_currency, strict=strict)
    other = transaction.responsible_party.other
    owed = share_for(shares, other)

    if transaction.kind is TransactionKind.INCOME:
        debtor = transaction.responsible_party
    else:
        debtor = other

    return owed if debtor is Party.B else -owed


def debt_balance(
    income: Iterable[Transaction],
    expenses: Iterable[Transaction],
    reporting_currency: Currency = Currency.USD,
    strict: bool = True,
) -> DebtBalance:
    """Sum the debt deltas of every income and expense row."""
    total = ZERO
    for transaction in (*income, *expenses):
        total += debt_delta(transaction, reporting_currency=reporting_currency, strict=strict)
    return DebtBalance(amount=total)
