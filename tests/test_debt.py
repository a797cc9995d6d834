"""Tests for debt accrual between the parties."""

from datetime import date
from decimal import Decimal

import pytest

from duoledger.domain.debt import debt_balance, debt_delta
from duoledger.domain.entities import (
    Currency,
    DebtBalance,
    Expense,
    Income,
    Party,
    Split,
    SplitMode,
)
from duoledger.domain.errors import MissingExchangeRateError


def _income(party, amount="1000", split=None, **kwargs):
    return Income(
        id=f"i-{party.value}",
        date=date(2024, 1, 10),
        amount=Decimal(amount),
        responsible_party=party,
        split=split or Split(),
        **kwargs,
    )


def _expense(party, amount="200", split=None, **kwargs):
    return Expense(
        id=f"e-{party.value}",
        date=date(2024, 1, 20),
        amount=Decimal(amount),
        responsible_party=party,
        split=split or Split(),
        **kwargs,
    )


UNEVEN = Split(SplitMode.PERCENT, Decimal("30"), Decimal("70"))


@pytest.mark.parametrize(
    "transaction,expected",
    [
        # Income collected by A: A owes B's share
        (_income(Party.A, split=UNEVEN), Decimal("-700")),
        # Income collected by B: B owes A's share
        (_income(Party.B, split=UNEVEN), Decimal("300")),
        # Expense paid by A: B owes B's share
        (_expense(Party.A, amount="1000", split=UNEVEN), Decimal("700")),
        # Expense paid by B: A owes A's share
        (_expense(Party.B, amount="1000", split=UNEVEN), Decimal("-300")),
    ],
)
def test_debt_delta_policy(transaction, expected):
    assert debt_delta(transaction) == expected


def test_debt_balance_scenario():
    """Income 1000 by A and expense 200 by A, both 50/50: A owes B 400."""
    balance = debt_balance([_income(Party.A)], [_expense(Party.A)])

    assert balance.amount == Decimal("-400")
    assert balance.debtor is Party.A
    assert balance.creditor is Party.B
    assert balance.magnitude == Decimal("400")
    assert not balance.is_settled


def test_debt_balance_is_order_independent():
    income = [_income(Party.A), _income(Party.B, amount="600")]
    expenses = [_expense(Party.A), _expense(Party.B, amount="50")]

    forward = debt_balance(income, expenses)
    backward = debt_balance(list(reversed(income)), list(reversed(expenses)))

    assert forward == backward


def test_debt_balance_empty_is_settled():
    balance = debt_balance([], [])
    assert balance == DebtBalance(Decimal("0"))
    assert balance.is_settled
    assert balance.debtor is None
    assert balance.creditor is None


def test_debt_uses_normalized_amounts():
    income = _income(
        Party.B, amount="900000", currency=Currency.ARS, fx_rate=Decimal("1000")
    )
    assert debt_delta(income) == Decimal("450")


def test_debt_missing_rate():
    income = _income(Party.B, amount="900000", currency=Currency.ARS)

    with pytest.raises(MissingExchangeRateError):
        debt_delta(income)

    assert debt_delta(income, strict=False) == Decimal("0")


def test_debt_amount_split():
    """Amount-mode shares count verbatim."""
    expense = _expense(
        Party.B, amount="1000", split=Split(SplitMode.AMOUNT, Decimal("250"), Decimal("750"))
    )
    assert debt_delta(expense) == Decimal("-250")
