"""Tests for domain entities."""

from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

import pytest

from duoledger.domain.entities import (
    Counterparty,
    DebtBalance,
    Document,
    Expense,
    Income,
    LedgerMeta,
    Party,
    Split,
    SplitMode,
    TransactionKind,
)


def test_party_other():
    assert Party.A.other is Party.B
    assert Party.B.other is Party.A


def test_transaction_defaults():
    income = Income(
        id="i1", date=date(2024, 1, 1), amount=Decimal("10"), responsible_party=Party.A
    )

    assert income.kind is TransactionKind.INCOME
    assert income.split == Split(SplitMode.PERCENT, Decimal("50"), Decimal("50"))
    assert income.adjustments == ()
    assert income.fx_rate == 0


def test_entities_are_immutable():
    expense = Expense(
        id="e1", date=date(2024, 1, 1), amount=Decimal("10"), responsible_party=Party.A
    )

    assert expense.kind is TransactionKind.EXPENSE
    with pytest.raises(FrozenInstanceError):
        expense.amount = Decimal("20")


def test_ledger_meta_lookups():
    meta = LedgerMeta(
        parties=("Debi", "Bocha"),
        counterparties=(Counterparty("c-1", "Lions"),),
    )

    assert meta.party_name(Party.A) == "Debi"
    assert meta.party_name(Party.B) == "Bocha"
    assert meta.get_counterparty("c-1").name == "Lions"
    assert meta.get_counterparty("c-2") is None
    assert meta.get_counterparty(None) is None


def test_document_transactions_of():
    income = Income(
        id="i1", date=date(2024, 1, 1), amount=Decimal("10"), responsible_party=Party.A
    )
    document = Document(income_transactions=(income,))

    assert document.transactions_of(TransactionKind.INCOME) == (income,)
    assert document.transactions_of(TransactionKind.EXPENSE) == ()


@pytest.mark.parametrize(
    "amount,debtor,creditor",
    [
        (Decimal("10"), Party.B, Party.A),
        (Decimal("-10"), Party.A, Party.B),
        (Decimal("0"), None, None),
    ],
)
def test_debt_balance_direction(amount, debtor, creditor):
    balance = DebtBalance(amount)
    assert balance.debtor is debtor
    assert balance.creditor is creditor
    assert balance.magnitude == abs(amount)
