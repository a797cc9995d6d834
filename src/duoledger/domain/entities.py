"""Domain model entities for duoledger.

These are pure data classes representing ledger concepts, independent of
how a storage adapter lays them out. The whole ledger is a single immutable
``Document`` value; every change produces a new document.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Mapping, Optional


class Party(str, Enum):
    """One of the two ledger slots.

    Display names are configuration (``LedgerMeta.parties``); computation
    only ever looks at the slot.
    """

    A = "A"
    B = "B"

    @property
    def other(self) -> "Party":
        return Party.B if self is Party.A else Party.A


class Currency(str, Enum):
    """Closed set of supported currency codes."""

    USD = "USD"
    ARS = "ARS"


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class AdjustmentKind(str, Enum):
    FIXED = "fixed"
    PERCENT = "percent"


class SplitMode(str, Enum):
    AMOUNT = "amount"
    PERCENT = "percent"


class Period(str, Enum):
    """Date range presets used by summary filters."""

    LAST_6_MONTHS = "6m"
    LAST_12_MONTHS = "12m"
    YEAR_TO_DATE = "ytd"
    ALL_TIME = "all"


class IssueSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Adjustment:
    """Fixed or percent adjustment applied to a normalized amount."""

    id: str
    label: str
    kind: AdjustmentKind
    value: Decimal


@dataclass(frozen=True)
class Split:
    """How a transaction's net amount is divided between the parties.

    In amount mode the shares are literal reporting-currency amounts, in
    percent mode they are percentages of the net amount.
    """

    mode: SplitMode = SplitMode.PERCENT
    party_a_share: Optional[Decimal] = Decimal("50")
    party_b_share: Optional[Decimal] = Decimal("50")


@dataclass(frozen=True)
class Transaction:
    """Fields shared by income and expense rows."""

    kind: ClassVar[TransactionKind]

    id: str
    date: date
    amount: Decimal
    responsible_party: Party
    currency: Currency = Currency.USD
    fx_rate: Decimal = Decimal("0")
    adjustments: tuple[Adjustment, ...] = ()
    split: Split = field(default_factory=Split)


@dataclass(frozen=True)
class Income(Transaction):
    """Invoice collected by ``responsible_party``."""

    kind: ClassVar[TransactionKind] = TransactionKind.INCOME

    counterparty_id: Optional[str] = None
    invoice_number: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class Expense(Transaction):
    """Shared expense paid upfront by ``responsible_party``."""

    kind: ClassVar[TransactionKind] = TransactionKind.EXPENSE

    description: Optional[str] = None


@dataclass(frozen=True)
class Counterparty:
    """Client referenced by income rows."""

    id: str
    name: str


@dataclass(frozen=True)
class ChangeLogEntry:
    """Append-only record of a mutating action."""

    id: str
    timestamp: datetime
    actor: str
    action: str
    payload: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LedgerMeta:
    """Party names, counterparty registry and logo."""

    parties: tuple[str, str] = ("Party A", "Party B")
    counterparties: tuple[Counterparty, ...] = ()
    logo: Optional[str] = None

    def party_name(self, party: Party) -> str:
        return self.parties[0] if party is Party.A else self.parties[1]

    def get_counterparty(self, counterparty_id: Optional[str]) -> Optional[Counterparty]:
        for counterparty in self.counterparties:
            if counterparty.id == counterparty_id:
                return counterparty
        return None


@dataclass(frozen=True)
class LedgerSettings:
    default_period: Period = Period.LAST_6_MONTHS
    reporting_currency: Currency = Currency.USD


@dataclass(frozen=True)
class Document:
    """The complete ledger state."""

    meta: LedgerMeta = field(default_factory=LedgerMeta)
    settings: LedgerSettings = field(default_factory=LedgerSettings)
    income_transactions: tuple[Income, ...] = ()
    expense_transactions: tuple[Expense, ...] = ()
    change_log: tuple[ChangeLogEntry, ...] = ()

    def transactions_of(self, kind: TransactionKind) -> tuple[Transaction, ...]:
        if kind is TransactionKind.INCOME:
            return self.income_transactions
        return self.expense_transactions


@dataclass(frozen=True)
class FilterCriteria:
    """Summary filter; every bound is optional and inclusive."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    counterparty_id: Optional[str] = None
    responsible_party: Optional[Party] = None


@dataclass(frozen=True)
class DebtBalance:
    """Net obligation between the parties.

    Positive means Party B owes Party A, negative the reverse.
    """

    amount: Decimal

    @property
    def is_settled(self) -> bool:
        return self.amount == 0

    @property
    def magnitude(self) -> Decimal:
        return abs(self.amount)

    @property
    def debtor(self) -> Optional[Party]:
        if self.amount > 0:
            return Party.B
        if self.amount < 0:
            return Party.A
        return None

    @property
    def creditor(self) -> Optional[Party]:
        debtor = self.debtor
        return debtor.other if debtor is not None else None


@dataclass(frozen=True)
class MonthlyBucket:
    """Income net minus expense net for one ``YYYY-MM`` period."""

    period: str
    net: Decimal


@dataclass(frozen=True)
class SummaryTotals:
    total_income: Decimal
    user_share: Decimal
    partner_share: Decimal


@dataclass(frozen=True)
class ValidationIssue:
    severity: IssueSeverity
    transaction_id: Optional[str]
    message: str


@dataclass(frozen=True)
class SummaryReport:
    """Everything a summary view renders for one filter state."""

    criteria: FilterCriteria
    current_party: Party
    totals: SummaryTotals
    monthly: tuple[MonthlyBucket, ...]
    debt: DebtBalance
    income: tuple[Income, ...]
    expenses: tuple[Expense, ...]
    issues: tuple[ValidationIssue, ...] = ()
