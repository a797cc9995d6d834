"""Currency normalization and adjustment application.

Every amount the ledger aggregates passes through here first: the row's
native amount is converted into the reporting currency with its own
exchange rate, then the row's adjustments are folded over it in order.
"""

from decimal import Decimal
from typing import Iterable, Optional

from duoledger.domain.entities import (
    Adjustment,
    AdjustmentKind,
    Currency,
    Transaction,
)
from duoledger.domain.errors import MissingExchangeRateError, missing_exchange_rate

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def normalize(
    amount: Decimal,
    currency: Currency,
    fx_rate: Optional[Decimal],
    reporting_currency: Currency = Currency.USD,
    strict: bool = True,
) -> Decimal:
    """Convert an amount into the reporting currency.

    Args:
        amount: Amount in ``currency``
        currency: Currency of the amount
        fx_rate: Units of ``currency`` per one unit of ``reporting_currency``
        reporting_currency: Unit of account
        strict: If False, a zero or missing rate yields 0 instead of raising

    Returns:
        Amount expressed in the reporting currency

    Raises:
        MissingExchangeRateError: If the rate is zero, negative or missing and
            ``strict`` is True
    """
    if currency == reporting_currency:
        return amount

    if fx_rate is None or fx_rate <= 0:
        if strict:
            raise MissingExchangeRateError(
                missing_exchange_rate(currency.value, reporting_currency.value)
            )
        return ZERO

    return amount / fx_rate


def apply_adjustments(base_amount: Decimal, adjustments: Iterable[Adjustment]) -> Decimal:
    """Fold adjustments over a normalized amount in list order.

    Percent adjustments compound on the running total, so reordering the
    list changes the result. The result is not clamped and may be negative.
    """
    total = base_amount
    for adjustment in adjustments:
        if adjustment.kind is AdjustmentKind.PERCENT:
            total = total * (1 + adjustment.value / HUNDRED)
        else:
            total = total + adjustment.value
    return total


def net_amount(
    transaction: Transaction,
    reporting_currency: Currency = Currency.USD,
    strict: bool = True,
) -> Decimal:
    """Normalized amount of a transaction after its adjustments."""
    base = normalize(
        transaction.amount,
        transaction.currency,
        transaction.fx_rate,
        reporting_currency=reporting_currency,
        strict=strict,
    )
    return apply_adjustments(base, transaction.adjustments)
