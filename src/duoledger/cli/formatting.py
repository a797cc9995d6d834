"""Text rendering for amounts, debt and the monthly chart."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence

from duoledger.domain.entities import DebtBalance, LedgerMeta, MonthlyBucket

CURRENCY_SYMBOLS = {"USD": "$", "ARS": "AR$"}
CHART_WIDTH = 40


def format_money(amount: Decimal, currency: str = "USD") -> str:
    """Format an amount like ``$1,234.50`` or ``-$12.00``."""
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    rounded = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.2f}"


def debt_label(debt: DebtBalance, meta: LedgerMeta, currency: str = "USD") -> str:
    """Who owes whom, e.g. ``Bocha owes Debi $400.00``."""
    if debt.debtor is None or debt.creditor is None:
        return "Even"
    return (
        f"{meta.party_name(debt.debtor)} owes {meta.party_name(debt.creditor)} "
        f"{format_money(debt.magnitude, currency)}"
    )


def render_monthly_chart(buckets: Sequence[MonthlyBucket], currency: str = "USD") -> list[str]:
    """One line per month with a bar scaled to the largest absolute value."""
    if not buckets:
        return []
    largest = max(abs(bucket.net) for bucket in buckets) or Decimal("1")
    lines = []
    for bucket in buckets:
        length = int((abs(bucket.net) / largest * CHART_WIDTH).to_integral_value())
        bar = ("-" if bucket.net < 0 else "#") * length
        lines.append(f"{bucket.period}  {format_money(bucket.net, currency):>14}  {bar}")
    return lines
