"""Split calculation between the two parties."""

from decimal import Decimal
from typing import Optional

from duoledger.domain.entities import Currency, Party, Split, SplitMode, Transaction
from duoledger.domain.money import HUNDRED, ZERO, net_amount


def _share(value: Optional[Decimal]) -> Decimal:
    return ZERO if value is None else value


def split_amount(net: Decimal, split: Split) -> tuple[Decimal, Decimal]:
    """Divide a net amount between Party A and Party B.

    Amount-mode shares are returned verbatim and the net is not consulted.
    Percent-mode shares are applied to the net independently. Neither mode
    checks that the shares add up; see ``validation`` for warnings.

    Args:
        net: Net amount in the reporting currency
        split: Split definition

    Returns:
        Tuple of (party A amount, party B amount)
    """
    share_a = _share(split.party_a_share)
    share_b = _share(split.party_b_share)

    if split.mode is SplitMode.AMOUNT:
        return share_a, share_b

    return net * share_a / HUNDRED, net * share_b / HUNDRED


def split_transaction(
    transaction: Transaction,
    reporting_currency: Currency = Currency.USD,
    strict: bool = True,
) -> tuple[Decimal, Decimal]:
    """Split a transaction's net amount."""
    net = net_amount(transaction, reporting_currency=reporting_currency, strict=strict)
    return split_amount(net, transaction.split)


def share_for(shares: tuple[Decimal, Decimal], party: Party) -> Decimal:
    """Pick one party's amount out of a split result."""
    return shares[0] if party is Party.A else shares[1]
