"""Utility functions for duoledger."""

from duoledger.utils.date_parser import parse_date, get_date_range, criteria_for_period
from duoledger.utils.amount_parser import parse_amount, coerce_amount
from duoledger.utils.party_resolver import resolve_party, resolve_counterparty

__all__ = [
    "parse_date",
    "get_date_range",
    "criteria_for_period",
    "parse_amount",
    "coerce_amount",
    "resolve_party",
    "resolve_counterparty",
]
