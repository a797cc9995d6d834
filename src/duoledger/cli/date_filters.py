"""CLI helpers for date range resolution."""

from datetime import date
from typing import Optional

import click

from duoledger.domain.entities import Period
from duoledger.utils.date_parser import get_date_range, parse_date


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    default_period: Period = Period.LAST_6_MONTHS,
    today: Optional[date] = None,
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from a period preset or explicit dates.

    Explicit dates replace the preset entirely; an open end stays open.
    Without either, the ledger's default period applies.
    """
    if period and (start_date or end_date):
        click.echo(
            "Error: --period cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if not start_date and not end_date:
        return get_date_range(period or default_period, today=today)

    start = None
    end = None

    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    if start is not None and end is not None and start > end:
        click.echo("Error: Start date must not be after end date.", err=True)
        ctx.exit(1)

    return start, end
