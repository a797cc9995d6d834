"""Tests for CLI date filter and formatting helpers."""

from datetime import date
from decimal import Decimal

import click
import pytest

from duoledger.cli.date_filters import resolve_cli_date_range
from duoledger.cli.formatting import debt_label, format_money, render_monthly_chart
from duoledger.domain.entities import DebtBalance, LedgerMeta, MonthlyBucket, Period


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def test_resolve_cli_date_range_rejects_period_with_start_end(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date="2024-01-01",
            end_date=None,
            period="6m",
        )

    assert excinfo.value.exit_code == 1
    err = capsys.readouterr().err
    assert "--period cannot be combined" in err


def test_resolve_cli_date_range_rejects_reversed_dates(capsys):
    with pytest.raises(click.exceptions.Exit):
        resolve_cli_date_range(
            _ctx(), start_date="2024-03-01", end_date="2024-01-01", period=None
        )

    assert "must not be after" in capsys.readouterr().err


def test_resolve_cli_date_range_rejects_invalid_date(capsys):
    with pytest.raises(click.exceptions.Exit):
        resolve_cli_date_range(_ctx(), start_date="someday", end_date=None, period=None)

    assert "Invalid start date" in capsys.readouterr().err


def test_resolve_cli_date_range_uses_period():
    today = date(2024, 7, 15)

    result = resolve_cli_date_range(
        _ctx(), start_date=None, end_date=None, period="ytd", today=today
    )

    assert result == (date(2024, 1, 1), today)


def test_resolve_cli_date_range_falls_back_to_default_period():
    today = date(2024, 7, 15)

    result = resolve_cli_date_range(
        _ctx(),
        start_date=None,
        end_date=None,
        period=None,
        default_period=Period.LAST_12_MONTHS,
        today=today,
    )

    assert result == (date(2023, 8, 1), today)


def test_resolve_cli_date_range_open_end():
    result = resolve_cli_date_range(
        _ctx(), start_date="2024-01-01", end_date=None, period=None
    )

    assert result == (date(2024, 1, 1), None)


@pytest.mark.parametrize(
    "amount,currency,expected",
    [
        (Decimal("1234.5"), "USD", "$1,234.50"),
        (Decimal("-12"), "USD", "-$12.00"),
        (Decimal("0.005"), "USD", "$0.01"),
        (Decimal("900000"), "ARS", "AR$900,000.00"),
    ],
)
def test_format_money(amount, currency, expected):
    assert format_money(amount, currency) == expected


def test_debt_label():
    meta = LedgerMeta(parties=("Debi", "Bocha"))

    assert debt_label(DebtBalance(Decimal("-400")), meta) == "Debi owes Bocha $400.00"
    assert debt_label(DebtBalance(Decimal("25")), meta) == "Bocha owes Debi $25.00"
    assert debt_label(DebtBalance(Decimal("0")), meta) == "Even"


def test_render_monthly_chart_scales_bars():
    buckets = [
        MonthlyBucket("2024-01", Decimal("1000")),
        MonthlyBucket("2024-02", Decimal("-500")),
    ]

    lines = render_monthly_chart(buckets)

    assert lines[0].startswith("2024-01")
    assert lines[0].endswith("#" * 40)
    assert lines[1].endswith(" " + "-" * 20)
    assert render_monthly_chart([]) == []


def test_render_monthly_chart_all_zero():
    lines = render_monthly_chart([MonthlyBucket("2024-01", Decimal("0"))])

    assert lines == ["2024-01  " + "$0.00".rjust(14) + "  "]
