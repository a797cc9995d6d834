"""Summary and debt commands."""

import click
from duoledger.cli.date_filters import resolve_cli_date_range
from duoledger.cli.error_handling import load_document_or_exit
from duoledger.cli.formatting import debt_label, format_money, render_monthly_chart
from duoledger.cli.party_resolution import (
    current_party,
    resolve_client_or_exit,
    resolve_party_or_exit,
)
from duoledger.domain.entities import FilterCriteria, IssueSeverity, Period
from duoledger.domain.ledger import LedgerService
from duoledger.domain.summary import build_summary_report, ledger_debt
from duoledger.domain.validation import errors_only, validate_document

PERIOD_CHOICE = click.Choice([p.value for p in Period], case_sensitive=False)


@click.command("summary")
@click.option("--period", type=PERIOD_CHOICE, help="Date range preset: 6m, 12m, ytd or all (default: ledger setting)")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--client", help="Only income for this client (name or ID)")
@click.option("--by", help="Only rows created or paid by this party")
@click.option("--fill-gaps", is_flag=True, help="Show months without transactions as zero")
@click.pass_context
def summary(
    ctx,
    period: str | None,
    start_date: str | None,
    end_date: str | None,
    client: str | None,
    by: str | None,
    fill_gaps: bool,
):
    """Show income totals, shares, current debt and the monthly balance."""
    document = load_document_or_exit(ctx, LedgerService(ctx.obj["storage"]))
    meta = document.meta
    currency = document.settings.reporting_currency.value

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period=period,
        default_period=document.settings.default_period,
    )
    criteria = FilterCriteria(
        start_date=start,
        end_date=end,
        counterparty_id=resolve_client_or_exit(ctx, meta, client) if client else None,
        responsible_party=resolve_party_or_exit(ctx, meta, by) if by else None,
    )
    user = current_party(ctx, meta)

    report = build_summary_report(document, criteria, current_party=user, fill_gaps=fill_gaps)

    range_start = report.criteria.start_date.isoformat() if report.criteria.start_date else "beginning"
    range_end = report.criteria.end_date.isoformat() if report.criteria.end_date else "today"
    click.echo(f"Period: {range_start} to {range_end}")
    click.echo()
    click.echo(f"{'Total Income':<30} {format_money(report.totals.total_income, currency):>16}")
    user_label = f"{meta.party_name(user)}'s Share"
    click.echo(f"{user_label:<30} {format_money(report.totals.user_share, currency):>16}")
    partner_label = "Partner's Share"
    click.echo(f"{partner_label:<30} {format_money(report.totals.partner_share, currency):>16}")
    click.echo(f"{'Current Debt':<30} {debt_label(report.debt, meta, currency):>16}")

    click.echo()
    click.echo("Balance by Month")
    lines = render_monthly_chart(report.monthly, currency)
    if not lines:
        click.echo("  No transactions found.")
    for line in lines:
        click.echo(f"  {line}")

    if report.issues:
        click.echo()
        click.echo("Issues:")
        for issue in report.issues:
            note = " (excluded)" if issue.severity is IssueSeverity.ERROR else ""
            click.echo(
                f"  {issue.severity.value.upper()} {issue.transaction_id}: {issue.message}{note}"
            )


@click.command("debt")
@click.pass_context
def debt(ctx):
    """Show who owes whom across every transaction."""
    document = load_document_or_exit(ctx, LedgerService(ctx.obj["storage"]))
    currency = document.settings.reporting_currency.value
    click.echo(debt_label(ledger_debt(document), document.meta, currency))
    for issue in errors_only(validate_document(document)):
        click.echo(f"Skipped {issue.transaction_id}: {issue.message}", err=True)


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary)
    cli.add_command(debt)
