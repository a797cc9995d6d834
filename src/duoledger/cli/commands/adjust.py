"""Adjustment commands (taxes, discounts, fees)."""

import click
from duoledger.cli.error_handling import handle_domain_error, load_document_or_exit
from duoledger.cli.formatting import format_money
from duoledger.cli.party_resolution import actor_name
from duoledger.domain.entities import AdjustmentKind, TransactionKind
from duoledger.domain.errors import DomainError
from duoledger.domain.ledger import LedgerService
from duoledger.domain.money import net_amount
from duoledger.utils.amount_parser import parse_amount

KIND_CHOICE = click.Choice([k.value for k in TransactionKind], case_sensitive=False)


@click.group()
def adjust_group():
    """Manage per-row adjustments.

    Adjustments apply in the order they were added: percent adjustments
    compound on the running total, fixed ones add to it.
    """
    pass


@adjust_group.command("add", context_settings={"ignore_unknown_options": True})
@click.argument("kind", type=KIND_CHOICE)
@click.argument("transaction_id")
@click.argument("value")
@click.option("--fixed", "is_fixed", is_flag=True, help="Treat VALUE as a fixed amount (default: percent)")
@click.option("--label", default="Adj", help="Adjustment label (e.g., 'Bank tax')")
@click.pass_context
def add_adjustment(ctx, kind: str, transaction_id: str, value: str, is_fixed: bool, label: str):
    """Add an adjustment to an income or expense row.

    Examples:
        duoledger adjust add income 1a2b3c -3 --label "Bank tax"
        duoledger adjust add expense 4d5e6f -25 --fixed --label Discount
    """
    service = LedgerService(ctx.obj["storage"])
    document = load_document_or_exit(ctx, service)
    txn_kind = TransactionKind(kind.lower())

    try:
        amount = parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid adjustment value: {e}", err=True)
        ctx.exit(1)

    adjustment_kind = AdjustmentKind.FIXED if is_fixed else AdjustmentKind.PERCENT
    try:
        adjustment = service.add_adjustment(
            txn_kind,
            transaction_id,
            adjustment_kind,
            amount,
            label=label,
            actor=actor_name(ctx, document.meta),
        )
        txn = service.get_transaction(txn_kind, transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    suffix = "%" if adjustment_kind is AdjustmentKind.PERCENT else " (fixed)"
    reporting = document.settings.reporting_currency
    click.echo(f"Added adjustment {adjustment.id}: {adjustment.label} {adjustment.value}{suffix}")
    click.echo(f"  Net amount: {format_money(net_amount(txn, reporting), reporting.value)}")


@adjust_group.command("remove")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("transaction_id")
@click.argument("adjustment_id")
@click.pass_context
def remove_adjustment(ctx, kind: str, transaction_id: str, adjustment_id: str):
    """Remove an adjustment from a row."""
    service = LedgerService(ctx.obj["storage"])
    meta = load_document_or_exit(ctx, service).meta

    try:
        service.remove_adjustment(
            TransactionKind(kind.lower()),
            transaction_id,
            adjustment_id,
            actor=actor_name(ctx, meta),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Removed adjustment {adjustment_id}")


@adjust_group.command("list")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("transaction_id")
@click.pass_context
def list_adjustments(ctx, kind: str, transaction_id: str):
    """List a row's adjustments in application order."""
    service = LedgerService(ctx.obj["storage"])

    try:
        txn = service.get_transaction(TransactionKind(kind.lower()), transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not txn.adjustments:
        click.echo("No adjustments.")
        return

    for index, adjustment in enumerate(txn.adjustments, start=1):
        suffix = "%" if adjustment.kind is AdjustmentKind.PERCENT else " (fixed)"
        click.echo(f"{index}. {adjustment.id}  {adjustment.label}  {adjustment.value}{suffix}")


def register_commands(cli):
    """Register adjustment commands with main CLI."""
    cli.add_command(adjust_group, name="adjust")
