"""Income and expense commands.

Both groups share the same options and differ only in their variant
fields: income rows carry a client, invoice number and notes, expense rows a
description.
"""

from datetime import date as date_type
from decimal import Decimal
from typing import Any, Optional

import click
from duoledger.cli.date_filters import resolve_cli_date_range
from duoledger.cli.error_handling import handle_domain_error, load_document_or_exit
from duoledger.cli.formatting import format_money
from duoledger.cli.party_resolution import (
    actor_name,
    current_party,
    resolve_client_or_exit,
    resolve_party_or_exit,
)
from duoledger.domain.entities import (
    Currency,
    Document,
    FilterCriteria,
    Income,
    Period,
    Split,
    SplitMode,
    Transaction,
    TransactionKind,
)
from duoledger.domain.errors import DomainError, MissingExchangeRateError
from duoledger.domain.ledger import LedgerService
from duoledger.domain.money import net_amount
from duoledger.domain.split import split_transaction
from duoledger.utils.amount_parser import parse_amount
from duoledger.utils.date_parser import parse_date

CURRENCY_CHOICE = click.Choice([c.value for c in Currency], case_sensitive=False)
SPLIT_MODE_CHOICE = click.Choice([m.value for m in SplitMode], case_sensitive=False)
PERIOD_CHOICE = click.Choice([p.value for p in Period], case_sensitive=False)


def _parse_amount_or_exit(ctx, value: str, field: str) -> Decimal:
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {field}: {e}", err=True)
        ctx.exit(1)


def _parse_date_or_exit(ctx, value: str) -> date_type:
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def _label(txn: Transaction, document: Document) -> str:
    if isinstance(txn, Income):
        counterparty = document.meta.get_counterparty(txn.counterparty_id)
        name = counterparty.name if counterparty else "-"
        return f"{name} {txn.invoice_number or ''}".strip()
    return txn.description or "-"


def format_transaction(txn: Transaction, document: Document) -> str:
    """One-line summary of a row with its net amount and split."""
    meta = document.meta
    reporting = document.settings.reporting_currency
    native = format_money(txn.amount, txn.currency.value)
    if txn.currency != reporting:
        native = f"{native} @ {txn.fx_rate}"
    try:
        net = format_money(net_amount(txn, reporting), reporting.value)
        share_a, share_b = split_transaction(txn, reporting)
        shares = (
            f"{meta.parties[0]} {format_money(share_a, reporting.value)} / "
            f"{meta.parties[1]} {format_money(share_b, reporting.value)}"
        )
    except MissingExchangeRateError:
        net, shares = "rate missing", "-"
    return (
        f"{txn.id}  {txn.date}  {_label(txn, document):<20}  {native:>18}  "
        f"net {net:>12}  {shares}  by {meta.party_name(txn.responsible_party)}"
    )


def _collect_changes(
    ctx,
    document: Document,
    kind: TransactionKind,
    current: Optional[Transaction],
    *,
    date: str | None,
    amount: str | None,
    currency: str | None,
    fx_rate: str | None,
    by: str | None,
    split_mode: str | None,
    share_a: str | None,
    share_b: str | None,
    client: str | None = None,
    invoice: str | None = None,
    notes: str | None = None,
    description: str | None = None,
) -> dict[str, Any]:
    """Turn CLI options into entity field values, skipping unset options."""
    meta = document.meta
    changes: dict[str, Any] = {}

    if date is not None:
        changes["date"] = _parse_date_or_exit(ctx, date)
    if amount is not None:
        changes["amount"] = _parse_amount_or_exit(ctx, amount, "amount")
    if currency is not None:
        changes["currency"] = Currency(currency.upper())
    if fx_rate is not None:
        changes["fx_rate"] = _parse_amount_or_exit(ctx, fx_rate, "exchange rate")
    if by is not None:
        changes["responsible_party"] = resolve_party_or_exit(ctx, meta, by)

    if split_mode is not None or share_a is not None or share_b is not None:
        base = current.split if current is not None else Split()
        changes["split"] = Split(
            mode=SplitMode(split_mode.lower()) if split_mode else base.mode,
            party_a_share=(
                _parse_amount_or_exit(ctx, share_a, "share") if share_a is not None else base.party_a_share
            ),
            party_b_share=(
                _parse_amount_or_exit(ctx, share_b, "share") if share_b is not None else base.party_b_share
            ),
        )

    if kind is TransactionKind.INCOME:
        if client is not None:
            changes["counterparty_id"] = resolve_client_or_exit(ctx, meta, client)
        if invoice is not None:
            changes["invoice_number"] = invoice
        if notes is not None:
            changes["notes"] = notes
    elif description is not None:
        changes["description"] = description

    return changes


def _shared_options(func, *, required: bool):
    """Attach the options common to add and update."""
    options = [
        click.option(
            "--date",
            required=False,
            help="Transaction date (YYYY-MM-DD or relative like 'today'; default today)"
            if required
            else "Transaction date",
        ),
        click.option("--amount", required=required, help="Amount in the row currency (e.g., 1200 or 900000)"),
        click.option("--currency", type=CURRENCY_CHOICE, help="Row currency (default: USD)"),
        click.option("--fx-rate", help="Units of the row currency per 1 unit of the reporting currency"),
        click.option("--by", help="Responsible party: A, B or a party name (default: current user)"),
        click.option("--split-mode", type=SPLIT_MODE_CHOICE, help="Split by percent or amount (default: percent)"),
        click.option("--share-a", help="Party A share (percent or amount; default 50)"),
        click.option("--share-b", help="Party B share (percent or amount; default 50)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_group(kind: TransactionKind) -> click.Group:
    noun = kind.value
    is_income = kind is TransactionKind.INCOME

    @click.group(name=noun, help=f"Manage {noun} rows.")
    def group():
        pass

    def variant_options(func):
        if is_income:
            func = click.option("--notes", help="Notes")(func)
            func = click.option("--invoice", help="Invoice number")(func)
            func = click.option("--client", help="Client name or ID")(func)
        else:
            func = click.option("--description", help="Expense description")(func)
        return func

    @click.pass_context
    def add(ctx, **options):
        storage = ctx.obj["storage"]
        service = LedgerService(storage)
        document = load_document_or_exit(ctx, service)
        actor = actor_name(ctx, document.meta)

        changes = _collect_changes(ctx, document, kind, None, **options)
        changes.setdefault("date", date_type.today())
        changes.setdefault("responsible_party", current_party(ctx, document.meta))

        try:
            if is_income:
                txn = service.add_income(actor=actor, **changes)
            else:
                txn = service.add_expense(actor=actor, **changes)
        except DomainError as e:
            handle_domain_error(ctx, e)

        click.echo(f"Created {noun} {txn.id}")
        click.echo(f"  {format_transaction(txn, document)}")

    add.__doc__ = f"""Add an {noun} row.

    Examples:
        duoledger {noun} add --amount 1200 --by A
        duoledger {noun} add --amount 900000 --currency ARS --fx-rate 1000 --by B
    """
    group.add_command(click.command("add")(variant_options(_shared_options(add, required=True))))

    @click.pass_context
    def update(ctx, transaction_id: str, **options):
        service = LedgerService(ctx.obj["storage"])
        document = load_document_or_exit(ctx, service)

        try:
            current = service.get_transaction(kind, transaction_id)
        except DomainError as e:
            handle_domain_error(ctx, e)

        changes = _collect_changes(ctx, document, kind, current, **options)
        if not changes:
            click.echo("Error: Nothing to update.", err=True)
            ctx.exit(1)

        try:
            txn = service.update_transaction(
                kind, transaction_id, actor=actor_name(ctx, document.meta), **changes
            )
        except DomainError as e:
            handle_domain_error(ctx, e)

        click.echo(f"Updated {noun} {txn.id}")
        click.echo(f"  {format_transaction(txn, document)}")

    update.__doc__ = f"Update an {noun} row. Only the given options change."
    group.add_command(
        click.command("update")(
            click.argument("transaction_id")(variant_options(_shared_options(update, required=False)))
        )
    )

    @click.command("delete")
    @click.argument("transaction_id")
    @click.pass_context
    def delete(ctx, transaction_id: str):
        service = LedgerService(ctx.obj["storage"])
        meta = load_document_or_exit(ctx, service).meta

        try:
            service.delete_transaction(kind, transaction_id, actor=actor_name(ctx, meta))
        except DomainError as e:
            handle_domain_error(ctx, e)

        click.echo(f"Deleted {noun} {transaction_id}")

    delete.help = f"Delete an {noun} row."
    group.add_command(delete)

    @click.command("list")
    @click.option("--period", type=PERIOD_CHOICE, help="Date range preset (default: ledger setting)")
    @click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
    @click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
    @click.option("--client", help="Only rows for this client (income only)")
    @click.option("--by", help="Only rows this party is responsible for")
    @click.pass_context
    def list_rows(ctx, period, start_date, end_date, client, by):
        service = LedgerService(ctx.obj["storage"])
        document = load_document_or_exit(ctx, service)

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
            counterparty_id=resolve_client_or_exit(ctx, document.meta, client) if client else None,
            responsible_party=resolve_party_or_exit(ctx, document.meta, by) if by else None,
        )

        try:
            rows = service.list_transactions(kind, criteria)
        except DomainError as e:
            handle_domain_error(ctx, e)

        if not rows:
            click.echo(f"No {noun} rows found.")
            return

        for txn in rows:
            click.echo(format_transaction(txn, document))

    list_rows.help = f"List {noun} rows, newest first."
    group.add_command(list_rows)

    return group


income_group = _build_group(TransactionKind.INCOME)
expense_group = _build_group(TransactionKind.EXPENSE)


def register_commands(cli):
    """Register income and expense commands with main CLI."""
    cli.add_command(income_group, name="income")
    cli.add_command(expense_group, name="expense")
