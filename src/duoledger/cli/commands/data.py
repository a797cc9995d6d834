"""Data commands: export, import, change log, logo and settings."""

import base64
import mimetypes
from pathlib import Path

import click
from duoledger.cli.error_handling import handle_domain_error, load_document_or_exit
from duoledger.cli.party_resolution import actor_name
from duoledger.domain.entities import Period
from duoledger.domain.errors import DomainError
from duoledger.domain.ledger import LedgerService
from duoledger.domain.serialization import export_filename


@click.command("export")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file (default: duoledger-YYYY-MM-DD.json)")
@click.pass_context
def export_document(ctx, output: str | None):
    """Export the whole ledger as JSON."""
    service = LedgerService(ctx.obj["storage"])
    try:
        text = service.export_json()
    except DomainError as e:
        handle_domain_error(ctx, e)

    path = Path(output or export_filename())
    path.write_text(text, encoding="utf-8")
    click.echo(f"Exported ledger to {path}")


@click.command("import")
@click.argument("json_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_document(ctx, json_file: str):
    """Replace the ledger with an exported JSON document.

    The current ledger is left unchanged if the file is not a valid ledger.
    """
    service = LedgerService(ctx.obj["storage"])
    meta = load_document_or_exit(ctx, service).meta

    try:
        text = Path(json_file).read_text(encoding="utf-8")
        document = service.import_json(text, actor=actor_name(ctx, meta))
    except (DomainError, UnicodeDecodeError) as e:
        click.echo(f"Error: Invalid ledger file: {e}", err=True)
        ctx.exit(1)

    click.echo("Import complete:")
    click.echo(f"  Income: {len(document.income_transactions)} rows")
    click.echo(f"  Expenses: {len(document.expense_transactions)} rows")
    click.echo(f"  Clients: {len(document.meta.counterparties)}")


@click.command("log")
@click.option("--limit", type=int, default=20, show_default=True, help="Number of entries")
@click.pass_context
def show_log(ctx, limit: int):
    """Show the latest change log entries."""
    service = LedgerService(ctx.obj["storage"])
    try:
        entries = service.recent_changes(limit=limit)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not entries:
        click.echo("No changes recorded.")
        return

    for entry in entries:
        details = ", ".join(f"{key}={value}" for key, value in entry.payload.items())
        timestamp = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        click.echo(f"{timestamp}  {entry.actor:<12} {entry.action:<20} {details}")


@click.command("logo")
@click.argument("image", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option("--clear", is_flag=True, help="Remove the stored logo")
@click.pass_context
def set_logo(ctx, image: str | None, clear: bool):
    """Store an image (PNG recommended, 600x100) as the ledger logo."""
    if bool(image) == clear:
        click.echo("Error: Give either an image file or --clear.", err=True)
        ctx.exit(1)

    service = LedgerService(ctx.obj["storage"])
    meta = load_document_or_exit(ctx, service).meta

    logo = None
    if image:
        mime_type = mimetypes.guess_type(image)[0] or "image/png"
        encoded = base64.b64encode(Path(image).read_bytes()).decode("ascii")
        logo = f"data:{mime_type};base64,{encoded}"

    try:
        service.set_logo(logo, actor=actor_name(ctx, meta))
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo("Logo cleared." if clear else f"Logo set from {image}")


@click.group()
def settings_group():
    """Manage ledger settings."""
    pass


@settings_group.command("show")
@click.pass_context
def show_settings(ctx):
    """Show the current settings."""
    document = load_document_or_exit(ctx, LedgerService(ctx.obj["storage"]))
    click.echo(f"Default period: {document.settings.default_period.value}")
    click.echo(f"Reporting currency: {document.settings.reporting_currency.value}")
    click.echo(f"Logo: {'set' if document.meta.logo else 'not set'}")


@settings_group.command("period")
@click.argument("period", type=click.Choice([p.value for p in Period], case_sensitive=False))
@click.pass_context
def set_period(ctx, period: str):
    """Set the default summary period (6m, 12m, ytd or all)."""
    service = LedgerService(ctx.obj["storage"])
    meta = load_document_or_exit(ctx, service).meta

    try:
        service.set_default_period(Period(period.lower()), actor=actor_name(ctx, meta))
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Default period set to {period.lower()}")


def register_commands(cli):
    """Register data commands with main CLI."""
    cli.add_command(export_document)
    cli.add_command(import_document)
    cli.add_command(show_log)
    cli.add_command(set_logo)
    cli.add_command(settings_group, name="settings")
