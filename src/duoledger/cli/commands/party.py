"""Party commands."""

import click
from duoledger.cli.error_handling import handle_domain_error, load_document_or_exit
from duoledger.cli.party_resolution import actor_name, current_party, resolve_party_or_exit
from duoledger.domain.entities import Party
from duoledger.domain.errors import DomainError
from duoledger.domain.ledger import LedgerService


@click.group()
def party_group():
    """Manage the two parties."""
    pass


@party_group.command("list")
@click.pass_context
def list_parties(ctx):
    """Show both parties and the current user."""
    service = LedgerService(ctx.obj["storage"])
    meta = load_document_or_exit(ctx, service).meta
    user = current_party(ctx, meta)

    for slot in Party:
        marker = " (current user)" if slot is user else ""
        click.echo(f"{slot.value}: {meta.party_name(slot)}{marker}")


@party_group.command("rename")
@click.argument("party")
@click.argument("name")
@click.pass_context
def rename_party(ctx, party: str, name: str):
    """Rename a party.

    Examples:
        duoledger party rename A Debi
    """
    service = LedgerService(ctx.obj["storage"])
    meta = load_document_or_exit(ctx, service).meta
    slot = resolve_party_or_exit(ctx, meta, party)

    try:
        service.rename_party(slot, name, actor=actor_name(ctx, meta))
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Renamed party {slot.value} to '{name.strip()}'")


def register_commands(cli):
    """Register party commands with main CLI."""
    cli.add_command(party_group, name="party")
