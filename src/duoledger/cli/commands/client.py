"""Client management commands."""

import click
from duoledger.cli.error_handling import handle_domain_error, load_document_or_exit
from duoledger.cli.party_resolution import actor_name
from duoledger.domain.errors import DomainError
from duoledger.domain.ledger import LedgerService


@click.group()
def client_group():
    """Manage clients."""
    pass


@client_group.command("list")
@click.pass_context
def list_clients(ctx):
    """List all clients."""
    service = LedgerService(ctx.obj["storage"])
    counterparties = load_document_or_exit(ctx, service).meta.counterparties

    if not counterparties:
        click.echo("No clients found. Use 'client add' to register one.")
        return

    click.echo("\nClients:")
    for counterparty in counterparties:
        click.echo(f"  {counterparty.name} (ID: {counterparty.id})")


@client_group.command("add")
@click.argument("name")
@click.pass_context
def add_client(ctx, name: str):
    """Register a new client."""
    service = LedgerService(ctx.obj["storage"])
    meta = load_document_or_exit(ctx, service).meta

    try:
        counterparty = service.add_counterparty(name, actor=actor_name(ctx, meta))
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created client '{counterparty.name}' (ID: {counterparty.id})")


def register_commands(cli):
    """Register client commands with main CLI."""
    cli.add_command(client_group, name="client")
