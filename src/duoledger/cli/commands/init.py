"""Ledger initialization command."""

import click
from duoledger.cli.error_handling import handle_domain_error
from duoledger.domain.entities import Currency
from duoledger.domain.errors import DomainError
from duoledger.domain.ledger import LedgerService


@click.command("init")
@click.option("--party-a", required=True, help="Display name of party A")
@click.option("--party-b", required=True, help="Display name of party B")
@click.option("--client", "clients", multiple=True, help="Client to register (repeatable)")
@click.option(
    "--currency",
    type=click.Choice([c.value for c in Currency], case_sensitive=False),
    default=Currency.USD.value,
    help="Reporting currency (default: USD)",
)
@click.option("--force", is_flag=True, help="Start over even if the ledger has transactions")
@click.pass_context
def init_ledger(ctx, party_a: str, party_b: str, clients: tuple[str, ...], currency: str, force: bool):
    """Start a ledger for two parties.

    Examples:
        duoledger init --party-a Debi --party-b Bocha --client Lions --client TGI
    """
    service = LedgerService(ctx.obj["storage"])

    try:
        document = service.initialize(
            party_a=party_a,
            party_b=party_b,
            clients=clients,
            reporting_currency=Currency(currency.upper()),
            force=force,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    meta = document.meta
    click.echo(f"Initialized ledger for {meta.parties[0]} (A) and {meta.parties[1]} (B)")
    click.echo(f"  Reporting currency: {document.settings.reporting_currency.value}")
    for counterparty in meta.counterparties:
        click.echo(f"  Client: {counterparty.name} (ID: {counterparty.id})")


def register_commands(cli):
    """Register init command with main CLI."""
    cli.add_command(init_ledger)
