"""Main CLI entry point."""

import click
from duoledger.database.factories import create_storage
from duoledger.logging_config import configure_logging

# Import and register all commands at module level
from duoledger.cli.commands import (
    init,
    party,
    client,
    transaction,
    adjust,
    summary,
    data,
)


@click.group()
@click.option(
    "--data-path",
    type=click.Path(),
    help="Ledger file: a .json file or a SQLite database (overrides DUOLEDGER_DATA_PATH)",
    envvar="DUOLEDGER_DATA_PATH",
)
@click.option(
    "--as",
    "as_party",
    help="Current user: A, B or a party name (overrides DUOLEDGER_USER, default A)",
    envvar="DUOLEDGER_USER",
)
@click.option("--verbose", "-v", is_flag=True, help="Log ledger actions and storage events")
@click.pass_context
def cli(ctx, data_path: str | None, as_party: str | None, verbose: bool):
    """Duoledger - shared income and expense ledger for two parties.

    Track invoices and shared expenses in USD or ARS, apply taxes and
    discounts, split every row between the two parties and see who owes whom.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose)

    # Open storage only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is not None:
        storage = create_storage(data_path)
        storage.connect()
        storage.initialize_schema()
        ctx.obj["storage"] = storage
        ctx.obj["as_party"] = as_party
        ctx.call_on_close(storage.disconnect)


# Register all commands
init.register_commands(cli)
party.register_commands(cli)
client.register_commands(cli)
transaction.register_commands(cli)
adjust.register_commands(cli)
summary.register_commands(cli)
data.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
