"""CLI error handling helpers."""

import click

from duoledger.domain.entities import Document
from duoledger.domain.errors import DomainError
from duoledger.domain.ledger import LedgerService


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def load_document_or_exit(ctx: click.Context, service: LedgerService) -> Document:
    """Load the stored ledger, exiting with an error if it cannot be read."""
    try:
        return service.load()
    except DomainError as e:
        handle_domain_error(ctx, e)
