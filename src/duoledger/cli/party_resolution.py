"""CLI helpers for party and client resolution."""

from __future__ import annotations

import click

from duoledger.cli.error_handling import handle_domain_error
from duoledger.domain.entities import LedgerMeta, Party
from duoledger.domain.errors import DomainError
from duoledger.utils.party_resolver import resolve_counterparty, resolve_party


def resolve_party_or_exit(ctx: click.Context, meta: LedgerMeta, party: str) -> Party:
    """Resolve a party slot or name, or exit with a CLI error."""
    try:
        return resolve_party(meta, party)
    except DomainError as exc:
        handle_domain_error(ctx, exc)


def resolve_client_or_exit(ctx: click.Context, meta: LedgerMeta, client: str) -> str:
    """Resolve a client id or name, or exit with a CLI error."""
    try:
        return resolve_counterparty(meta, client)
    except DomainError as exc:
        handle_domain_error(ctx, exc)


def current_party(ctx: click.Context, meta: LedgerMeta) -> Party:
    """Party selected with --as / DUOLEDGER_USER, defaulting to A."""
    as_party = ctx.find_root().obj.get("as_party")
    if not as_party:
        return Party.A
    return resolve_party_or_exit(ctx, meta, as_party)


def actor_name(ctx: click.Context, meta: LedgerMeta) -> str:
    """Name recorded in the change log for the current user."""
    return meta.party_name(current_party(ctx, meta))
