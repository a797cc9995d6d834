"""Utility for resolving party and client references."""

from duoledger.domain.entities import LedgerMeta, Party
from duoledger.domain.errors import NotFoundError, counterparty_not_found, party_not_found


def resolve_party(meta: LedgerMeta, party: str | Party) -> Party:
    """Resolve a slot ("A"/"B") or display name to a party slot.

    Args:
        meta: Ledger metadata holding the party names
        party: Slot, slot string or display name (case-insensitive)

    Returns:
        Party slot

    Raises:
        NotFoundError: If the reference matches neither slot nor name
    """
    if isinstance(party, Party):
        return party

    reference = party.strip()
    try:
        return Party(reference.upper())
    except ValueError:
        pass

    for slot in Party:
        if meta.party_name(slot).casefold() == reference.casefold():
            return slot

    raise NotFoundError(party_not_found(reference, meta.parties))


def resolve_counterparty(meta: LedgerMeta, counterparty: str) -> str:
    """Resolve a client id or name to a client id.

    Raises:
        NotFoundError: If no registered client matches
    """
    reference = counterparty.strip()
    for entry in meta.counterparties:
        if entry.id == reference:
            return entry.id
    for entry in meta.counterparties:
        if entry.name.casefold() == reference.casefold():
            return entry.id

    raise NotFoundError(counterparty_not_found(reference))
