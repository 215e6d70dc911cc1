"""
View Projection

Derives the per-status list and total shown for a tab. Recomputed in
full on every call: entry counts are small, so there is no caching and
no incremental bookkeeping to drift out of sync with the store.
"""

from decimal import Decimal
from typing import Iterable, Union

from payment_tracker.models.entry import Entry, EntryStatus, StatusView


def project(
    entries: Iterable[Entry],
    status: Union[EntryStatus, str],
) -> StatusView:
    """
    Filter entries to one status, keeping their order, and sum amounts.

    Never mutates its input.
    """
    status = EntryStatus(status)
    selected = tuple(entry for entry in entries if entry.status == status)
    total = sum((entry.amount for entry in selected), Decimal("0"))
    return StatusView(status=status, entries=selected, total=total)


def project_all(entries: Iterable[Entry]) -> dict[EntryStatus, StatusView]:
    """Projection for every status at once (e.g. for tab badges)."""
    entries = tuple(entries)
    return {status: project(entries, status) for status in EntryStatus}


def format_amount(value: Decimal, currency_symbol: str = "₹") -> str:
    """Two-decimal display string. Stored precision is left untouched."""
    return f"{currency_symbol}{value:.2f}"
