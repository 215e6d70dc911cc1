"""
Shared test fixtures.

Every store test runs against the in-memory service, so no test ever
touches a real spreadsheet. Remote failures are simulated by replacing
a service method with an AsyncMock that raises ServiceError.
"""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from payment_tracker.audit import AuditLogger
from payment_tracker.models.entry import Entry, EntryStatus
from payment_tracker.services.storage import (
    InMemoryAuditStorage,
    InMemoryEntryService,
)
from payment_tracker.store import EntryStore


# Long enough that no test sees an accidental expiry
UNDO_WINDOW = 5.0
# Short enough to wait out inside a test
SHORT_UNDO_WINDOW = 0.05


def make_entry(
    entry_id: str,
    name: str,
    amount: str,
    status: EntryStatus,
    minutes_ago: int = 0,
) -> Entry:
    return Entry(
        id=entry_id,
        name=name,
        amount=Decimal(amount),
        status=status,
        created_at=datetime(2024, 12, 1, 12, 0) - timedelta(minutes=minutes_ago),
    )


@pytest.fixture
def seed_entries():
    """Three entries, one per status, oldest last."""
    return [
        make_entry("e-1", "Asha", "150.00", EntryStatus.PENDING, minutes_ago=1),
        make_entry("e-2", "Ravi", "99.995", EntryStatus.PAID, minutes_ago=2),
        make_entry("e-3", "Landlord", "12000", EntryStatus.DEBIT, minutes_ago=3),
    ]


@pytest.fixture
def service(seed_entries):
    return InMemoryEntryService(seed_entries)


@pytest.fixture
def empty_service():
    return InMemoryEntryService()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def store(service, audit_storage):
    entry_store = EntryStore(
        service,
        audit_logger=AuditLogger(audit_storage),
        undo_window=UNDO_WINDOW,
    )
    yield entry_store
    entry_store.close()


@pytest.fixture
def short_store(service, audit_storage):
    entry_store = EntryStore(
        service,
        audit_logger=AuditLogger(audit_storage),
        undo_window=SHORT_UNDO_WINDOW,
    )
    yield entry_store
    entry_store.close()


@pytest.fixture
def entry_factory():
    return make_entry
