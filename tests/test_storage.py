"""
Tests for the storage implementations.

The Google Sheets service runs against a fake worksheet so no test ever
reaches Google.
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from payment_tracker.models.audit import AuditEventBuilder, AuditEventType
from payment_tracker.models.entry import EntryStatus, NewEntry
from payment_tracker.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsEntryService,
    InMemoryAuditStorage,
    InMemoryEntryService,
    NotFoundError,
    ServiceError,
)
from payment_tracker.services.storage.google_sheets import (
    AUDIT_COLUMNS,
    ENTRY_COLUMNS,
)


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the storage code."""

    def __init__(self, header: list[str]):
        self.rows = [list(header)]

    def get_all_values(self) -> list[list[str]]:
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self.rows.append([str(value) for value in row])

    def update_cell(self, row: int, col: int, value):
        self.rows[row - 1][col - 1] = value

    def delete_rows(self, index: int):
        del self.rows[index - 1]


@pytest.fixture
def entries_sheet():
    return FakeWorksheet(ENTRY_COLUMNS)


@pytest.fixture
def sheets_client(entries_sheet):
    client = MagicMock()
    client.get_entries_sheet.return_value = entries_sheet
    client.get_audit_sheet.return_value = FakeWorksheet(AUDIT_COLUMNS)
    return client


@pytest.fixture
def sheets_service(sheets_client):
    return GoogleSheetsEntryService(sheets_client)


class TestInMemoryEntryService:
    """Tests for InMemoryEntryService."""

    @pytest.mark.asyncio
    async def test_create_assigns_identity(self, empty_service):
        created = await empty_service.create_entry(NewEntry(name="Asha", amount="1"))
        assert created.id
        assert created.created_at is not None

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, empty_service):
        first = await empty_service.create_entry(NewEntry(name="Asha", amount="1"))
        second = await empty_service.create_entry(NewEntry(name="Asha", amount="1"))
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_list_is_newest_first(self, service):
        created = await service.create_entry(NewEntry(name="Meera", amount="2"))
        ids = [e.id for e in await service.list_entries()]
        assert ids == [created.id, "e-1", "e-2", "e-3"]

    @pytest.mark.asyncio
    async def test_update_status(self, service):
        await service.update_entry("e-1", {"status": "paid"})
        entries = {e.id: e for e in await service.list_entries()}
        assert entries["e-1"].status == EntryStatus.PAID

    @pytest.mark.asyncio
    async def test_update_missing_entry(self, service):
        with pytest.raises(NotFoundError):
            await service.update_entry("missing", {"status": "paid"})

    @pytest.mark.asyncio
    async def test_update_rejects_identity_fields(self, service):
        with pytest.raises(ServiceError):
            await service.update_entry("e-1", {"id": "other"})

    @pytest.mark.asyncio
    async def test_update_rejects_invalid_value(self, service):
        with pytest.raises(ServiceError):
            await service.update_entry("e-1", {"status": "settled"})

    @pytest.mark.asyncio
    async def test_delete(self, service):
        await service.delete_entry("e-2")
        assert [e.id for e in await service.list_entries()] == ["e-1", "e-3"]

    @pytest.mark.asyncio
    async def test_delete_missing_entry(self, service):
        with pytest.raises(NotFoundError):
            await service.delete_entry("missing")


class TestGoogleSheetsEntryService:
    """Tests for GoogleSheetsEntryService."""

    @pytest.mark.asyncio
    async def test_create_appends_exact_amount(self, sheets_service, entries_sheet):
        created = await sheets_service.create_entry(
            NewEntry(name="Asha", amount="150.005", status=EntryStatus.DEBIT)
        )
        row = entries_sheet.rows[1]
        assert row[0] == created.id
        assert row[2:] == ["Asha", "150.005", "debit"]

    @pytest.mark.asyncio
    async def test_list_sorts_newest_first(self, sheets_service, entries_sheet):
        entries_sheet.rows.extend([
            ["old", "2024-12-01T10:00:00", "Asha", "10", "pending"],
            ["new", "2024-12-01T11:00:00", "Ravi", "20.50", "paid"],
        ])
        entries = await sheets_service.list_entries()
        assert [e.id for e in entries] == ["new", "old"]
        assert entries[0].amount == Decimal("20.50")

    @pytest.mark.asyncio
    async def test_list_skips_malformed_rows(self, sheets_service, entries_sheet):
        entries_sheet.rows.extend([
            ["ok", "2024-12-01T10:00:00", "Asha", "10", "pending"],
            ["bad", "not-a-date", "Ravi", "20", "paid"],
            ["", "", "", "", ""],
            ["neg", "2024-12-01T10:00:00", "Kiran", "-5", "paid"],
        ])
        entries = await sheets_service.list_entries()
        assert [e.id for e in entries] == ["ok"]

    @pytest.mark.asyncio
    async def test_old_naive_rows_sort_with_new_rows(self, sheets_service, entries_sheet):
        entries_sheet.rows.append(
            ["old", "2024-12-01T10:00:00", "Asha", "10", "pending"]
        )
        created = await sheets_service.create_entry(NewEntry(name="Ravi", amount="2"))
        entries = await sheets_service.list_entries()
        assert [e.id for e in entries] == [created.id, "old"]
        assert all(e.created_at.tzinfo is not None for e in entries)

    @pytest.mark.asyncio
    async def test_update_writes_status_cell(self, sheets_service, entries_sheet):
        created = await sheets_service.create_entry(NewEntry(name="Asha", amount="1"))
        await sheets_service.update_entry(created.id, {"status": EntryStatus.PAID})
        assert entries_sheet.rows[1][4] == "paid"

    @pytest.mark.asyncio
    async def test_update_missing_entry(self, sheets_service):
        with pytest.raises(NotFoundError):
            await sheets_service.update_entry("missing", {"status": "paid"})

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_fields(self, sheets_service):
        with pytest.raises(ServiceError):
            await sheets_service.update_entry("x", {"created_at": "now"})

    @pytest.mark.asyncio
    async def test_delete_removes_row(self, sheets_service, entries_sheet):
        first = await sheets_service.create_entry(NewEntry(name="Asha", amount="1"))
        second = await sheets_service.create_entry(NewEntry(name="Ravi", amount="2"))
        await sheets_service.delete_entry(first.id)
        assert [row[0] for row in entries_sheet.rows[1:]] == [second.id]

    @pytest.mark.asyncio
    async def test_delete_missing_entry(self, sheets_service):
        with pytest.raises(NotFoundError):
            await sheets_service.delete_entry("missing")

    @pytest.mark.asyncio
    async def test_api_errors_become_service_errors(self, sheets_client, sheets_service):
        sheets_client.get_entries_sheet.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(ServiceError, match="quota exceeded"):
            await sheets_service.list_entries()
        with pytest.raises(ServiceError):
            await sheets_service.create_entry(NewEntry(name="Asha", amount="1"))
        with pytest.raises(ServiceError):
            await sheets_service.delete_entry("x")


class TestAuditStorage:
    """Tests for both audit storage implementations."""

    @pytest.mark.asyncio
    async def test_in_memory_queries(self):
        storage = InMemoryAuditStorage()
        await storage.append_event(AuditEventBuilder.entry_marked_paid("a", "pending"))
        await storage.append_event(AuditEventBuilder.undo_expired("b"))

        recent = await storage.get_recent_events(limit=1)
        assert [e.entity_id for e in recent] == ["b"]
        by_entity = await storage.get_events_by_entity("entry", "a")
        assert [e.event_type for e in by_entity] == [AuditEventType.ENTRY_MARKED_PAID]

    @pytest.mark.asyncio
    async def test_sheets_round_trip(self, sheets_client):
        storage = GoogleSheetsAuditStorage(sheets_client)
        event = AuditEventBuilder.operation_failed("delete", "denied", entry_id="a")
        assert await storage.append_event(event) is True

        events = await storage.get_events_by_entity("entry", "a")
        assert len(events) == 1
        assert events[0].event_id == event.event_id
        assert events[0].error_kind == "delete"
        assert events[0].is_user_action is False
