"""
In-Memory Storage Implementation

Backs the same interfaces as Google Sheets with plain Python lists.
Used by the test suite and when no spreadsheet is configured.

Entries are kept in insertion order, which is creation order, so
listing newest-first is a reversal rather than a timestamp sort.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from payment_tracker.models.audit import AuditEvent
from payment_tracker.models.entry import Entry, NewEntry
from payment_tracker.services.storage.interface import (
    AuditStorageInterface,
    EntryServiceInterface,
    NotFoundError,
    ServiceError,
)


UPDATABLE_FIELDS = {"name", "amount", "status"}


class InMemoryEntryService(EntryServiceInterface):
    """Entries collection held in process memory."""

    def __init__(self, entries: Optional[list[Entry]] = None):
        self._entries: list[Entry] = sorted(
            entries or [], key=lambda e: e.created_at
        )

    def _index_of(self, entry_id: str) -> int:
        for idx, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return idx
        raise NotFoundError(f"Entry not found: {entry_id}")

    async def list_entries(self) -> list[Entry]:
        return list(reversed(self._entries))

    async def create_entry(self, entry: NewEntry) -> Entry:
        created = Entry(
            id=str(uuid4()),
            name=entry.name,
            amount=entry.amount,
            status=entry.status,
            created_at=datetime.now(timezone.utc),
        )
        self._entries.append(created)
        return created

    async def update_entry(self, entry_id: str, fields: dict[str, Any]) -> None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ServiceError(f"Fields cannot be updated: {sorted(unknown)}")

        idx = self._index_of(entry_id)
        current = self._entries[idx]
        try:
            self._entries[idx] = Entry.model_validate(
                {**current.model_dump(), **fields}
            )
        except ValueError as e:
            raise ServiceError(f"Invalid update for {entry_id}: {e}") from e

    async def delete_entry(self, entry_id: str) -> None:
        idx = self._index_of(entry_id)
        del self._entries[idx]


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log held in process memory."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        return [
            event
            for event in self._events
            if event.entity_type == entity_type and event.entity_id == entity_id
        ]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
