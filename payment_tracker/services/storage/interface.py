"""
Abstract Remote Data Service Interface

DESIGN DECISION: The Entry Store talks to the backing store only through
this interface. This allows us to:
1. Swap Google Sheets for a hosted database later
2. Use in-memory storage for testing
3. Keep the store's sequencing rules independent of any backend

The contract is deliberately plain CRUD over a single "entries"
collection. The backend assigns identity and creation time.
"""

from abc import ABC, abstractmethod
from typing import Any

from payment_tracker.models.audit import AuditEvent
from payment_tracker.models.entry import Entry, NewEntry


class EntryServiceInterface(ABC):
    """
    Abstract interface for the remote entries collection.

    Any backend (Google Sheets, a hosted Postgres, etc.)
    must implement these methods. Every failure surfaces as ServiceError.
    """

    @abstractmethod
    async def list_entries(self) -> list[Entry]:
        """
        Fetch every entry.

        Returns:
            All entries ordered by created_at, newest first

        Raises:
            ServiceError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def create_entry(self, entry: NewEntry) -> Entry:
        """
        Persist a new entry.

        Args:
            entry: Validated name/amount/status

        Returns:
            The stored entry with its assigned id and created_at

        Raises:
            ServiceError: If the write fails
        """
        pass

    @abstractmethod
    async def update_entry(self, entry_id: str, fields: dict[str, Any]) -> None:
        """
        Apply a partial update to one entry.

        Args:
            entry_id: The entry's identifier
            fields: Field name to new value (only "status" is used today)

        Raises:
            NotFoundError: If no entry has this id
            ServiceError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_entry(self, entry_id: str) -> None:
        """
        Remove an entry permanently.

        Raises:
            NotFoundError: If no entry has this id
            ServiceError: If the delete fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity, in chronological order.
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class ServiceError(Exception):
    """Base exception for remote data service operations."""
    pass


class NotFoundError(ServiceError):
    """Entity not found in the remote collection."""
    pass


class ConnectionError(ServiceError):
    """Could not connect to the storage backend."""
    pass
