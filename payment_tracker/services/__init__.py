"""Services package."""

from payment_tracker.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    EntryServiceInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsEntryService,
    InMemoryAuditStorage,
    InMemoryEntryService,
    NotFoundError,
    ServiceError,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "EntryServiceInterface",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsEntryService",
    "InMemoryAuditStorage",
    "InMemoryEntryService",
    "NotFoundError",
    "ServiceError",
]
