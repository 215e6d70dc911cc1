"""
Storage Services Package

Provides the remote data service contract and its implementations.
Google Sheets is the hosted backend; the in-memory one backs tests and
unconfigured local runs.
"""

from payment_tracker.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    EntryServiceInterface,
    NotFoundError,
    ServiceError,
)
from payment_tracker.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryEntryService,
)
from payment_tracker.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsEntryService,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "EntryServiceInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "ServiceError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryEntryService",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsEntryService",
]
