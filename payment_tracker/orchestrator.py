"""
Application Wiring for the Payment Tracker

Ties settings, the remote store, the audit trail and the Entry Store
together so a presentation layer only has to call one factory.

DESIGN DECISION: A missing or broken spreadsheet configuration does not
stop the tracker from starting. It falls back to in-memory storage and
says so loudly in the log.
"""

from typing import Optional

from payment_tracker.audit import AuditLogger, get_logger
from payment_tracker.config import get_settings
from payment_tracker.services.storage import (
    AuditStorageInterface,
    EntryServiceInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsEntryService,
    InMemoryAuditStorage,
    InMemoryEntryService,
)
from payment_tracker.store import EntryStore


logger = get_logger(__name__)


def create_app_components(
    use_storage: bool = True,
) -> tuple[EntryStore, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False for running without a spreadsheet.

    Returns:
        (entry_store, sheets_client)
    """
    tracker_settings = get_settings().tracker

    sheets_client: Optional[GoogleSheetsClient] = None
    entry_service: EntryServiceInterface
    audit_storage: AuditStorageInterface

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            entry_service = GoogleSheetsEntryService(sheets_client)
            audit_storage = GoogleSheetsAuditStorage(sheets_client)
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            entry_service = InMemoryEntryService()
            audit_storage = InMemoryAuditStorage()
    else:
        entry_service = InMemoryEntryService()
        audit_storage = InMemoryAuditStorage()

    store = EntryStore(
        entry_service,
        audit_logger=AuditLogger(audit_storage),
        undo_window=tracker_settings.undo_window_seconds,
        selected_status=tracker_settings.default_status,
    )

    return store, sheets_client
