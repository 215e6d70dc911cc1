"""
Data Models Package

All Pydantic models used in the Payment Tracker.
Everything crossing the store or the remote service conforms to these schemas.
"""

from payment_tracker.models.entry import (
    AmountInput,
    Entry,
    EntryStatus,
    ErrorKind,
    NewEntry,
    StatusView,
    StoreSnapshot,
)
from payment_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entry models
    "AmountInput",
    "Entry",
    "EntryStatus",
    "ErrorKind",
    "NewEntry",
    "StatusView",
    "StoreSnapshot",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
