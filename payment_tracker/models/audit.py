"""
Audit Models for the Payment Tracker

Every change the Entry Store makes to the remote collection is recorded:
1. Traceability of who-owes-what changes
2. Debugging information when a remote call fails
3. A record of deleted entries that outlives the undo window

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Collection
    ENTRIES_LOADED = "entries_loaded"

    # Entry lifecycle
    ENTRY_CREATED = "entry_created"
    ENTRY_MARKED_PAID = "entry_marked_paid"
    DELETE_REQUESTED = "delete_requested"
    DELETE_CANCELLED = "delete_cancelled"
    ENTRY_DELETED = "entry_deleted"
    ENTRY_RESTORED = "entry_restored"
    UNDO_EXPIRED = "undo_expired"

    # Failures
    OPERATION_FAILED = "operation_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Entity ids are the remote store's opaque entry ids, so they are kept
    as strings rather than UUIDs.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - which entry is this about?
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    # Error information (if applicable)
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_kind": self.error_kind,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row for Google Sheets storage.

        Columns: [event_id, timestamp, event_type, severity, entity_type,
        entity_id, description, details_json, error_kind, error_message,
        is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_kind or "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entry_marked_paid(entry_id, "pending")
        event = AuditEventBuilder.operation_failed("save", "timeout")
    """

    @staticmethod
    def entries_loaded(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRIES_LOADED,
            entity_type="collection",
            description=f"Loaded {count} entries",
            details={"count": count},
        )

    @staticmethod
    def entry_created(
        entry_id: str,
        name: str,
        amount: str,
        status: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_CREATED,
            entity_type="entry",
            entity_id=entry_id,
            description=f"Entry created ({status})",
            details={"name": name, "amount": amount, "status": status},
            is_user_action=True,
        )

    @staticmethod
    def entry_marked_paid(entry_id: str, previous_status: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_MARKED_PAID,
            entity_type="entry",
            entity_id=entry_id,
            description="Entry marked as paid",
            details={"previous_status": previous_status},
            is_user_action=True,
        )

    @staticmethod
    def delete_requested(entry_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETE_REQUESTED,
            severity=AuditSeverity.DEBUG,
            entity_type="entry",
            entity_id=entry_id,
            description="Delete awaiting confirmation",
            is_user_action=True,
        )

    @staticmethod
    def delete_cancelled(entry_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETE_CANCELLED,
            severity=AuditSeverity.DEBUG,
            entity_type="entry",
            entity_id=entry_id,
            description="Delete cancelled",
            is_user_action=True,
        )

    @staticmethod
    def entry_deleted(
        entry_id: str,
        name: str,
        amount: str,
        status: str,
        undo_window: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="entry",
            entity_id=entry_id,
            description=f"Entry deleted ({status})",
            details={
                "name": name,
                "amount": amount,
                "status": status,
                "undo_window_seconds": undo_window,
            },
            is_user_action=True,
        )

    @staticmethod
    def entry_restored(entry_id: str, original_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_RESTORED,
            entity_type="entry",
            entity_id=entry_id,
            description="Deleted entry restored under a new id",
            details={"original_id": original_id},
            is_user_action=True,
        )

    @staticmethod
    def undo_expired(entry_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UNDO_EXPIRED,
            entity_type="entry",
            entity_id=entry_id,
            description="Undo window expired",
        )

    @staticmethod
    def operation_failed(
        error_kind: str,
        error_message: str,
        entry_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="entry" if entry_id else None,
            entity_id=entry_id,
            description=f"Remote {error_kind} operation failed",
            error_kind=error_kind,
            error_message=error_message,
        )
