"""
Audit Logger

DESIGN DECISION: Every change to the entries collection is logged.
This provides:
1. Traceability of who-owes-what over time
2. A record of deleted entries after their undo window closes
3. Debugging capability when the remote store misbehaves

The audit logger:
- Is async so persistence happens alongside the store's remote calls
- Gracefully handles failures (a broken audit sheet never breaks the tracker)
- Always writes a structured local log line, persisted or not
"""

from typing import Optional

import structlog

from payment_tracker.models.audit import AuditEvent, AuditEventBuilder
from payment_tracker.models.entry import Entry, ErrorKind
from payment_tracker.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def get_logger(name: Optional[str] = None):
    """Structured logger for modules that log locally without auditing."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when configured (for persistence)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = get_logger("payment_tracker.audit")

    def log_local(self, event: AuditEvent) -> None:
        """Write the event to the local structured log only."""
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        self.log_local(event)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def _build(self, builder, **kwargs) -> Optional[AuditEvent]:
        """Build an event; a bad event is logged and dropped, never raised."""
        try:
            return builder(**kwargs)
        except Exception as e:
            self._logger.error(
                "audit_event_invalid",
                builder=builder.__name__,
                error=str(e),
            )
            return None

    async def _log_built(self, builder, **kwargs) -> bool:
        event = self._build(builder, **kwargs)
        if event is None:
            return False
        return await self.log(event)

    async def log_entries_loaded(self, count: int) -> None:
        await self._log_built(AuditEventBuilder.entries_loaded, count=count)

    async def log_entry_created(self, entry: Entry) -> None:
        """Log a new entry."""
        await self._log_built(
            AuditEventBuilder.entry_created,
            entry_id=entry.id,
            name=entry.name,
            amount=str(entry.amount),
            status=entry.status.value,
        )

    async def log_entry_marked_paid(self, entry: Entry) -> None:
        """Log a pending -> paid transition. `entry` is the pre-update state."""
        await self._log_built(
            AuditEventBuilder.entry_marked_paid,
            entry_id=entry.id,
            previous_status=entry.status.value,
        )

    async def log_entry_deleted(self, entry: Entry, undo_window: float) -> None:
        """Log a confirmed delete."""
        await self._log_built(
            AuditEventBuilder.entry_deleted,
            entry_id=entry.id,
            name=entry.name,
            amount=str(entry.amount),
            status=entry.status.value,
            undo_window=undo_window,
        )

    async def log_entry_restored(self, restored: Entry, original: Entry) -> None:
        """Log an undo."""
        await self._log_built(
            AuditEventBuilder.entry_restored,
            entry_id=restored.id,
            original_id=original.id,
        )

    async def log_operation_failed(
        self,
        error_kind: ErrorKind,
        error_message: str,
        entry_id: Optional[str] = None,
    ) -> None:
        """Log a failed remote operation."""
        await self._log_built(
            AuditEventBuilder.operation_failed,
            error_kind=error_kind.value,
            error_message=error_message,
            entry_id=entry_id,
        )

    def log_delete_requested(self, entry_id: str) -> None:
        event = self._build(AuditEventBuilder.delete_requested, entry_id=entry_id)
        if event is not None:
            self.log_local(event)

    def log_delete_cancelled(self, entry_id: str) -> None:
        event = self._build(AuditEventBuilder.delete_cancelled, entry_id=entry_id)
        if event is not None:
            self.log_local(event)

    def log_undo_expired(self, entry: Entry) -> None:
        """Runs from the undo timer callback, so it cannot await storage."""
        event = self._build(AuditEventBuilder.undo_expired, entry_id=entry.id)
        if event is not None:
            self.log_local(event)
