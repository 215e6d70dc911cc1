"""
Entry Store

The single source of truth for the working set of entries, and the only
place that sequences mutations against the remote data service.

DESIGN DECISION: Updates are pessimistic. Every local mutation is
applied only after the matching remote call succeeds, so the local list
is always a (possibly stale) copy of the remote collection and never
ahead of it.

Two small state machines live next to the collection:
- Delete confirmation: idle -> awaiting_confirmation -> idle
- Undo slot: empty -> armed -> empty (by undo, expiry or overwrite)

All remote-facing operations run on one asyncio event loop and are
queued behind a lock, so overlapping user actions run in order instead
of interleaving at their await points.
"""

import asyncio
from typing import Optional, Union

from pydantic import ValidationError

from payment_tracker.audit import AuditLogger, get_logger
from payment_tracker.models.entry import (
    AmountInput,
    Entry,
    EntryStatus,
    ErrorKind,
    NewEntry,
    StatusView,
    StoreSnapshot,
)
from payment_tracker.services.storage import EntryServiceInterface, ServiceError
from payment_tracker.views import project


DEFAULT_UNDO_WINDOW_SECONDS = 5.0


class EntryStoreError(Exception):
    """
    Base exception for failed store operations.

    Always wraps the ServiceError that caused it. None of these are
    retried; the user re-initiates the action.
    """

    kind: ErrorKind
    user_message: str

    def __init__(self, cause: ServiceError):
        self.cause = cause
        super().__init__(f"{self.user_message} ({cause})")


class LoadError(EntryStoreError):
    kind = ErrorKind.LOAD
    user_message = "Failed to load entries. Please check your connection."


class SaveError(EntryStoreError):
    kind = ErrorKind.SAVE
    user_message = "Failed to save entry. Please try again."


class UpdateError(EntryStoreError):
    kind = ErrorKind.UPDATE
    user_message = "Failed to update entry. Please try again."


class DeleteError(EntryStoreError):
    kind = ErrorKind.DELETE
    user_message = "Failed to delete entry. Please try again."


class RestoreError(EntryStoreError):
    kind = ErrorKind.RESTORE
    user_message = "Failed to restore entry. Please try again."


class EntryStore:
    """
    In-memory mirror of the remote entries collection.

    Usage:
        async with EntryStore(service) as store:
            await store.load()
            entry = await store.add("Asha", "150.00")
            await store.mark_paid(entry.id)
    """

    def __init__(
        self,
        service: EntryServiceInterface,
        audit_logger: Optional[AuditLogger] = None,
        undo_window: float = DEFAULT_UNDO_WINDOW_SECONDS,
        selected_status: Union[EntryStatus, str] = EntryStatus.PENDING,
    ):
        """
        Args:
            service: Remote data service holding the entries collection
            audit_logger: Where store events go. Local-only if None.
            undo_window: Seconds a deleted entry stays restorable
            selected_status: Tab selected at start; new entries default to it
        """
        if undo_window <= 0:
            raise ValueError("undo_window must be positive")

        self._service = service
        self._audit = audit_logger or AuditLogger()
        self._logger = get_logger(__name__)
        self._undo_window = undo_window

        self._entries: list[Entry] = []
        self._selected_status = EntryStatus(selected_status)
        self._confirmation_id: Optional[str] = None
        self._undo_buffer: Optional[Entry] = None
        self._undo_handle: Optional[asyncio.TimerHandle] = None
        self._loading = False
        self._last_error: Optional[ErrorKind] = None
        self._error_message: Optional[str] = None

        self._lock = asyncio.Lock()
        self._closed = False

    # -------------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------------

    @property
    def entries(self) -> tuple[Entry, ...]:
        return tuple(self._entries)

    @property
    def selected_status(self) -> EntryStatus:
        return self._selected_status

    @property
    def confirmation_target(self) -> Optional[Entry]:
        """Current version of the staged entry, if it is still present."""
        if self._confirmation_id is None:
            return None
        return self._find(self._confirmation_id)

    @property
    def undo_buffer(self) -> Optional[Entry]:
        return self._undo_buffer

    @property
    def undo_window(self) -> float:
        return self._undo_window

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def last_error(self) -> Optional[ErrorKind]:
        return self._last_error

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def closed(self) -> bool:
        return self._closed

    def snapshot(self) -> StoreSnapshot:
        """Immutable copy of everything a renderer needs."""
        return StoreSnapshot(
            entries=tuple(self._entries),
            selected_status=self._selected_status,
            view=self.view(),
            confirmation_target=self.confirmation_target,
            undo_buffer=self._undo_buffer,
            loading=self._loading,
            last_error=self._last_error,
            error_message=self._error_message,
        )

    def view(self, status: Union[EntryStatus, str, None] = None) -> StatusView:
        """Entries and total for a status (the selected one by default)."""
        return project(self._entries, status or self._selected_status)

    # -------------------------------------------------------------------------
    # Local-only actions
    # -------------------------------------------------------------------------

    def select_status(self, status: Union[EntryStatus, str]) -> None:
        self._selected_status = EntryStatus(status)

    def dismiss_error(self) -> None:
        self._last_error = None
        self._error_message = None

    def request_delete(self, entry_id: str) -> Optional[Entry]:
        """
        Stage an entry for deletion pending confirmation.

        Nothing is sent to the remote store yet. Only the id is staged;
        confirm_delete acts on whatever version of the entry is current
        by then. Unknown ids are ignored.
        """
        entry = self._find(entry_id)
        if entry is None:
            return None

        self._confirmation_id = entry.id
        self._audit.log_delete_requested(entry.id)
        return entry

    def cancel_delete(self) -> None:
        target_id = self._confirmation_id
        self._confirmation_id = None
        if target_id is not None:
            self._audit.log_delete_cancelled(target_id)

    # -------------------------------------------------------------------------
    # Remote-facing operations
    # -------------------------------------------------------------------------

    async def load(self) -> list[Entry]:
        """
        Replace the local collection with the remote one, newest first.

        Raises:
            LoadError: The previous collection is kept as it was
        """
        self._ensure_open()
        async with self._lock:
            self._loading = True
            self._clear_error()
            try:
                entries = await self._service.list_entries()
            except ServiceError as e:
                error = await self._failure(LoadError, e)
                raise error from e
            finally:
                self._loading = False

            self._entries = list(entries)
            await self._audit.log_entries_loaded(len(self._entries))
            return list(self._entries)

    async def add(
        self,
        name: str,
        amount: AmountInput,
        status: Union[EntryStatus, str, None] = None,
    ) -> Optional[Entry]:
        """
        Create an entry remotely, then prepend it locally.

        An empty name or a non-numeric/negative amount makes this a no-op:
        nothing is sent and no error is recorded.

        Args:
            status: Defaults to the currently selected status

        Returns:
            The stored entry, or None if the input was rejected

        Raises:
            SaveError: The local collection is left unchanged
        """
        self._ensure_open()
        status = EntryStatus(status) if status is not None else self._selected_status
        try:
            draft = NewEntry(name=name, amount=amount, status=status)
        except ValidationError as e:
            self._logger.debug(
                "add_ignored_invalid_input",
                errors=[err["loc"] for err in e.errors()],
            )
            return None

        async with self._lock:
            self._clear_error()
            try:
                created = await self._service.create_entry(draft)
            except ServiceError as e:
                error = await self._failure(SaveError, e)
                raise error from e

            self._entries.insert(0, created)
            await self._audit.log_entry_created(created)
            return created

    async def mark_paid(self, entry_id: str) -> Optional[Entry]:
        """
        Set an entry's status to paid, remotely then locally.

        Re-issues the update for entries that are already paid. Unknown
        ids and debit entries are ignored.

        Raises:
            UpdateError: The local entry keeps its old status
        """
        self._ensure_open()
        async with self._lock:
            entry = self._find(entry_id)
            if entry is None:
                return None
            if entry.status == EntryStatus.DEBIT:
                self._logger.debug("mark_paid_ignored_debit", entry_id=entry_id)
                return None

            self._clear_error()
            try:
                await self._service.update_entry(
                    entry_id, {"status": EntryStatus.PAID.value}
                )
            except ServiceError as e:
                error = await self._failure(UpdateError, e, entry_id=entry_id)
                raise error from e

            updated = entry.with_status(EntryStatus.PAID)
            idx = self._index_of(entry_id)
            if idx is not None:
                self._entries[idx] = updated
            await self._audit.log_entry_marked_paid(entry)
            return updated

    async def confirm_delete(self) -> Optional[Entry]:
        """
        Delete the staged entry remotely, then locally, and arm undo.

        The deleted entry takes over the undo slot, replacing whatever was
        there, for `undo_window` seconds. No-op if nothing is staged, or
        if the staged entry has left the collection since it was staged.

        Raises:
            DeleteError: The confirmation is cleared but the entry stays
        """
        self._ensure_open()
        async with self._lock:
            target_id = self._confirmation_id
            if target_id is None:
                return None

            # Re-read so the undo slot holds what is actually deleted
            target = self._find(target_id)
            if target is None:
                self._clear_confirmation(target_id)
                self._logger.debug("confirm_delete_target_gone", entry_id=target_id)
                return None

            self._clear_error()
            try:
                await self._service.delete_entry(target.id)
            except ServiceError as e:
                self._clear_confirmation(target.id)
                error = await self._failure(DeleteError, e, entry_id=target.id)
                raise error from e

            self._entries = [e for e in self._entries if e.id != target.id]
            self._clear_confirmation(target.id)
            self._arm_undo(target)
            await self._audit.log_entry_deleted(target, self._undo_window)
            return target

    async def undo_delete(self) -> Optional[Entry]:
        """
        Re-create the entry held in the undo slot.

        The restored entry gets a new id and created_at from the remote
        store. No-op once the slot is empty.

        Raises:
            RestoreError: Slot and timer are left as they were; the
                window is not extended
        """
        self._ensure_open()
        async with self._lock:
            buffered = self._undo_buffer
            if buffered is None:
                return None

            self._clear_error()
            try:
                restored = await self._service.create_entry(buffered.to_new_entry())
            except ServiceError as e:
                error = await self._failure(RestoreError, e, entry_id=buffered.id)
                raise error from e

            self._entries.insert(0, restored)
            if self._undo_buffer is buffered:
                self._cancel_undo_timer()
                self._undo_buffer = None
            await self._audit.log_entry_restored(restored, buffered)
            return restored

    # -------------------------------------------------------------------------
    # Lifetime
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Cancel the undo timer and refuse further remote operations."""
        self._cancel_undo_timer()
        self._undo_buffer = None
        self._confirmation_id = None
        self._closed = True

    async def __aenter__(self) -> "EntryStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("EntryStore is closed")

    def _find(self, entry_id: str) -> Optional[Entry]:
        idx = self._index_of(entry_id)
        return self._entries[idx] if idx is not None else None

    def _index_of(self, entry_id: str) -> Optional[int]:
        for idx, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return idx
        return None

    def _clear_error(self) -> None:
        self._last_error = None
        self._error_message = None

    def _clear_confirmation(self, entry_id: str) -> None:
        # A different entry may have been staged while the delete was in flight
        if self._confirmation_id == entry_id:
            self._confirmation_id = None

    async def _failure(
        self,
        error_cls: type[EntryStoreError],
        cause: ServiceError,
        entry_id: Optional[str] = None,
    ) -> EntryStoreError:
        """Record a failed remote call as the user-visible error."""
        error = error_cls(cause)
        self._last_error = error.kind
        self._error_message = error.user_message
        await self._audit.log_operation_failed(
            error.kind, str(cause), entry_id=entry_id
        )
        return error

    def _arm_undo(self, entry: Entry) -> None:
        self._cancel_undo_timer()
        if self._closed:
            self._undo_buffer = None
            return

        self._undo_buffer = entry
        loop = asyncio.get_running_loop()
        self._undo_handle = loop.call_later(
            self._undo_window, self._expire_undo, entry
        )

    def _cancel_undo_timer(self) -> None:
        if self._undo_handle is not None:
            self._undo_handle.cancel()
            self._undo_handle = None

    def _expire_undo(self, entry: Entry) -> None:
        if self._undo_buffer is not entry:
            return
        self._undo_buffer = None
        self._undo_handle = None
        self._audit.log_undo_expired(entry)
