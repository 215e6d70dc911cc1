"""Entry Store package."""

from payment_tracker.store.entry_store import (
    DEFAULT_UNDO_WINDOW_SECONDS,
    DeleteError,
    EntryStore,
    EntryStoreError,
    LoadError,
    RestoreError,
    SaveError,
    UpdateError,
)

__all__ = [
    "DEFAULT_UNDO_WINDOW_SECONDS",
    "DeleteError",
    "EntryStore",
    "EntryStoreError",
    "LoadError",
    "RestoreError",
    "SaveError",
    "UpdateError",
]
