"""
Core Data Models for the Payment Tracker

These models define the schemas for every entry flowing between the
remote store, the Entry Store and whatever renders it.

DESIGN DECISION: Entries are immutable once built. A status change
produces a new Entry object in the same position, so a snapshot handed
to the presentation layer can never be mutated behind its back.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# Raw amounts as they arrive from a form field or caller
AmountInput = Union[str, int, float, Decimal]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class EntryStatus(str, Enum):
    """
    Classification of an entry.

    Transitions exposed by the store: PENDING -> PAID only.
    DEBIT entries have no settle action.
    """
    PENDING = "pending"  # Owed to the tracker's owner, unpaid
    PAID = "paid"        # Settled
    DEBIT = "debit"      # Owed by the tracker's owner to someone else


class ErrorKind(str, Enum):
    """Which store operation produced the last user-visible error."""
    LOAD = "load"
    SAVE = "save"
    UPDATE = "update"
    DELETE = "delete"
    RESTORE = "restore"


# =============================================================================
# ENTRY MODELS
# =============================================================================

class NewEntry(BaseModel):
    """
    Validated input for creating an entry.

    Anything that fails here never reaches the remote store.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Person/debtor name"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount, kept at full precision"
    )
    status: EntryStatus = Field(
        default=EntryStatus.PENDING,
        description="Status the entry is created with"
    )


class Entry(BaseModel):
    """
    An entry as persisted by the remote store.

    `id` and `created_at` are always assigned by the store, never locally.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque identifier assigned by the remote store"
    )
    name: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)
    status: EntryStatus
    created_at: datetime = Field(
        ...,
        description="Creation timestamp (UTC), used only for ordering"
    )

    @field_validator('created_at')
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive timestamps (older sheet rows) are read as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def with_status(self, status: EntryStatus) -> "Entry":
        return self.model_copy(update={"status": status})

    def to_new_entry(self) -> NewEntry:
        """Fields needed to re-create this entry under a fresh identity."""
        return NewEntry(name=self.name, amount=self.amount, status=self.status)

    def to_log_dict(self) -> dict:
        return {
            "entry_id": self.id,
            "name": self.name,
            "amount": str(self.amount),
            "status": self.status.value,
        }


# =============================================================================
# PRESENTATION BOUNDARY
# =============================================================================

class StatusView(BaseModel):
    """Entries of one status plus their total, in collection order."""
    model_config = ConfigDict(frozen=True)

    status: EntryStatus
    entries: tuple[Entry, ...] = ()
    total: Decimal = Decimal("0")

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries


class StoreSnapshot(BaseModel):
    """
    Read-only state of the Entry Store.

    Enough to drive any rendering layer: the collection, the selected
    tab with its projection, the delete confirmation target, the undo
    slot and the last error notice. The store fills `view` from the same
    entries it snapshots.
    """
    model_config = ConfigDict(frozen=True)

    entries: tuple[Entry, ...] = ()
    selected_status: EntryStatus = EntryStatus.PENDING
    view: StatusView = Field(
        default_factory=lambda: StatusView(status=EntryStatus.PENDING)
    )
    confirmation_target: Optional[Entry] = None
    undo_buffer: Optional[Entry] = None
    loading: bool = False
    last_error: Optional[ErrorKind] = None
    error_message: Optional[str] = None

    @property
    def awaiting_confirmation(self) -> bool:
        return self.confirmation_target is not None

    @property
    def undo_available(self) -> bool:
        return self.undo_buffer is not None
