"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the default remote store because:
1. The owner can read and fix entries directly in the sheet
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (a personal tracker is fine)
- No server-side ordering, so we sort by created_at in Python
- Every remote failure is reported once; nothing here retries

The implementation follows the abstract interface, so the Entry Store
does not know or care which backend it is talking to.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

import gspread
from google.oauth2.service_account import Credentials

from payment_tracker.config import GoogleSheetsSettings, get_settings
from payment_tracker.models.audit import AuditEvent, AuditEventType, AuditSeverity
from payment_tracker.models.entry import Entry, EntryStatus, NewEntry
from payment_tracker.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    EntryServiceInterface,
    NotFoundError,
    ServiceError,
)


# Column mappings for the entries sheet
ENTRY_COLUMNS = [
    "id",
    "created_at",
    "name",
    "amount",
    "status",
]

# Column mappings for the audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "description",
    "details_json",
    "error_kind",
    "error_message",
    "is_user_action",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and worksheet lookup.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError as e:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}") from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound as e:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_entries_sheet(self) -> gspread.Worksheet:
        """Get or create the entries worksheet."""
        return self._get_or_create_sheet(
            self._settings.entries_sheet_name, ENTRY_COLUMNS, rows=1000
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


class GoogleSheetsEntryService(EntryServiceInterface):
    """
    Google Sheets implementation of the entries collection.

    One entry per row. Amounts are written as the exact decimal string
    so no precision is lost to spreadsheet number formatting.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _entry_to_row(self, entry: Entry) -> list:
        """Convert an Entry to a spreadsheet row."""
        return [
            entry.id,
            entry.created_at.isoformat(),
            entry.name,
            str(entry.amount),
            entry.status.value,
        ]

    def _row_to_entry(self, row: list) -> Entry:
        """Convert a spreadsheet row to an Entry."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return Entry(
            id=safe_get(0),
            created_at=datetime.fromisoformat(safe_get(1)),
            name=safe_get(2),
            amount=Decimal(safe_get(3)),
            status=EntryStatus(safe_get(4)),
        )

    def _find_row(self, sheet: gspread.Worksheet, entry_id: str) -> int:
        """1-based sheet row number for an entry id (row 1 is the header)."""
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == entry_id:
                return idx
        raise NotFoundError(f"Entry not found: {entry_id}")

    async def list_entries(self) -> list[Entry]:
        """List all entries, newest first."""
        try:
            sheet = self._client.get_entries_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except ServiceError:
            raise
        except Exception as e:
            raise ServiceError(f"Failed to list entries: {e}") from e

        entries = []
        for row in all_rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                entries.append(self._row_to_entry(row))
            except Exception:
                continue  # Skip malformed rows

        entries.sort(key=lambda e: e.created_at, reverse=True)
        return entries

    async def create_entry(self, entry: NewEntry) -> Entry:
        """Append a new entry row."""
        created = Entry(
            id=str(uuid4()),
            created_at=datetime.now(timezone.utc),
            name=entry.name,
            amount=entry.amount,
            status=entry.status,
        )
        try:
            sheet = self._client.get_entries_sheet()
            sheet.append_row(self._entry_to_row(created), value_input_option="RAW")
        except ServiceError:
            raise
        except Exception as e:
            raise ServiceError(f"Failed to save entry: {e}") from e
        return created

    async def update_entry(self, entry_id: str, fields: dict[str, Any]) -> None:
        """Overwrite the given cells of one entry row."""
        unknown = set(fields) - set(ENTRY_COLUMNS[2:])
        if unknown:
            raise ServiceError(f"Fields cannot be updated: {sorted(unknown)}")

        try:
            sheet = self._client.get_entries_sheet()
            row_idx = self._find_row(sheet, entry_id)
            for field, value in fields.items():
                if isinstance(value, EntryStatus):
                    value = value.value
                col_idx = ENTRY_COLUMNS.index(field) + 1
                sheet.update_cell(row_idx, col_idx, str(value))
        except ServiceError:
            raise
        except Exception as e:
            raise ServiceError(f"Failed to update entry: {e}") from e

    async def delete_entry(self, entry_id: str) -> None:
        """Delete an entry row."""
        try:
            sheet = self._client.get_entries_sheet()
            sheet.delete_rows(self._find_row(sheet, entry_id))
        except ServiceError:
            raise
        except Exception as e:
            raise ServiceError(f"Failed to delete entry: {e}") from e


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            entity_id=safe_get(5) or None,
            description=safe_get(6),
            details=json.loads(safe_get(7)) if safe_get(7) else {},
            error_kind=safe_get(8) or None,
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    def _all_events(self) -> list[AuditEvent]:
        sheet = self._client.get_audit_sheet()
        events = []
        for row in sheet.get_all_values()[1:]:
            if not row or not row[0]:
                continue
            try:
                events.append(self._row_to_event(row))
            except Exception:
                continue
        return events

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise ServiceError(f"Failed to append audit event: {e}") from e

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """Get all events for an entity, oldest first."""
        try:
            events = [
                e for e in self._all_events()
                if e.entity_type == entity_type and e.entity_id == entity_id
            ]
        except Exception as e:
            raise ServiceError(f"Failed to get audit events: {e}") from e
        return sorted(events, key=lambda e: e.timestamp)

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Get the most recent audit events."""
        try:
            events = self._all_events()
        except Exception as e:
            raise ServiceError(f"Failed to get audit events: {e}") from e
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
