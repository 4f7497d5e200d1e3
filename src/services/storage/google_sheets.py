"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the persistent backend because:
1. Users can view their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions: the settings upsert is serialized per process with
  an asyncio.Lock, not across processes
- Limited query capabilities (we filter in Python)

The implementation follows the abstract interface, so we can swap
to PostgreSQL/SQLite later without changing business logic.
"""

import asyncio
import json
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from src.config import get_settings
from src.models.audit import AuditEvent, AuditEventType, AuditSeverity
from src.models.category import Category
from src.models.transaction import Transaction, TransactionType, utc_midnight, utc_now
from src.models.user_settings import Currency, UserSettings
from src.services.storage.interface import (
    AuditStorageInterface,
    CategoryStorageInterface,
    DuplicateError,
    PersistenceError,
    StorageConnectionError,
    TransactionStorageInterface,
    UserSettingsStorageInterface,
)


TRANSACTION_COLUMNS = [
    "id",
    "user_id",
    "created_at",
    "type",
    "description",
    "amount",
    "category",
    "category_icon",
    "date",
]

CATEGORY_COLUMNS = [
    "user_id",
    "name",
    "icon",
    "type",
    "created_at",
]

USER_SETTINGS_COLUMNS = [
    "user_id",
    "currency",
    "updated_at",
]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "user_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


def _cell(row: list, index: int, default: str = "") -> str:
    """Read a cell, tolerating short rows."""
    try:
        return row[index] if row[index] else default
    except IndexError:
        return default


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for the connection.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
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
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(self, title: str, columns: list[str], rows: int = 1000) -> gspread.Worksheet:
        """Get a worksheet, creating it with a header row if missing."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.transactions_sheet_name, TRANSACTION_COLUMNS)

    def get_categories_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.categories_sheet_name, CATEGORY_COLUMNS)

    def get_user_settings_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.user_settings_sheet_name, USER_SETTINGS_COLUMNS)

    def get_audit_sheet(self) -> gspread.Worksheet:
        # More rows for audit log
        return self.get_worksheet(self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000)


class GoogleSheetsTransactionStorage(TransactionStorageInterface):
    """
    Transactions stored one per row.

    Amounts are written as strings to keep Decimal precision.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _transaction_to_row(self, transaction: Transaction) -> list:
        return [
            str(transaction.id),
            transaction.user_id,
            transaction.created_at.isoformat(),
            transaction.type.value,
            transaction.description,
            str(transaction.amount),
            transaction.category,
            transaction.category_icon,
            transaction.date.isoformat(),
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        return Transaction(
            id=UUID(_cell(row, 0)),
            user_id=_cell(row, 1),
            created_at=datetime.fromisoformat(_cell(row, 2)),
            type=TransactionType(_cell(row, 3)),
            description=_cell(row, 4),
            amount=Decimal(_cell(row, 5, "0")),
            category=_cell(row, 6),
            category_icon=_cell(row, 7),
            date=utc_midnight(datetime.fromisoformat(_cell(row, 8))),
        )

    async def insert_transaction(self, transaction: Transaction) -> Transaction:
        try:
            sheet = self._client.get_transactions_sheet()
            sheet.append_row(
                self._transaction_to_row(transaction),
                value_input_option="RAW",
            )
            return transaction
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to save transaction: {e}")

    async def list_transactions(
        self,
        user_id: str,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        type: Optional[TransactionType] = None,
        limit: int = 1000,
        offset: int = 0,
    ) -> list[Transaction]:
        try:
            sheet = self._client.get_transactions_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to list transactions: {e}")

        transactions = []
        for row in all_rows:
            if not row or _cell(row, 1) != user_id:
                continue

            try:
                transaction = self._row_to_transaction(row)
            except Exception:
                continue  # Skip malformed rows

            if date_from and transaction.date < date_from:
                continue
            if date_to and transaction.date > date_to:
                continue
            if type and transaction.type != type:
                continue

            transactions.append(transaction)

        transactions.sort(key=lambda t: (t.date, t.created_at), reverse=True)
        return transactions[offset:offset + limit]


class GoogleSheetsCategoryStorage(CategoryStorageInterface):

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_category(self, row: list) -> Category:
        return Category(
            user_id=_cell(row, 0),
            name=_cell(row, 1),
            icon=_cell(row, 2),
            type=TransactionType(_cell(row, 3)),
            created_at=datetime.fromisoformat(_cell(row, 4)),
        )

    async def list_categories(
        self,
        user_id: str,
        type: Optional[TransactionType] = None,
    ) -> list[Category]:
        try:
            sheet = self._client.get_categories_sheet()
            all_rows = sheet.get_all_values()[1:]
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to list categories: {e}")

        categories = []
        for row in all_rows:
            if not row or _cell(row, 0) != user_id:
                continue
            try:
                category = self._row_to_category(row)
            except Exception:
                continue
            if type and category.type != type:
                continue
            categories.append(category)

        return sorted(categories, key=lambda c: c.name.lower())

    async def get_category(
        self,
        user_id: str,
        name: str,
        type: TransactionType,
    ) -> Optional[Category]:
        for category in await self.list_categories(user_id, type):
            if category.name == name:
                return category
        return None

    async def add_category(self, category: Category) -> Category:
        if await self.get_category(category.user_id, category.name, category.type):
            raise DuplicateError(f"Category already exists: {category.name}")
        try:
            sheet = self._client.get_categories_sheet()
            sheet.append_row(
                [
                    category.user_id,
                    category.name,
                    category.icon,
                    category.type.value,
                    category.created_at.isoformat(),
                ],
                value_input_option="RAW",
            )
            return category
        except Exception as e:
            raise PersistenceError(f"Failed to save category: {e}")


class GoogleSheetsUserSettingsStorage(UserSettingsStorageInterface):
    """
    One row per user_id.

    The upsert scans for the user's row and rewrites its cells in place,
    or appends a new row when none exists.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
        self._lock = asyncio.Lock()

    def _find_row(self, sheet: gspread.Worksheet, user_id: str) -> tuple[Optional[int], Optional[list]]:
        all_rows = sheet.get_all_values()
        # Row 1 is the header
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == user_id:
                return idx, row
        return None, None

    async def get_user_settings(self, user_id: str) -> Optional[UserSettings]:
        try:
            sheet = self._client.get_user_settings_sheet()
            _, row = self._find_row(sheet, user_id)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to get user settings: {e}")

        if row is None:
            return None
        return UserSettings(
            user_id=_cell(row, 0),
            currency=Currency(_cell(row, 1)),
            updated_at=datetime.fromisoformat(_cell(row, 2)),
        )

    async def upsert_user_settings(
        self,
        user_id: str,
        currency: Currency,
    ) -> UserSettings:
        async with self._lock:
            try:
                sheet = self._client.get_user_settings_sheet()
                idx, _ = self._find_row(sheet, user_id)
                settings = UserSettings(user_id=user_id, currency=currency, updated_at=utc_now())

                if idx is None:
                    sheet.append_row(
                        [user_id, currency.value, settings.updated_at.isoformat()],
                        value_input_option="RAW",
                    )
                else:
                    sheet.update_cell(idx, 2, currency.value)
                    sheet.update_cell(idx, 3, settings.updated_at.isoformat())
                return settings
            except PersistenceError:
                raise
            except Exception as e:
                raise PersistenceError(f"Failed to upsert user settings: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        return AuditEvent(
            event_id=UUID(_cell(row, 0)),
            timestamp=datetime.fromisoformat(_cell(row, 1)),
            event_type=AuditEventType(_cell(row, 2)),
            severity=AuditSeverity(_cell(row, 3)),
            entity_type=_cell(row, 4) or None,
            entity_id=_cell(row, 5) or None,
            user_id=_cell(row, 6) or None,
            correlation_id=UUID(_cell(row, 7)) if _cell(row, 7) else None,
            description=_cell(row, 8),
            details=json.loads(_cell(row, 9)) if _cell(row, 9) else {},
            error_message=_cell(row, 10) or None,
            is_user_action=_cell(row, 11).lower() == "true",
        )

    async def append_event(self, event: AuditEvent) -> bool:
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise PersistenceError(f"Failed to write audit event: {e}")

    def _all_events(self) -> list[AuditEvent]:
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to get audit events: {e}")

        events = []
        for row in all_rows:
            if row and row[0]:
                try:
                    events.append(self._row_to_event(row))
                except Exception:
                    continue
        return events

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._all_events() if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = self._all_events()
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
