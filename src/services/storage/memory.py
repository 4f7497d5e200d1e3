"""
In-Memory Storage Implementation

Used by tests and by the app when no spreadsheet is configured.
Data lives for the lifetime of the process only.

Upserts take an asyncio.Lock so interleaved coroutines can never
create two settings rows for the same user.
"""

import asyncio
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.models.audit import AuditEvent
from src.models.category import Category
from src.models.transaction import Transaction, TransactionType, utc_now
from src.models.user_settings import Currency, UserSettings
from src.services.storage.interface import (
    AuditStorageInterface,
    CategoryStorageInterface,
    DuplicateError,
    TransactionStorageInterface,
    UserSettingsStorageInterface,
)


class InMemoryTransactionStorage(TransactionStorageInterface):

    def __init__(self):
        self._rows: list[Transaction] = []

    async def insert_transaction(self, transaction: Transaction) -> Transaction:
        if any(row.id == transaction.id for row in self._rows):
            raise DuplicateError(f"Transaction already exists: {transaction.id}")
        stored = transaction.model_copy(deep=True)
        self._rows.append(stored)
        return stored.model_copy(deep=True)

    async def list_transactions(
        self,
        user_id: str,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        type: Optional[TransactionType] = None,
        limit: int = 1000,
        offset: int = 0,
    ) -> list[Transaction]:
        rows = [
            row for row in self._rows
            if row.user_id == user_id
            and (date_from is None or row.date >= date_from)
            and (date_to is None or row.date <= date_to)
            and (type is None or row.type == type)
        ]
        rows.sort(key=lambda t: (t.date, t.created_at), reverse=True)
        return [row.model_copy(deep=True) for row in rows[offset:offset + limit]]


class InMemoryCategoryStorage(CategoryStorageInterface):

    def __init__(self):
        self._rows: dict[tuple[str, str, TransactionType], Category] = {}

    async def list_categories(
        self,
        user_id: str,
        type: Optional[TransactionType] = None,
    ) -> list[Category]:
        rows = [
            c for (uid, _, t), c in self._rows.items()
            if uid == user_id and (type is None or t == type)
        ]
        return sorted(rows, key=lambda c: c.name.lower())

    async def get_category(
        self,
        user_id: str,
        name: str,
        type: TransactionType,
    ) -> Optional[Category]:
        return self._rows.get((user_id, name, type))

    async def add_category(self, category: Category) -> Category:
        key = (category.user_id, category.name, category.type)
        if key in self._rows:
            raise DuplicateError(f"Category already exists: {category.name}")
        self._rows[key] = category
        return category


class InMemoryUserSettingsStorage(UserSettingsStorageInterface):

    def __init__(self):
        self._rows: dict[str, UserSettings] = {}
        self._lock = asyncio.Lock()

    async def get_user_settings(self, user_id: str) -> Optional[UserSettings]:
        row = self._rows.get(user_id)
        return row.model_copy() if row else None

    async def upsert_user_settings(
        self,
        user_id: str,
        currency: Currency,
    ) -> UserSettings:
        async with self._lock:
            existing = self._rows.get(user_id)
            if existing is None:
                row = UserSettings(user_id=user_id, currency=currency)
            else:
                row = existing.model_copy(
                    update={"currency": currency, "updated_at": utc_now()}
                )
            self._rows[user_id] = row
            return row.model_copy()

    @property
    def row_count(self) -> int:
        return len(self._rows)


class InMemoryAuditStorage(AuditStorageInterface):

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._events if e.correlation_id == correlation_id]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return sorted(self._events, key=lambda e: e.timestamp, reverse=True)[:limit]
