"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Just the operations the services need.

Every read and write is scoped by user_id. There is no cross-user query.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.models.audit import AuditEvent
from src.models.category import Category
from src.models.transaction import Transaction, TransactionType
from src.models.user_settings import Currency, UserSettings


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction storage.

    Transactions are insert-only from the services' point of view.
    """

    @abstractmethod
    async def insert_transaction(self, transaction: Transaction) -> Transaction:
        """
        Persist a new transaction.

        Args:
            transaction: The fully built record

        Returns:
            The stored record

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    async def list_transactions(
        self,
        user_id: str,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        type: Optional[TransactionType] = None,
        limit: int = 1000,
        offset: int = 0,
    ) -> list[Transaction]:
        """
        List a user's transactions, newest first.

        Args:
            user_id: Owner of the transactions
            date_from: Include transactions on or after this instant
            date_to: Include transactions on or before this instant
            type: Only income or only expense
            limit: Maximum number of results
            offset: Number of results to skip
        """
        pass


class CategoryStorageInterface(ABC):
    """Abstract interface for per-user categories."""

    @abstractmethod
    async def list_categories(
        self,
        user_id: str,
        type: Optional[TransactionType] = None,
    ) -> list[Category]:
        """List a user's categories, sorted by name."""
        pass

    @abstractmethod
    async def get_category(
        self,
        user_id: str,
        name: str,
        type: TransactionType,
    ) -> Optional[Category]:
        """Find one category by its (user, name, type) key."""
        pass

    @abstractmethod
    async def add_category(self, category: Category) -> Category:
        """
        Add a category.

        Raises:
            DuplicateError: If (user_id, name, type) already exists
        """
        pass


class UserSettingsStorageInterface(ABC):
    """
    Abstract interface for per-user settings.

    At most one row per user_id.
    """

    @abstractmethod
    async def get_user_settings(self, user_id: str) -> Optional[UserSettings]:
        """Return the user's settings row, or None."""
        pass

    @abstractmethod
    async def upsert_user_settings(
        self,
        user_id: str,
        currency: Currency,
    ) -> UserSettings:
        """
        Create the row if absent, otherwise replace its currency in place.

        Must be atomic per user_id: concurrent calls never produce two rows.

        Returns:
            The resulting settings row
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events for a correlation ID, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get the most recent audit events (newest first)."""
        pass


class PersistenceError(Exception):
    """Base exception for storage operations."""
    pass


class DuplicateError(PersistenceError):
    """Attempted to insert a duplicate entity."""
    pass


class StorageConnectionError(PersistenceError):
    """Could not connect to storage backend."""
    pass
