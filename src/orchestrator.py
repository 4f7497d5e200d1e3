"""
Main Orchestrator for Budget Tracker

This module ties together all the components:
1. Storage backends (shared by every session in the process)
2. Per-session services bound to one auth provider
3. Dialog controllers wired to the invalidation bus

DESIGN DECISION: Storage is shared, identity is not. Each browser
session gets its own auth provider and services, all pointing at the
same storage backends and the same invalidation bus, so a write in one
session drops the overview cached by every other session of that user.
"""

from typing import NamedTuple, Optional

import structlog

from src.audit import AuditLogger
from src.auth import AuthProvider, SessionAuthProvider
from src.events import InvalidationBus
from src.forms import NotificationCenter, TransactionDialogController
from src.models.transaction import TransactionType
from src.routing import RouteGuard
from src.services.categories import CategoryService
from src.services.overview import OverviewService
from src.services.storage import (
    AuditStorageInterface,
    CategoryStorageInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsCategoryStorage,
    GoogleSheetsClient,
    GoogleSheetsTransactionStorage,
    GoogleSheetsUserSettingsStorage,
    InMemoryAuditStorage,
    InMemoryCategoryStorage,
    InMemoryTransactionStorage,
    InMemoryUserSettingsStorage,
    TransactionStorageInterface,
    UserSettingsStorageInterface,
)
from src.services.transactions import TransactionSubmissionService
from src.services.user_settings import CurrencySettingsService


logger = structlog.get_logger("budget_tracker.orchestrator")


class StorageBackends(NamedTuple):
    transactions: TransactionStorageInterface
    categories: CategoryStorageInterface
    user_settings: UserSettingsStorageInterface
    audit: AuditStorageInterface
    bus: InvalidationBus


class AppComponents(NamedTuple):
    auth: AuthProvider
    bus: InvalidationBus
    audit_logger: AuditLogger
    notifications: NotificationCenter
    route_guard: RouteGuard
    transactions: TransactionSubmissionService
    categories: CategoryService
    user_settings: CurrencySettingsService
    overview: OverviewService


def create_in_memory_backends() -> StorageBackends:
    return StorageBackends(
        transactions=InMemoryTransactionStorage(),
        categories=InMemoryCategoryStorage(),
        user_settings=InMemoryUserSettingsStorage(),
        audit=InMemoryAuditStorage(),
        bus=InvalidationBus(),
    )


def create_storage_backends(use_storage: bool = True) -> StorageBackends:
    """
    Build the process-wide storage backends.

    Args:
        use_storage: Whether to use Google Sheets.
                    Falls back to in-memory storage when False or when
                    the Sheets settings are missing.
    """
    if not use_storage:
        return create_in_memory_backends()

    try:
        sheets_client = GoogleSheetsClient()
    except Exception as e:
        # Storage not configured - continue without it
        logger.warning("storage_not_configured", error=str(e))
        return create_in_memory_backends()

    return StorageBackends(
        transactions=GoogleSheetsTransactionStorage(sheets_client),
        categories=GoogleSheetsCategoryStorage(sheets_client),
        user_settings=GoogleSheetsUserSettingsStorage(sheets_client),
        audit=GoogleSheetsAuditStorage(sheets_client),
        bus=InvalidationBus(),
    )


def create_app_components(
    backends: Optional[StorageBackends] = None,
    auth_provider: Optional[AuthProvider] = None,
) -> AppComponents:
    """
    Factory function to create one session's components.

    Args:
        backends: Shared storage and invalidation bus; in-memory when omitted
        auth_provider: The session's identity source; a fresh, signed-out
                       SessionAuthProvider when omitted
    """
    backends = backends or create_in_memory_backends()
    auth = auth_provider or SessionAuthProvider()
    bus = backends.bus
    audit_logger = AuditLogger(backends.audit)

    return AppComponents(
        auth=auth,
        bus=bus,
        audit_logger=audit_logger,
        notifications=NotificationCenter(),
        route_guard=RouteGuard(audit_logger=audit_logger),
        transactions=TransactionSubmissionService(
            auth_provider=auth,
            transaction_storage=backends.transactions,
            category_storage=backends.categories,
            audit_logger=audit_logger,
        ),
        categories=CategoryService(auth, backends.categories),
        user_settings=CurrencySettingsService(
            auth_provider=auth,
            storage=backends.user_settings,
            audit_logger=audit_logger,
        ),
        overview=OverviewService(
            auth_provider=auth,
            transaction_storage=backends.transactions,
            bus=bus,
            audit_logger=audit_logger,
        ),
    )


def create_transaction_dialog(
    components: AppComponents,
    type: TransactionType,
) -> TransactionDialogController:
    """A dialog controller sharing the session's bus and notifications."""
    return TransactionDialogController(
        type=type,
        service=components.transactions,
        bus=components.bus,
        notifications=components.notifications,
        audit_logger=components.audit_logger,
    )
