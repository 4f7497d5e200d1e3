"""
Services package.

Only storage is re-exported here; the domain services import the audit
logger, which itself depends on storage, so they are imported from their
own modules (src.services.transactions, src.services.user_settings, ...).
"""

from src.services.storage import (
    AuditStorageInterface,
    CategoryStorageInterface,
    DuplicateError,
    PersistenceError,
    StorageConnectionError,
    TransactionStorageInterface,
    UserSettingsStorageInterface,
)

__all__ = [
    "AuditStorageInterface",
    "CategoryStorageInterface",
    "DuplicateError",
    "PersistenceError",
    "StorageConnectionError",
    "TransactionStorageInterface",
    "UserSettingsStorageInterface",
]
