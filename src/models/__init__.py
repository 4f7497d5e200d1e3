"""
Data Models Package

This package contains all Pydantic models used in the Budget Tracker system.
All data flowing through the system must conform to these schemas.
"""

from src.models.transaction import (
    CreateTransactionSchema,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from src.models.category import (
    DEFAULT_CATEGORIES,
    Category,
    default_categories_for,
)
from src.models.user_settings import (
    CURRENCY_DETAILS,
    Currency,
    UpdateUserCurrencySchema,
    UserSettings,
)
from src.models.overview import (
    CategoryTotal,
    MonthlyHistory,
    Overview,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "CreateTransactionSchema",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    # Categories
    "DEFAULT_CATEGORIES",
    "Category",
    "default_categories_for",
    # User settings
    "CURRENCY_DETAILS",
    "Currency",
    "UpdateUserCurrencySchema",
    "UserSettings",
    # Overview
    "CategoryTotal",
    "MonthlyHistory",
    "Overview",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
