"""
Audit Models for Budget Tracker

Every significant action in the system is logged for audit purposes.
This provides:
1. Complete traceability of all writes
2. Debugging information when things go wrong
3. Ability to reconstruct who changed what

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from src.models.transaction import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transactions
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_VALIDATION_FAILED = "transaction_validation_failed"

    # User settings
    CURRENCY_UPDATED = "currency_updated"
    CURRENCY_VALIDATION_FAILED = "currency_validation_failed"

    # Access
    UNAUTHENTICATED_ACCESS = "unauthenticated_access"
    REQUEST_REDIRECTED = "request_redirected"

    # Derived data
    OVERVIEW_INVALIDATED = "overview_invalidated"

    # System events
    PERSISTENCE_FAILED = "persistence_failed"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'user_settings', 'request')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    user_id: Optional[str] = Field(
        default=None,
        description="Identity on whose behalf the action ran"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one dialog submission)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         user_id, correlation_id, description, details_json, error_message,
         is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            self.user_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_created(transaction, correlation_id)
        event = AuditEventBuilder.currency_updated(user_id, "EUR", correlation_id)
    """

    @staticmethod
    def transaction_created(
        transaction_id: UUID,
        user_id: str,
        type: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_CREATED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"{type.capitalize()} of {amount} recorded in {category}",
            details={
                "type": type,
                "amount": amount,
                "category": category,
            },
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        entity_type: str,
        issues: list[dict],
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.CURRENCY_VALIDATION_FAILED
            if entity_type == "user_settings"
            else AuditEventType.TRANSACTION_VALIDATION_FAILED
        )
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Validation failed with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def currency_updated(
        user_id: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CURRENCY_UPDATED,
            entity_type="user_settings",
            entity_id=user_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Preferred currency set to {currency}",
            details={"currency": currency},
            is_user_action=True,
        )

    @staticmethod
    def unauthenticated_access(
        operation: str,
        redirect_to: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UNAUTHENTICATED_ACCESS,
            severity=AuditSeverity.WARNING,
            entity_type="operation",
            entity_id=operation,
            correlation_id=correlation_id,
            description=f"No signed-in user for {operation}",
            details={"redirect_to": redirect_to},
        )

    @staticmethod
    def request_redirected(
        path: str,
        redirect_to: str,
        authenticated: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REQUEST_REDIRECTED,
            severity=AuditSeverity.DEBUG,
            entity_type="request",
            entity_id=path,
            description=f"Redirected {path} to {redirect_to}",
            details={
                "redirect_to": redirect_to,
                "authenticated": authenticated,
            },
        )

    @staticmethod
    def overview_invalidated(
        key: str,
        user_id: Optional[str],
        dropped: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OVERVIEW_INVALIDATED,
            severity=AuditSeverity.DEBUG,
            entity_type="cache",
            entity_id=key,
            user_id=user_id,
            description=f"Cache key '{key}' invalidated, {dropped} entries dropped",
            details={"dropped": dropped},
        )

    @staticmethod
    def persistence_failed(
        operation: str,
        error_message: str,
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSISTENCE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="operation",
            entity_id=operation,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Storage write failed during {operation}",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
