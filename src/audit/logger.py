"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. A history of every write per user

The audit logger:
- Is async so it sits naturally inside service coroutines
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.config import get_settings
from src.models.audit import AuditEvent, AuditEventBuilder
from src.services.storage import AuditStorageInterface


logging.basicConfig(
    format="%(message)s",
    level=get_settings().app.log_level.upper(),
)

# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("budget_tracker.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_transaction_created(
        self,
        transaction_id: UUID,
        user_id: str,
        type: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful transaction write."""
        event = AuditEventBuilder.transaction_created(
            transaction_id=transaction_id,
            user_id=user_id,
            type=type,
            amount=amount,
            category=category,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_validation_failed(
        self,
        entity_type: str,
        issues: list[dict],
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected payload."""
        event = AuditEventBuilder.validation_failed(
            entity_type=entity_type,
            issues=issues,
            user_id=user_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_currency_updated(
        self,
        user_id: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a currency change."""
        event = AuditEventBuilder.currency_updated(
            user_id=user_id,
            currency=currency,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_unauthenticated(
        self,
        operation: str,
        redirect_to: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an operation attempted without a signed-in user."""
        event = AuditEventBuilder.unauthenticated_access(
            operation=operation,
            redirect_to=redirect_to,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_request_redirected(
        self,
        path: str,
        redirect_to: str,
        authenticated: bool,
    ) -> None:
        """Log a route guard redirect."""
        event = AuditEventBuilder.request_redirected(
            path=path,
            redirect_to=redirect_to,
            authenticated=authenticated,
        )
        await self.log(event)

    async def log_overview_invalidated(
        self,
        key: str,
        user_id: Optional[str],
        dropped: int,
    ) -> None:
        """Log a cache invalidation."""
        event = AuditEventBuilder.overview_invalidated(
            key=key,
            user_id=user_id,
            dropped=dropped,
        )
        await self.log(event)

    async def log_persistence_failed(
        self,
        operation: str,
        error_message: str,
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a storage failure."""
        event = AuditEventBuilder.persistence_failed(
            operation=operation,
            error_message=error_message,
            user_id=user_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., one dialog submit).
    Pass it through all subsequent operations.
    """
    return uuid4()
