"""Audit trail for transaction, currency and routing events."""

from src.audit.logger import AuditLogger, create_correlation_id
from src.models.audit import AuditEventType, AuditSeverity

__all__ = ["AuditEventType", "AuditLogger", "AuditSeverity", "create_correlation_id"]
