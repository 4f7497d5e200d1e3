"""Validation package."""

from src.validation.validator import (
    ValidationError,
    ValidationIssue,
    validate_create_transaction,
    validate_update_currency,
)

__all__ = [
    "ValidationError",
    "ValidationIssue",
    "validate_create_transaction",
    "validate_update_currency",
]
