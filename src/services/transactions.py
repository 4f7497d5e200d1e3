"""
Transaction Submission Service

Flow:
1. Validate the payload shape against CreateTransactionSchema
2. Resolve the signed-in identity
3. Check the category belongs to that identity and matches the type
4. Insert one transaction record scoped to the identity

Each step either succeeds or raises; nothing is swallowed:
- ValidationError -> the caller shows field errors, user resubmits
- UnauthenticatedError -> the caller navigates to sign-in
- PersistenceError -> the caller shows a generic failure

This service does NOT refresh derived aggregates. The caller publishes
the invalidation signal once the write has succeeded.
"""

from typing import Any, Optional
from uuid import UUID

from src.audit import AuditLogger, create_correlation_id
from src.auth import AuthProvider, UnauthenticatedError, require_identity
from src.models.transaction import Transaction
from src.services.storage import (
    CategoryStorageInterface,
    PersistenceError,
    TransactionStorageInterface,
)
from src.validation import ValidationError, validate_create_transaction


class TransactionSubmissionService:

    def __init__(
        self,
        auth_provider: AuthProvider,
        transaction_storage: TransactionStorageInterface,
        category_storage: Optional[CategoryStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Args:
            auth_provider: Resolves the current identity
            transaction_storage: Where transactions are written
            category_storage: Used to check category ownership.
                              If None, the category name is trusted as given.
            audit_logger: Optional audit trail
        """
        self._auth = auth_provider
        self._storage = transaction_storage
        self._categories = category_storage
        self._audit_logger = audit_logger

    async def create_transaction(
        self,
        payload: Any,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Validate and persist one transaction for the signed-in user.

        Returns:
            The stored Transaction
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            parsed = validate_create_transaction(payload)
        except ValidationError as e:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    entity_type="transaction",
                    issues=e.issues_as_dicts(),
                    correlation_id=correlation_id,
                )
            raise

        try:
            identity = await require_identity(self._auth)
        except UnauthenticatedError as e:
            if self._audit_logger:
                await self._audit_logger.log_unauthenticated(
                    operation="create_transaction",
                    redirect_to=e.redirect_to,
                    correlation_id=correlation_id,
                )
            raise

        category_icon = ""
        if self._categories is not None:
            category = await self._categories.get_category(
                identity.user_id, parsed.category, parsed.type
            )
            if category is None:
                error = ValidationError.for_field(
                    "category",
                    "not_found",
                    f"No {parsed.type.value} category named '{parsed.category}'",
                )
                if self._audit_logger:
                    await self._audit_logger.log_validation_failed(
                        entity_type="transaction",
                        issues=error.issues_as_dicts(),
                        user_id=identity.user_id,
                        correlation_id=correlation_id,
                    )
                raise error
            category_icon = category.icon

        transaction = Transaction(
            user_id=identity.user_id,
            type=parsed.type,
            description=parsed.description or "",
            amount=parsed.amount,
            category=parsed.category,
            category_icon=category_icon,
            date=parsed.date,
        )

        try:
            stored = await self._storage.insert_transaction(transaction)
        except PersistenceError as e:
            if self._audit_logger:
                await self._audit_logger.log_persistence_failed(
                    operation="create_transaction",
                    error_message=str(e),
                    user_id=identity.user_id,
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_transaction_created(
                transaction_id=stored.id,
                user_id=stored.user_id,
                type=stored.type.value,
                amount=str(stored.amount),
                category=stored.category,
                correlation_id=correlation_id,
            )

        return stored
