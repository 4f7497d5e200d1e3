"""
Currency Settings Service

Keeps exactly one settings row per user. Writes are upserts keyed by
user_id, so calling update twice with the same currency is a no-op in
effect: one row, same currency.
"""

from typing import Any, Optional
from uuid import UUID

from src.audit import AuditLogger, create_correlation_id
from src.auth import AuthProvider, UnauthenticatedError, require_identity
from src.config import get_settings
from src.models.user_settings import Currency, UserSettings
from src.services.storage import PersistenceError, UserSettingsStorageInterface
from src.validation import ValidationError, validate_update_currency


class CurrencySettingsService:

    def __init__(
        self,
        auth_provider: AuthProvider,
        storage: UserSettingsStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._auth = auth_provider
        self._storage = storage
        self._audit_logger = audit_logger

    async def _identity(self, operation: str, correlation_id: UUID):
        try:
            return await require_identity(self._auth)
        except UnauthenticatedError as e:
            if self._audit_logger:
                await self._audit_logger.log_unauthenticated(
                    operation=operation,
                    redirect_to=e.redirect_to,
                    correlation_id=correlation_id,
                )
            raise

    async def update_user_currency(
        self,
        currency: Any,
        correlation_id: Optional[UUID] = None,
    ) -> UserSettings:
        """
        Set the signed-in user's preferred currency.

        Raises:
            ValidationError: currency is not in the supported list;
                nothing is written
            UnauthenticatedError: nobody is signed in
            PersistenceError: the upsert failed
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            parsed = validate_update_currency(currency)
        except ValidationError as e:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    entity_type="user_settings",
                    issues=e.issues_as_dicts(),
                    correlation_id=correlation_id,
                )
            raise

        identity = await self._identity("update_user_currency", correlation_id)

        try:
            settings = await self._storage.upsert_user_settings(
                identity.user_id, parsed.currency
            )
        except PersistenceError as e:
            if self._audit_logger:
                await self._audit_logger.log_persistence_failed(
                    operation="update_user_currency",
                    error_message=str(e),
                    user_id=identity.user_id,
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_currency_updated(
                user_id=identity.user_id,
                currency=settings.currency.value,
                correlation_id=correlation_id,
            )

        return settings

    async def get_user_settings(self) -> UserSettings:
        """
        Current settings for the signed-in user.

        A user without a row gets one with the configured default currency.
        """
        correlation_id = create_correlation_id()
        identity = await self._identity("get_user_settings", correlation_id)

        settings = await self._storage.get_user_settings(identity.user_id)
        if settings is not None:
            return settings

        default = Currency(get_settings().app.default_currency)
        return await self._storage.upsert_user_settings(identity.user_id, default)
