"""
Category Service

Supplies the category options a transaction dialog offers. A user with
no categories at all gets the default set on first listing.
"""

from typing import Optional

from src.auth import AuthProvider, require_identity
from src.models.category import Category, default_categories_for
from src.models.transaction import TransactionType
from src.services.storage import CategoryStorageInterface, DuplicateError


class CategoryService:

    def __init__(
        self,
        auth_provider: AuthProvider,
        storage: CategoryStorageInterface,
    ):
        self._auth = auth_provider
        self._storage = storage

    async def list_categories(
        self,
        type: Optional[TransactionType] = None,
    ) -> list[Category]:
        """The signed-in user's categories, seeding defaults when they have none."""
        identity = await require_identity(self._auth)

        if not await self._storage.list_categories(identity.user_id):
            for category in default_categories_for(identity.user_id):
                try:
                    await self._storage.add_category(category)
                except DuplicateError:
                    # Seeded concurrently by another session
                    continue

        return await self._storage.list_categories(identity.user_id, type)

    async def create_category(
        self,
        name: str,
        type: TransactionType,
        icon: str = "",
    ) -> Category:
        """
        Raises:
            DuplicateError: the user already has this (name, type)
        """
        identity = await require_identity(self._auth)
        category = Category(user_id=identity.user_id, name=name, icon=icon, type=type)
        return await self._storage.add_category(category)
