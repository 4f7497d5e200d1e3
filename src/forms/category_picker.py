"""
Category Picker

Offers the signed-in user's categories for one transaction type and
reports the chosen name back through a callback. The dialog never
reads the picker's state directly.
"""

from typing import Callable, Optional

from src.models.category import Category
from src.models.transaction import TransactionType
from src.services.categories import CategoryService


class CategoryPicker:

    def __init__(
        self,
        type: TransactionType,
        category_service: CategoryService,
        on_change: Callable[[str], None],
    ):
        self.type = type
        self._service = category_service
        self._on_change = on_change
        self._options: list[Category] = []
        self.selected: Optional[str] = None

    async def load_options(self) -> list[Category]:
        self._options = await self._service.list_categories(self.type)
        return list(self._options)

    @property
    def options(self) -> list[Category]:
        return list(self._options)

    def select_value(self, name: str) -> str:
        """
        Pick a category by name and hand it to the dialog.

        Raises:
            ValueError: options are loaded and none has this name
        """
        if self._options and name not in {c.name for c in self._options}:
            raise ValueError(f"Unknown {self.type.value} category: {name}")
        self.selected = name
        self._on_change(name)
        return name

    async def create_and_select(self, name: str, icon: str = "") -> Category:
        """Create a new category of this type and select it."""
        category = await self._service.create_category(name=name, type=self.type, icon=icon)
        self._options = sorted([*self._options, category], key=lambda c: c.name.lower())
        self.select_value(category.name)
        return category
