"""Category model and the default set seeded for new users."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.transaction import TransactionType, utc_now


class Category(BaseModel):
    """A user-owned category. Unique per (user_id, name, type)."""
    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: str = Field(..., min_length=1)
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category name (e.g., Groceries, Salary)"
    )
    icon: str = Field(
        default="",
        max_length=20,
        description="Emoji shown next to the name"
    )
    type: TransactionType
    created_at: datetime = Field(default_factory=utc_now)


DEFAULT_CATEGORIES: dict[TransactionType, list[tuple[str, str]]] = {
    TransactionType.INCOME: [
        ("Salary", "💼"),
        ("Freelance", "🧑‍💻"),
        ("Gifts", "🎁"),
    ],
    TransactionType.EXPENSE: [
        ("Groceries", "🛒"),
        ("Rent", "🏠"),
        ("Transport", "🚌"),
        ("Dining", "🍽️"),
        ("Utilities", "💡"),
    ],
}


def default_categories_for(user_id: str) -> list[Category]:
    return [
        Category(user_id=user_id, name=name, icon=icon, type=type_)
        for type_, entries in DEFAULT_CATEGORIES.items()
        for name, icon in entries
    ]
