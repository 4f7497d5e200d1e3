"""
User Settings Models

One settings row per user. Today it only holds the preferred currency.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.models.transaction import utc_now


class Currency(str, Enum):
    """
    Supported currencies.

    DESIGN DECISION: An explicit allow-list rather than any ISO code.
    Formatting (symbol, grouping) is only known for these.
    """
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    INR = "INR"


# (label, locale) per currency, for display
CURRENCY_DETAILS: dict[Currency, tuple[str, str]] = {
    Currency.USD: ("$ Dollar", "en-US"),
    Currency.EUR: ("€ Euro", "de-DE"),
    Currency.GBP: ("£ Pound", "en-GB"),
    Currency.JPY: ("¥ Yen", "ja-JP"),
    Currency.INR: ("₹ Rupee", "en-IN"),
}


class UpdateUserCurrencySchema(BaseModel):
    """Payload for changing the preferred currency."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    currency: Currency


class UserSettings(BaseModel):
    """Persisted per-user settings. user_id is the unique key."""

    user_id: str = Field(..., min_length=1)
    currency: Currency
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def currency_label(self) -> str:
        return CURRENCY_DETAILS[self.currency][0]
