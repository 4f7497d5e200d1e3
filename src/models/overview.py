"""Aggregated read models shown on the dashboard overview."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.models.transaction import TransactionType, utc_now


class CategoryTotal(BaseModel):
    category: str
    category_icon: str = ""
    type: TransactionType
    total: Decimal


class MonthlyHistory(BaseModel):
    """Income and expense sums for one calendar month (UTC)."""

    year: int
    month: int = Field(ge=1, le=12)
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class Overview(BaseModel):
    """
    Everything the dashboard shows for one user and date range.

    Derived data: recomputed from transactions, never stored.
    """

    user_id: str
    date_from: datetime
    date_to: datetime
    computed_at: datetime = Field(default_factory=utc_now)

    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    transaction_count: int = Field(default=0, ge=0)
    by_category: list[CategoryTotal] = Field(default_factory=list)
    monthly: list[MonthlyHistory] = Field(default_factory=list)

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense
