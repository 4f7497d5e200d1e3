"""
Transaction Models for Budget Tracker

These models define the strict schemas for transaction data:
1. CreateTransactionSchema - what a client may submit
2. Transaction - what storage holds and hands back
3. TransactionDraft - the unsaved form state behind the dialog

DESIGN DECISION: Amounts are Decimal and must be finite.
The sign is NOT tied to the transaction type - an expense of -5 is
accepted as typed. Only numeric validity is enforced.
"""

from datetime import date as calendar_date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_midnight(value) -> datetime:
    """
    Midnight UTC of the calendar day the value shows on its own clock.

    Naive datetimes are read as local wall-clock time, aware ones in
    their own offset. Plain dates are used as they are.
    """
    day = value.date() if isinstance(value, datetime) else value
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


class TransactionType(str, Enum):
    """Direction of money flow. Fixed per dialog instance."""
    INCOME = "income"
    EXPENSE = "expense"


class CreateTransactionSchema(BaseModel):
    """
    Payload accepted by the transaction submission service.

    Strict about shape: unknown keys are rejected rather than dropped.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    type: TransactionType = Field(
        ...,
        description="income or expense"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Free text (optional)"
    )
    amount: Decimal = Field(
        ...,
        allow_inf_nan=False,
        description="Transaction amount, any finite number"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Name of a category owned by the user"
    )
    date: datetime = Field(
        ...,
        description="Transaction date, UTC midnight of the chosen calendar day"
    )

    @field_validator("date", mode="before")
    @classmethod
    def accept_plain_date(cls, v: Any) -> Any:
        if isinstance(v, calendar_date) and not isinstance(v, datetime):
            return datetime(v.year, v.month, v.day)
        return v

    @field_validator("date")
    @classmethod
    def pin_to_utc_midnight(cls, v: datetime) -> datetime:
        """Stored dates are always aware UTC midnight, whatever the client sent."""
        return utc_midnight(v)


class Transaction(BaseModel):
    """
    A persisted transaction.

    Always scoped to exactly one user.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    user_id: str = Field(
        ...,
        min_length=1,
        description="Identity that owns this record"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the record was written"
    )

    type: TransactionType
    description: str = ""
    amount: Decimal
    category: str
    category_icon: str = ""
    date: datetime


class TransactionDraft(BaseModel):
    """
    Client-held candidate transaction.

    Fields hold raw user input, so nothing here is validated on
    assignment. Validation happens once, on submit, against
    CreateTransactionSchema.
    """
    model_config = ConfigDict(frozen=False)

    type: TransactionType
    description: str = ""
    amount: Any = 0
    category: Optional[str] = None
    # Local wall-clock time: the day the user sees is the day that gets stored
    date: datetime = Field(default_factory=datetime.now)

    @classmethod
    def fresh(cls, type: TransactionType) -> "TransactionDraft":
        """A draft as it looks right after the dialog opens."""
        return cls(type=type, description="", amount=0, category=None, date=datetime.now())
