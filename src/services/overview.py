"""
Overview Service

Computes the dashboard aggregates (totals, per-category sums, monthly
history) from a user's transactions and caches them.

The cache is keyed per (user, date range) and is dropped whenever the
"overview" key is invalidated on the bus. Nothing here is persisted:
the aggregates are always derivable from the transactions.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from src.audit import AuditLogger
from src.auth import AuthProvider, require_identity
from src.events import OVERVIEW_KEY, InvalidationBus, InvalidationEvent
from src.models.overview import CategoryTotal, MonthlyHistory, Overview
from src.models.transaction import Transaction, TransactionType
from src.services.storage import TransactionStorageInterface


def build_overview(
    user_id: str,
    transactions: list[Transaction],
    date_from: datetime,
    date_to: datetime,
) -> Overview:
    """Aggregate transactions into an Overview. Pure function."""
    income = Decimal("0")
    expense = Decimal("0")
    by_category: dict[tuple[TransactionType, str], CategoryTotal] = {}
    monthly: dict[tuple[int, int], MonthlyHistory] = {}

    for t in transactions:
        if t.type == TransactionType.INCOME:
            income += t.amount
        else:
            expense += t.amount

        key = (t.type, t.category)
        if key not in by_category:
            by_category[key] = CategoryTotal(
                category=t.category,
                category_icon=t.category_icon,
                type=t.type,
                total=Decimal("0"),
            )
        by_category[key].total += t.amount

        day = t.date.astimezone(timezone.utc)
        month_key = (day.year, day.month)
        if month_key not in monthly:
            monthly[month_key] = MonthlyHistory(year=day.year, month=day.month)
        if t.type == TransactionType.INCOME:
            monthly[month_key].income += t.amount
        else:
            monthly[month_key].expense += t.amount

    return Overview(
        user_id=user_id,
        date_from=date_from,
        date_to=date_to,
        income=income,
        expense=expense,
        transaction_count=len(transactions),
        by_category=sorted(by_category.values(), key=lambda c: c.total, reverse=True),
        monthly=[monthly[k] for k in sorted(monthly)],
    )


class OverviewService:

    def __init__(
        self,
        auth_provider: AuthProvider,
        transaction_storage: TransactionStorageInterface,
        bus: Optional[InvalidationBus] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._auth = auth_provider
        self._storage = transaction_storage
        self._audit_logger = audit_logger
        self._cache: dict[tuple[str, datetime, datetime], Overview] = {}
        if bus is not None:
            bus.subscribe(OVERVIEW_KEY, self._on_invalidate)

    async def _on_invalidate(self, event: InvalidationEvent) -> None:
        if event.user_id is None:
            stale = list(self._cache)
        else:
            stale = [k for k in self._cache if k[0] == event.user_id]
        for key in stale:
            del self._cache[key]

        if self._audit_logger:
            await self._audit_logger.log_overview_invalidated(
                key=event.key,
                user_id=event.user_id,
                dropped=len(stale),
            )

    def is_cached(self, user_id: str, date_from: datetime, date_to: datetime) -> bool:
        return (user_id, date_from, date_to) in self._cache

    async def get_overview(self, date_from: datetime, date_to: datetime) -> Overview:
        """
        Overview for the signed-in user between two instants (inclusive).

        Raises:
            ValueError: date_from is after date_to
        """
        if date_from > date_to:
            raise ValueError("date_from must not be after date_to")

        identity = await require_identity(self._auth)
        key = (identity.user_id, date_from, date_to)
        if key in self._cache:
            return self._cache[key]

        transactions = await self._storage.list_transactions(
            identity.user_id,
            date_from=date_from,
            date_to=date_to,
            limit=100_000,
        )
        overview = build_overview(identity.user_id, transactions, date_from, date_to)
        self._cache[key] = overview
        return overview
