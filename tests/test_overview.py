"""Tests for overview aggregation, its cache and the invalidation bus."""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from src.auth import Identity, SessionAuthProvider
from src.events import OVERVIEW_KEY, InvalidationBus
from src.models.transaction import Transaction, TransactionType
from src.services.overview import OverviewService, build_overview
from src.services.storage import InMemoryTransactionStorage


FROM = datetime(2024, 1, 1, tzinfo=timezone.utc)
TO = datetime(2024, 12, 31, tzinfo=timezone.utc)


def make_transaction(type_, amount, category, month, user_id="U1", icon=""):
    return Transaction(
        user_id=user_id,
        type=type_,
        amount=Decimal(amount),
        category=category,
        category_icon=icon,
        date=datetime(2024, month, 1, tzinfo=timezone.utc),
    )


class TestBuildOverview:
    """Tests for the pure aggregation."""

    def test_totals_and_balance(self):
        """Test income, expense and balance."""
        overview = build_overview("U1", [
            make_transaction(TransactionType.INCOME, "1000", "Salary", 1),
            make_transaction(TransactionType.EXPENSE, "42.5", "Groceries", 1),
            make_transaction(TransactionType.EXPENSE, "7.5", "Groceries", 2),
        ], FROM, TO)

        assert overview.income == Decimal("1000")
        assert overview.expense == Decimal("50.0")
        assert overview.balance == Decimal("950.0")
        assert overview.transaction_count == 3

    def test_by_category_sorted_by_total(self):
        """Test categories are summed and ordered largest first."""
        overview = build_overview("U1", [
            make_transaction(TransactionType.EXPENSE, "10", "Transport", 1),
            make_transaction(TransactionType.EXPENSE, "30", "Rent", 1),
            make_transaction(TransactionType.EXPENSE, "15", "Transport", 2),
        ], FROM, TO)

        assert [(c.category, c.total) for c in overview.by_category] == [
            ("Rent", Decimal("30")),
            ("Transport", Decimal("25")),
        ]

    def test_monthly_history(self):
        """Test months are split and ordered."""
        overview = build_overview("U1", [
            make_transaction(TransactionType.EXPENSE, "5", "Dining", 3),
            make_transaction(TransactionType.INCOME, "100", "Salary", 1),
            make_transaction(TransactionType.EXPENSE, "8", "Dining", 1),
        ], FROM, TO)

        assert [m.key for m in overview.monthly] == ["2024-01", "2024-03"]
        assert overview.monthly[0].income == Decimal("100")
        assert overview.monthly[0].expense == Decimal("8")

    def test_empty(self):
        """Test no transactions gives zeros."""
        overview = build_overview("U1", [], FROM, TO)
        assert overview.balance == Decimal("0")
        assert overview.by_category == []
        assert overview.monthly == []


class TestOverviewService:
    """Tests for OverviewService caching."""

    def setup_service(self, user_id="U1"):
        storage = InMemoryTransactionStorage()
        bus = InvalidationBus()
        auth = SessionAuthProvider(Identity(user_id=user_id))
        return storage, bus, OverviewService(auth, storage, bus)

    def test_reversed_range(self):
        """Test from after to is rejected."""
        _, _, service = self.setup_service()
        with pytest.raises(ValueError):
            asyncio.run(service.get_overview(TO, FROM))

    def test_result_is_cached_until_invalidated(self):
        """Test reads are served from cache until the bus fires."""
        storage, bus, service = self.setup_service()

        async def scenario():
            first = await service.get_overview(FROM, TO)
            await storage.insert_transaction(
                make_transaction(TransactionType.INCOME, "10", "Salary", 5)
            )
            stale = await service.get_overview(FROM, TO)
            await bus.invalidate(OVERVIEW_KEY, user_id="U1")
            fresh = await service.get_overview(FROM, TO)
            return first, stale, fresh

        first, stale, fresh = asyncio.run(scenario())

        assert first.transaction_count == 0
        assert stale.transaction_count == 0
        assert fresh.transaction_count == 1

    def test_other_users_invalidation_keeps_cache(self):
        """Test invalidation is scoped to the given user."""
        _, bus, service = self.setup_service()

        async def scenario():
            await service.get_overview(FROM, TO)
            await bus.invalidate(OVERVIEW_KEY, user_id="U2")
            kept = service.is_cached("U1", FROM, TO)
            await bus.invalidate(OVERVIEW_KEY)
            return kept, service.is_cached("U1", FROM, TO)

        kept, after_global = asyncio.run(scenario())

        assert kept is True
        assert after_global is False

    def test_only_own_transactions(self):
        """Test another user's rows are never counted."""
        storage, _, service = self.setup_service()
        asyncio.run(storage.insert_transaction(
            make_transaction(TransactionType.INCOME, "10", "Salary", 5, user_id="U2")
        ))

        overview = asyncio.run(service.get_overview(FROM, TO))

        assert overview.transaction_count == 0


class TestInvalidationBus:
    """Tests for InvalidationBus."""

    def test_sync_and_async_handlers(self):
        """Test both handler styles are called in order."""
        bus = InvalidationBus()
        calls = []

        async def async_handler(event):
            calls.append(("async", event.key))

        bus.subscribe(OVERVIEW_KEY, lambda event: calls.append(("sync", event.key)))
        bus.subscribe(OVERVIEW_KEY, async_handler)

        asyncio.run(bus.invalidate(OVERVIEW_KEY, user_id="U1"))

        assert calls == [("sync", "overview"), ("async", "overview")]

    def test_failing_handler_does_not_stop_others(self):
        """Test a broken subscriber is skipped."""
        bus = InvalidationBus()
        calls = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(OVERVIEW_KEY, broken)
        bus.subscribe(OVERVIEW_KEY, calls.append)

        event = asyncio.run(bus.invalidate(OVERVIEW_KEY))

        assert calls == [event]

    def test_unsubscribe(self):
        """Test the returned callable removes the handler."""
        bus = InvalidationBus()
        calls = []
        unsubscribe = bus.subscribe(OVERVIEW_KEY, calls.append)

        unsubscribe()
        asyncio.run(bus.invalidate(OVERVIEW_KEY))

        assert calls == []

    def test_keys_are_independent(self):
        """Test handlers only see their own key."""
        bus = InvalidationBus()
        calls = []
        bus.subscribe("other", calls.append)

        asyncio.run(bus.invalidate(OVERVIEW_KEY))

        assert calls == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
