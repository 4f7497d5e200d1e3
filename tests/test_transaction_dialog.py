"""
Tests for the transaction dialog controller and category picker.

The submission service is replaced by a recording fake so each test
can count calls and control how the call ends.
"""

import asyncio
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

import pytest

from src.auth import Identity, SessionAuthProvider, UnauthenticatedError
from src.events import OVERVIEW_KEY, InvalidationBus
from src.forms import (
    NOTIFICATION_ID,
    CategoryPicker,
    NotificationCenter,
    NotificationKind,
    TransactionDialogController,
    date_to_utc_date,
    format_date,
)
from src.models.transaction import Transaction, TransactionType
from src.orchestrator import (
    create_app_components,
    create_in_memory_backends,
    create_transaction_dialog,
)
from src.services.categories import CategoryService
from src.services.storage import InMemoryCategoryStorage, PersistenceError


class RecordingService:

    def __init__(self, error: Optional[Exception] = None, gate: Optional[asyncio.Event] = None):
        self.calls: list[dict] = []
        self._error = error
        self._gate = gate

    async def create_transaction(self, payload, correlation_id=None):
        self.calls.append(payload)
        if self._gate is not None:
            await self._gate.wait()
        if self._error is not None:
            raise self._error
        return Transaction(
            user_id="U1",
            type=payload["type"],
            description=payload["description"] or "",
            amount=payload["amount"],
            category=payload["category"],
            date=payload["date"],
        )


def filled_dialog(service, bus=None, notifications=None) -> TransactionDialogController:
    dialog = TransactionDialogController(
        TransactionType.EXPENSE, service, bus=bus, notifications=notifications
    )
    dialog.open()
    dialog.set_amount("42.5")
    dialog.set_category("Groceries")
    dialog.set_date(date(2024, 3, 1))
    return dialog


class TestDialogState:
    """Tests for the dialog's local transitions."""

    def test_open_starts_fresh(self):
        """Test opening shows an empty draft."""
        dialog = TransactionDialogController(TransactionType.INCOME, RecordingService())
        dialog.set_amount("5")
        dialog.open()

        assert dialog.is_open
        assert dialog.draft.amount == 0
        assert dialog.draft.category is None
        assert dialog.draft.type == TransactionType.INCOME

    def test_cancel_discards_draft(self):
        """Test cancel closes and resets."""
        dialog = filled_dialog(RecordingService())
        dialog.cancel()

        assert not dialog.is_open
        assert dialog.draft.category is None

    def test_set_category_only_assigns(self):
        """Test the category callback does no validation."""
        dialog = TransactionDialogController(TransactionType.EXPENSE, RecordingService())
        dialog.set_category("Anything")
        assert dialog.draft.category == "Anything"
        assert dialog.errors == {}


class TestSubmit:
    """Tests for TransactionDialogController.submit."""

    def test_success_calls_service_once(self):
        """Test a valid submit calls the service exactly once."""
        service = RecordingService()
        dialog = filled_dialog(service)

        result = asyncio.run(dialog.submit())

        assert result.success
        assert len(service.calls) == 1
        assert service.calls[0]["amount"] == Decimal("42.5")
        assert service.calls[0]["category"] == "Groceries"

    def test_success_resets_closes_and_notifies(self):
        """Test the dialog is reset and closed after success."""
        notifications = NotificationCenter()
        dialog = filled_dialog(RecordingService(), notifications=notifications)

        asyncio.run(dialog.submit())

        assert not dialog.is_open
        assert not dialog.is_pending
        assert dialog.draft.category is None
        assert dialog.draft.amount == 0
        assert notifications.get(NOTIFICATION_ID).kind == NotificationKind.SUCCESS
        assert len(notifications.active) == 1

    def test_success_invalidates_overview(self):
        """Test the overview key is published for the record's user."""
        bus = InvalidationBus()
        received = []
        bus.subscribe(OVERVIEW_KEY, received.append)
        dialog = filled_dialog(RecordingService(), bus=bus)

        asyncio.run(dialog.submit())

        assert len(received) == 1
        assert received[0].key == "overview"
        assert received[0].user_id == "U1"

    def test_missing_category_blocks_submit(self):
        """Test a draft without a category never reaches the service."""
        service = RecordingService()
        dialog = TransactionDialogController(TransactionType.EXPENSE, service)
        dialog.open()
        dialog.set_amount("10")

        result = asyncio.run(dialog.submit())

        assert not result.success
        assert service.calls == []
        assert "category" in dialog.errors
        assert dialog.is_open

    def test_nan_amount_blocks_submit(self):
        """Test a non-finite amount is an inline error."""
        service = RecordingService()
        dialog = filled_dialog(service)
        dialog.set_amount("NaN")

        asyncio.run(dialog.submit())

        assert service.calls == []
        assert "amount" in dialog.errors

    def test_second_submit_while_in_flight_is_skipped(self):
        """Test at most one submission runs at a time."""
        gate = asyncio.Event()
        service = RecordingService(gate=gate)
        dialog = filled_dialog(service)

        async def scenario():
            first = asyncio.create_task(dialog.submit())
            await asyncio.sleep(0)
            assert dialog.is_pending
            assert not dialog.can_submit
            second = await dialog.submit()
            gate.set()
            return await first, second

        first, second = asyncio.run(scenario())

        assert second.skipped
        assert first.success
        assert len(service.calls) == 1

    def test_cancel_ignored_while_pending(self):
        """Test cancel can't close a dialog mid-submit."""
        gate = asyncio.Event()
        dialog = filled_dialog(RecordingService(gate=gate))

        async def scenario():
            task = asyncio.create_task(dialog.submit())
            await asyncio.sleep(0)
            dialog.cancel()
            still_open = dialog.is_open
            gate.set()
            await task
            return still_open

        assert asyncio.run(scenario()) is True

    def test_failure_keeps_dialog_open(self):
        """Test a storage failure keeps the draft for retry."""
        notifications = NotificationCenter()
        bus = InvalidationBus()
        received = []
        bus.subscribe(OVERVIEW_KEY, received.append)
        dialog = filled_dialog(
            RecordingService(error=PersistenceError("down")),
            bus=bus,
            notifications=notifications,
        )

        result = asyncio.run(dialog.submit())

        assert not result.success
        assert dialog.is_open
        assert not dialog.is_pending
        assert dialog.draft.category == "Groceries"
        assert received == []
        assert notifications.get(NOTIFICATION_ID).kind == NotificationKind.ERROR

    def test_unauthenticated_returns_redirect(self):
        """Test the caller is told where to navigate."""
        dialog = filled_dialog(RecordingService(error=UnauthenticatedError("/sign-in")))

        result = asyncio.run(dialog.submit())

        assert result.redirect_to == "/sign-in"
        assert dialog.is_open


class TestDateNormalization:
    """Tests for UTC-midnight dates."""

    def test_default_date_is_local_day(self):
        """Test an untouched dialog submits the local calendar day."""
        service = RecordingService()
        dialog = TransactionDialogController(TransactionType.EXPENSE, service)
        dialog.open()
        dialog.set_amount("1")
        dialog.set_category("Groceries")

        assert date_to_utc_date(dialog.draft.date).date() == date.today()

        asyncio.run(dialog.submit())

        assert service.calls[0]["date"].date() == date.today()

    def test_plain_date(self):
        """Test a calendar date becomes midnight UTC."""
        assert date_to_utc_date(date(2024, 3, 1)) == datetime(2024, 3, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("offset_hours, hour", [(-5, 23), (9, 0), (0, 12)])
    def test_keeps_wall_clock_day(self, offset_hours, hour):
        """Test the picked day survives any local offset."""
        local = datetime(2024, 3, 1, hour, 30, tzinfo=timezone(timedelta(hours=offset_hours)))
        assert date_to_utc_date(local) == datetime(2024, 3, 1, tzinfo=timezone.utc)

    def test_submit_sends_utc_midnight(self):
        """Test the service receives the normalized date."""
        service = RecordingService()
        dialog = filled_dialog(service)
        dialog.set_date(datetime(2024, 3, 1, 22, 15, tzinfo=timezone(timedelta(hours=-8))))

        asyncio.run(dialog.submit())

        assert service.calls[0]["date"] == datetime(2024, 3, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("day, expected", [
        (1, "March 1st, 2024"),
        (2, "March 2nd, 2024"),
        (3, "March 3rd, 2024"),
        (11, "March 11th, 2024"),
        (22, "March 22nd, 2024"),
    ])
    def test_format_date(self, day, expected):
        """Test long date formatting."""
        assert format_date(datetime(2024, 3, day)) == expected


class TestCategoryPicker:
    """Tests for CategoryPicker."""

    def test_select_reports_to_dialog(self):
        """Test selection flows to the dialog through the callback."""
        auth = SessionAuthProvider(Identity(user_id="U1"))
        dialog = TransactionDialogController(TransactionType.EXPENSE, RecordingService())
        picker = CategoryPicker(
            TransactionType.EXPENSE,
            CategoryService(auth, InMemoryCategoryStorage()),
            on_change=dialog.set_category,
        )

        options = asyncio.run(picker.load_options())
        picker.select_value("Groceries")

        assert all(c.type == TransactionType.EXPENSE for c in options)
        assert dialog.draft.category == "Groceries"

    def test_unknown_option(self):
        """Test names outside the loaded options are refused."""
        auth = SessionAuthProvider(Identity(user_id="U1"))
        picker = CategoryPicker(
            TransactionType.INCOME,
            CategoryService(auth, InMemoryCategoryStorage()),
            on_change=lambda name: None,
        )
        asyncio.run(picker.load_options())

        with pytest.raises(ValueError):
            picker.select_value("Groceries")

    def test_create_and_select(self):
        """Test a new category is added to the options and selected."""
        auth = SessionAuthProvider(Identity(user_id="U1"))
        chosen = []
        picker = CategoryPicker(
            TransactionType.EXPENSE,
            CategoryService(auth, InMemoryCategoryStorage()),
            on_change=chosen.append,
        )
        asyncio.run(picker.load_options())

        asyncio.run(picker.create_and_select("Books", "📚"))

        assert chosen == ["Books"]
        assert "Books" in [c.name for c in picker.options]


class TestEndToEnd:
    """Dialog, real services and overview wired together."""

    def test_submit_refreshes_overview(self):
        """Test the next overview read includes the new transaction."""
        components = create_app_components(
            auth_provider=SessionAuthProvider(Identity(user_id="U1"))
        )
        dialog = create_transaction_dialog(components, TransactionType.EXPENSE)
        date_from = datetime(2024, 3, 1, tzinfo=timezone.utc)
        date_to = datetime(2024, 3, 31, tzinfo=timezone.utc)

        async def scenario():
            await components.categories.list_categories()
            before = await components.overview.get_overview(date_from, date_to)

            dialog.open()
            dialog.set_amount("42.5")
            dialog.set_category("Groceries")
            dialog.set_date(date(2024, 3, 1))
            result = await dialog.submit()

            cached = components.overview.is_cached("U1", date_from, date_to)
            after = await components.overview.get_overview(date_from, date_to)
            return before, result, cached, after

        before, result, cached, after = asyncio.run(scenario())

        assert result.success
        assert before.transaction_count == 0
        assert cached is False
        assert after.transaction_count == 1
        assert after.expense == Decimal("42.5")

    def test_other_session_of_same_user_sees_new_transaction(self):
        """Test a submit in one session drops the overview cached by another."""
        backends = create_in_memory_backends()
        identity = Identity(user_id="U1")
        writer = create_app_components(backends, SessionAuthProvider(identity))
        reader = create_app_components(backends, SessionAuthProvider(identity))
        dialog = create_transaction_dialog(writer, TransactionType.EXPENSE)
        date_from = datetime(2024, 3, 1, tzinfo=timezone.utc)
        date_to = datetime(2024, 3, 31, tzinfo=timezone.utc)

        async def scenario():
            await writer.categories.list_categories()
            await reader.overview.get_overview(date_from, date_to)

            dialog.open()
            dialog.set_amount("12")
            dialog.set_category("Groceries")
            dialog.set_date(date(2024, 3, 5))
            await dialog.submit()

            cached = reader.overview.is_cached("U1", date_from, date_to)
            after = await reader.overview.get_overview(date_from, date_to)
            return cached, after

        cached, after = asyncio.run(scenario())

        assert writer.bus is reader.bus
        assert cached is False
        assert after.transaction_count == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
