"""
Transaction Dialog Controller

Owns the state behind one "create income/expense" dialog:
- whether it is open
- the draft being edited
- field errors from the last submit
- whether a submission is in flight

State changes only through the methods below (open, set_*, submit,
reset, cancel). The UI renders from this object and calls back into it.

Submit flow:
1. Validate the draft against CreateTransactionSchema
   -> invalid: record field errors, do NOT call the service
2. Mark in flight, show a loading notification
3. Normalize the date to UTC midnight, call the submission service
   -> success: reset the draft, invalidate "overview", close
   -> failure: keep draft and dialog, show an error notification

At most one submission runs per dialog: a submit while another is in
flight returns immediately without calling the service.
"""

from datetime import date, datetime
from typing import Any, Optional, Union

import structlog
from pydantic import BaseModel, Field

from src.audit import AuditLogger, create_correlation_id
from src.auth import UnauthenticatedError
from src.events import OVERVIEW_KEY, InvalidationBus
from src.forms.helpers import date_to_utc_date
from src.forms.notifications import NotificationCenter
from src.models.transaction import Transaction, TransactionDraft, TransactionType
from src.services.transactions import TransactionSubmissionService
from src.validation import ValidationError, validate_create_transaction


NOTIFICATION_ID = "create-transaction"


class SubmitResult(BaseModel):
    """What happened when submit() was called."""

    success: bool = False
    skipped: bool = Field(
        default=False,
        description="True when another submission was already in flight"
    )
    transaction: Optional[Transaction] = None
    errors: dict[str, str] = Field(default_factory=dict)
    redirect_to: Optional[str] = None
    error_message: Optional[str] = None


class TransactionDialogController:

    def __init__(
        self,
        type: TransactionType,
        service: TransactionSubmissionService,
        bus: Optional[InvalidationBus] = None,
        notifications: Optional[NotificationCenter] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.type = type
        self._service = service
        self._bus = bus
        self.notifications = notifications or NotificationCenter()
        self._audit_logger = audit_logger
        self._logger = structlog.get_logger("budget_tracker.forms")

        self.is_open = False
        self.is_pending = False
        self.draft = TransactionDraft.fresh(type)
        self.errors: dict[str, str] = {}

    # -- transitions ---------------------------------------------------

    def open(self) -> None:
        self.reset()
        self.is_open = True

    def set_description(self, description: str) -> None:
        self.draft.description = description

    def set_amount(self, amount: Any) -> None:
        self.draft.amount = amount

    def set_date(self, value: Union[datetime, date]) -> None:
        if not isinstance(value, datetime):
            value = datetime(value.year, value.month, value.day)
        self.draft.date = value

    def set_category(self, name: str) -> None:
        """Category callback. Assigns only; validation waits for submit."""
        self.draft.category = name

    def reset(self) -> None:
        self.draft = TransactionDraft.fresh(self.type)
        self.errors = {}

    def cancel(self) -> None:
        """Discard the draft and close. Ignored while a submission runs."""
        if self.is_pending:
            return
        self.reset()
        self.is_open = False

    @property
    def can_submit(self) -> bool:
        return not self.is_pending

    # -- submit --------------------------------------------------------

    def _draft_payload(self) -> dict:
        payload = {
            "type": self.draft.type,
            "description": self.draft.description,
            "amount": self.draft.amount,
            "category": self.draft.category,
            "date": self.draft.date,
        }
        # Unset fields are left out so the schema reports them as missing
        return {k: v for k, v in payload.items() if v is not None}

    async def submit(self) -> SubmitResult:
        if self.is_pending:
            return SubmitResult(skipped=True)

        try:
            parsed = validate_create_transaction(self._draft_payload())
        except ValidationError as e:
            self.errors = e.field_errors
            return SubmitResult(errors=self.errors)

        self.errors = {}
        self.is_pending = True
        correlation_id = create_correlation_id()
        self.notifications.loading(NOTIFICATION_ID, "Creating transaction...")

        payload = parsed.model_dump()
        payload["date"] = date_to_utc_date(self.draft.date)

        try:
            transaction = await self._service.create_transaction(
                payload, correlation_id=correlation_id
            )
        except ValidationError as e:
            self.errors = e.field_errors
            self.notifications.error(NOTIFICATION_ID, "Please fix the highlighted fields")
            return SubmitResult(errors=self.errors, error_message=str(e))
        except UnauthenticatedError as e:
            self.notifications.error(NOTIFICATION_ID, "Please sign in again")
            return SubmitResult(redirect_to=e.redirect_to, error_message=str(e))
        except Exception as e:
            self._logger.error(
                "transaction_submit_failed",
                type=self.type.value,
                error=str(e),
                correlation_id=str(correlation_id),
            )
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"operation": "create_transaction"},
                    correlation_id=correlation_id,
                )
            self.notifications.error(NOTIFICATION_ID, "Something went wrong")
            return SubmitResult(error_message=str(e))
        finally:
            self.is_pending = False

        self.notifications.success(NOTIFICATION_ID, "Transaction created successfully")
        self.reset()
        if self._bus is not None:
            await self._bus.invalidate(OVERVIEW_KEY, user_id=transaction.user_id)
        self.is_open = False

        return SubmitResult(success=True, transaction=transaction)
