"""Form controllers and helpers for the transaction dialog."""

from src.forms.category_picker import CategoryPicker
from src.forms.helpers import date_to_utc_date, format_date
from src.forms.notifications import Notification, NotificationCenter, NotificationKind
from src.forms.transaction_dialog import (
    NOTIFICATION_ID,
    SubmitResult,
    TransactionDialogController,
)

__all__ = [
    "CategoryPicker",
    "NOTIFICATION_ID",
    "Notification",
    "NotificationCenter",
    "NotificationKind",
    "SubmitResult",
    "TransactionDialogController",
    "date_to_utc_date",
    "format_date",
]
