"""
Notification Center

Toast-style messages keyed by id. Showing a notification under an id
that is already on screen replaces it, so "Creating..." turns into
"Created" (or a failure) instead of stacking a second toast.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from src.models.transaction import utc_now


class NotificationKind(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Notification(BaseModel):
    id: str
    kind: NotificationKind
    message: str
    shown_at: datetime = Field(default_factory=utc_now)


class NotificationCenter:

    def __init__(self):
        self._active: dict[str, Notification] = {}

    def show(self, id: str, kind: NotificationKind, message: str) -> Notification:
        notification = Notification(id=id, kind=kind, message=message)
        # Re-inserting moves the id to the end, newest last
        self._active.pop(id, None)
        self._active[id] = notification
        return notification

    def loading(self, id: str, message: str) -> Notification:
        return self.show(id, NotificationKind.LOADING, message)

    def success(self, id: str, message: str) -> Notification:
        return self.show(id, NotificationKind.SUCCESS, message)

    def error(self, id: str, message: str) -> Notification:
        return self.show(id, NotificationKind.ERROR, message)

    def get(self, id: str) -> Optional[Notification]:
        return self._active.get(id)

    def dismiss(self, id: str) -> None:
        self._active.pop(id, None)

    @property
    def active(self) -> list[Notification]:
        return list(self._active.values())
