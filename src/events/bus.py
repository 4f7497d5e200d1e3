"""
Cache Invalidation Bus

DESIGN DECISION: Writers never recompute derived data themselves.
After a successful write they publish "key X is stale" on this bus,
and whoever maintains the derived data (the overview cache) drops it
and recomputes on the next read.

Delivery is in-process and in subscription order. A failing subscriber
is logged and skipped: the write that triggered the signal has already
succeeded and must not be reported as failed.
"""

import inspect
from collections import defaultdict
from datetime import datetime
from typing import Awaitable, Callable, Optional, Union

import structlog
from pydantic import BaseModel, Field

from src.models.transaction import utc_now


OVERVIEW_KEY = "overview"


class InvalidationEvent(BaseModel):
    """Notification that cached data under `key` is stale."""

    key: str = Field(..., min_length=1)
    user_id: Optional[str] = Field(
        default=None,
        description="Limit the invalidation to one user; None means everyone"
    )
    issued_at: datetime = Field(default_factory=utc_now)


Handler = Callable[[InvalidationEvent], Union[None, Awaitable[None]]]


class InvalidationBus:

    def __init__(self):
        self._subscribers: dict[str, list[Handler]] = defaultdict(list)
        self._logger = structlog.get_logger("budget_tracker.events")

    def subscribe(self, key: str, handler: Handler) -> Callable[[], None]:
        """
        Register a handler for a key.

        Returns a callable that removes the subscription.
        """
        self._subscribers[key].append(handler)

        def unsubscribe() -> None:
            if handler in self._subscribers[key]:
                self._subscribers[key].remove(handler)

        return unsubscribe

    async def invalidate(self, key: str, user_id: Optional[str] = None) -> InvalidationEvent:
        """Publish an invalidation and wait for every subscriber to handle it."""
        event = InvalidationEvent(key=key, user_id=user_id)
        handlers = list(self._subscribers.get(key, ()))

        self._logger.debug(
            "cache_invalidated",
            key=key,
            user_id=user_id,
            subscribers=len(handlers),
        )

        for handler in handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self._logger.error(
                    "invalidation_handler_failed",
                    key=key,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    error=str(e),
                )

        return event
