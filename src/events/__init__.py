"""Cache invalidation events."""

from src.events.bus import OVERVIEW_KEY, InvalidationBus, InvalidationEvent

__all__ = ["OVERVIEW_KEY", "InvalidationBus", "InvalidationEvent"]
