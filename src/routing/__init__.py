"""Request routing package."""

from src.routing.guard import (
    RouteAction,
    RouteActionType,
    RouteGuard,
    decide_route,
    normalize_path,
)

__all__ = [
    "RouteAction",
    "RouteActionType",
    "RouteGuard",
    "decide_route",
    "normalize_path",
]
