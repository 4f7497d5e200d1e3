"""
Route Guard

Runs ahead of every page render. For each request it answers one
question: let it through, or redirect it somewhere else?

Decision order:
1. Paths the matcher skips (framework internals, static assets) -> allow
2. The root path -> redirect to the dashboard, signed in or not
3. Signed in -> allow
4. Public paths (sign-in / sign-up and below) -> allow
5. Everything else -> redirect to sign-in

DESIGN DECISION: The decision itself is a pure function of
(path, is_authenticated). Nothing here knows about a web framework's
request or response types, so any front end can drive it.
"""

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from src.audit import AuditLogger
from src.auth import AuthProvider
from src.config import RoutingSettings, get_settings


class RouteActionType(str, Enum):
    ALLOW = "allow"
    REDIRECT = "redirect"


class RouteAction(BaseModel):
    """Outcome of evaluating one request."""
    model_config = ConfigDict(frozen=True)

    type: RouteActionType
    location: Optional[str] = None

    @classmethod
    def allow(cls) -> "RouteAction":
        return cls(type=RouteActionType.ALLOW)

    @classmethod
    def redirect_to(cls, location: str) -> "RouteAction":
        return cls(type=RouteActionType.REDIRECT, location=location)

    @property
    def is_redirect(self) -> bool:
        return self.type == RouteActionType.REDIRECT


def normalize_path(path: str) -> str:
    """Drop query/fragment and any trailing slash (except for the root)."""
    path = path.split("?", 1)[0].split("#", 1)[0] or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


class RouteGuard:

    def __init__(
        self,
        settings: Optional[RoutingSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings().routing
        self._audit_logger = audit_logger

        internal = "|".join(re.escape(p) for p in self._settings.internal_prefixes_list)
        extensions = "|".join(self._settings.static_extensions_list)
        always = "|".join(re.escape(p) for p in self._settings.always_matched_prefixes_list)

        # Negative lookahead skips internals and anything that looks like a static file
        excluded = []
        if internal:
            excluded.append(rf"(?:{internal})(?:/|$)")
        if extensions:
            excluded.append(rf"[^?]*\.(?:{extensions})")
        lookahead = f"(?!{'|'.join(excluded)})" if excluded else ""
        self._page_pattern = re.compile(rf"^/{lookahead}.*$")
        self._always_pattern = re.compile(rf"^/(?:{always})(.*)$") if always else None

    def matches(self, path: str) -> bool:
        """Would the guard run for this path at all?"""
        if self._always_pattern is not None and self._always_pattern.match(path):
            return True
        return bool(self._page_pattern.match(path))

    def is_public(self, path: str) -> bool:
        path = normalize_path(path)
        for public in self._settings.public_paths_list:
            public = normalize_path(public)
            if path == public or path.startswith(public.rstrip("/") + "/"):
                return True
        return False

    def evaluate(self, path: str, is_authenticated: bool) -> RouteAction:
        """Pure decision for one request."""
        if not self.matches(path):
            return RouteAction.allow()

        normalized = normalize_path(path)
        if normalized == normalize_path(self._settings.root_path):
            return RouteAction.redirect_to(self._settings.dashboard_path)

        if is_authenticated:
            return RouteAction.allow()

        if self.is_public(normalized):
            return RouteAction.allow()

        return RouteAction.redirect_to(self._settings.sign_in_path)

    async def intercept(self, path: str, auth_provider: AuthProvider) -> RouteAction:
        """Resolve the auth state, evaluate, and audit any redirect."""
        identity = await auth_provider.get_current_identity()
        authenticated = identity is not None
        action = self.evaluate(path, authenticated)

        if action.is_redirect and self._audit_logger:
            await self._audit_logger.log_request_redirected(
                path=path,
                redirect_to=action.location,
                authenticated=authenticated,
            )

        return action


def decide_route(
    path: str,
    is_authenticated: bool,
    settings: Optional[RoutingSettings] = None,
) -> RouteAction:
    """Functional shortcut for RouteGuard(settings).evaluate(...)."""
    return RouteGuard(settings).evaluate(path, is_authenticated)
