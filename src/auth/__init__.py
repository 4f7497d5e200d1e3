"""Authentication package."""

from src.auth.provider import (
    AuthProvider,
    Identity,
    SessionAuthProvider,
    UnauthenticatedError,
    require_identity,
)

__all__ = [
    "AuthProvider",
    "Identity",
    "SessionAuthProvider",
    "UnauthenticatedError",
    "require_identity",
]
