"""
Authentication Provider Contract

DESIGN DECISION: Session issuance belongs to an external identity provider.
The core only needs two things from it:
1. "Who is signed in right now?" -> Identity or None
2. Where to send someone who isn't signed in

SessionAuthProvider is the in-process implementation used by the
Streamlit app (one provider per browser session) and by tests.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.config import get_settings


class Identity(BaseModel):
    """The authenticated principal on whose behalf services execute."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    user_id: str = Field(
        ...,
        min_length=1,
        description="Opaque, stable user identifier"
    )
    email: Optional[str] = None
    display_name: Optional[str] = None


class UnauthenticatedError(Exception):
    """
    No identity could be resolved.

    This is a navigation signal, not a failure to report: callers
    respond by sending the user to `redirect_to`.
    """

    def __init__(self, redirect_to: str, message: str = "Sign-in required"):
        self.redirect_to = redirect_to
        super().__init__(message)


class AuthProvider(ABC):
    """Anything that can answer 'who is the current user?'."""

    @abstractmethod
    async def get_current_identity(self) -> Optional[Identity]:
        """
        Resolve the current identity.

        Returns:
            The identity, or None when nobody is signed in
        """
        pass

    def sign_in_path(self) -> str:
        return get_settings().routing.sign_in_path


class SessionAuthProvider(AuthProvider):
    """Holds at most one signed-in identity for the lifetime of a session."""

    def __init__(self, identity: Optional[Identity] = None):
        self._identity = identity

    async def get_current_identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    def sign_in(self, identity: Identity) -> None:
        self._identity = identity

    def sign_out(self) -> None:
        self._identity = None


async def require_identity(provider: AuthProvider) -> Identity:
    """
    Resolve the identity or raise UnauthenticatedError pointing at sign-in.
    """
    identity = await provider.get_current_identity()
    if identity is None:
        raise UnauthenticatedError(redirect_to=provider.sign_in_path())
    return identity
