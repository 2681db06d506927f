"""Abstract identity verifier interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class AuthenticationError(Exception):
    pass


@dataclass
class Identity:
    uid: str
    email: str | None = None
    email_verified: bool = False
    display_name: str | None = None
    photo_url: str | None = None


class IdentityVerifier(ABC):
    @abstractmethod
    async def verify(self, token: str) -> Identity:
        """Return the identity behind a bearer token or raise AuthenticationError."""
        ...


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
