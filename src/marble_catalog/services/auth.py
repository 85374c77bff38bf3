"""Resolve request credentials to an owner id."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from marble_catalog.domain.errors import AuthRequired


class AuthClient(Protocol):
    """Interface for verifying access tokens."""

    def get_user_id(self, access_token: str) -> UUID | None:
        """Return the user id behind a token, or None if it is not valid."""


@dataclass
class AuthService:
    """Turns an ``Authorization`` header into an authenticated owner."""

    client: AuthClient

    def resolve_owner(self, authorization: str | None) -> UUID | None:
        """Return the owner id for a bearer header, or None when absent or invalid."""
        token = _bearer_token(authorization)
        if token is None:
            return None
        return self.client.get_user_id(token)

    def require_owner(self, authorization: str | None) -> UUID:
        """Return the owner id or raise ``AuthRequired``."""
        owner = self.resolve_owner(authorization)
        if owner is None:
            raise AuthRequired()
        return owner


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
