"""Shared FastAPI dependencies."""

from uuid import UUID

from fastapi import Depends, Header, Request

from marble_catalog.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the running app."""
    return request.app.state.container


def current_owner(
    authorization: str | None = Header(default=None),
    container: AppContainer = Depends(get_container),
) -> UUID | None:
    """Return the authenticated owner, or None for anonymous callers."""
    return container.auth_service.resolve_owner(authorization)
