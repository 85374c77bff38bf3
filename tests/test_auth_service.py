"""Tests for bearer token resolution."""

from uuid import uuid4

import pytest

from marble_catalog.domain.errors import AuthRequired
from marble_catalog.services.auth import AuthService
from tests.conftest import FakeAuthClient


def test_resolve_owner_from_bearer_header() -> None:
    owner = uuid4()
    service = AuthService(FakeAuthClient(tokens={"good": owner}))

    assert service.resolve_owner("Bearer good") == owner
    assert service.resolve_owner("bearer   good ") == owner


@pytest.mark.parametrize("header", [None, "", "Basic good", "Bearer ", "Bearer bad"])
def test_resolve_owner_returns_none_for_missing_or_invalid(header) -> None:
    service = AuthService(FakeAuthClient(tokens={"good": uuid4()}))

    assert service.resolve_owner(header) is None
    with pytest.raises(AuthRequired):
        service.require_owner(header)
