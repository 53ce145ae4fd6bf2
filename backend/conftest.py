"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_user`` factory fixture for creating test users.
  - ``auth_header`` fixture for authenticated requests (JWT).
  - an autouse fixture that runs notification jobs inline.
"""

from __future__ import annotations

import pytest
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def eager_notifications(settings):
    """Run dispatcher jobs in the calling thread; no gateway by default."""
    settings.NOTIFICATIONS = {
        **settings.NOTIFICATIONS,
        "EAGER": True,
        "WAAPI_INSTANCE_ID": "",
        "WAAPI_API_KEY": "",
        "SEND_DELAY_SECONDS": 0,
    }


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def create_user(db):
    """
    Factory fixture that creates a user with sensible defaults.

    Usage::

        def test_something(create_user):
            user = create_user(role="manager", phone="03001234567")
    """
    from accounts.models import User, UserRole

    _counter = 0

    def _factory(
        *,
        email: str | None = None,
        password: str = "TestPass123!",
        name: str | None = None,
        role=UserRole.CLIENT,
        is_active: bool = True,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if email is None:
            email = f"user{_counter}@test.local"
        if name is None:
            name = f"Test User {_counter}"
        return User.objects.create_user(
            email=email,
            password=password,
            name=name,
            role=role,
            is_active=is_active,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def auth_header(create_user):
    """
    Returns a helper that creates a user and returns an
    ``Authorization`` header dict with a valid JWT access token.

    Usage::

        def test_protected(auth_header, api_client):
            header = auth_header(role="admin")
            api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(**user_kwargs) -> dict[str, str]:
        user = create_user(**user_kwargs)
        token = AccessToken.for_user(user)
        return {"Authorization": f"Bearer {token}"}

    return _make
