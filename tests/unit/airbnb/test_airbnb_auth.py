"""
Unit tests for the Airbnb OAuth refresh grant.
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from channel_sync.airbnb.auth import TOKEN_URL, AirbnbTokenService
from channel_sync.credentials.store import Credential, Platform
from channel_sync.errors import AuthError, NotConfigured

CREDENTIAL = Credential(platform=Platform.AIRBNB, scope="user-1", refresh_token="rt-old")


def _session(status_code: int, body: dict) -> Mock:
    session = Mock()
    session.request.return_value = Mock(status_code=status_code)
    session.request.return_value.json.return_value = body
    return session


@pytest.mark.unit
def test_refresh_posts_refresh_token_grant() -> None:
    """Test the form fields of the refresh_token grant and the returned TTL."""
    session = _session(200, {"access_token": "at", "refresh_token": "rt-new", "expires_in": 3600})
    service = AirbnbTokenService("app-id", "app-secret", session=session)

    grant = service(CREDENTIAL)

    assert grant.access_token == "at"
    assert grant.refresh_token == "rt-new"
    assert grant.ttl_seconds == 3600
    method, url = session.request.call_args[0]
    assert (method, url) == ("POST", TOKEN_URL)
    assert session.request.call_args[1]["data"] == {
        "grant_type": "refresh_token",
        "client_id": "app-id",
        "client_secret": "app-secret",
        "refresh_token": "rt-old",
    }


@pytest.mark.unit
def test_refresh_rejected_raises_auth_error() -> None:
    """Test that a revoked refresh token surfaces as AuthError."""
    service = AirbnbTokenService("app-id", "app-secret", session=_session(400, {"error": "x"}))

    with pytest.raises(AuthError):
        service(CREDENTIAL)


@pytest.mark.unit
def test_refresh_without_refresh_token_raises_auth_error() -> None:
    """Test that an expired connection without a refresh token cannot be renewed."""
    service = AirbnbTokenService("app-id", "app-secret", session=Mock())
    credential = Credential(platform=Platform.AIRBNB, scope="user-1", access_token="stale")

    with pytest.raises(AuthError):
        service(credential)


@pytest.mark.unit
def test_refresh_without_app_credentials_raises_not_configured() -> None:
    """Test that missing app credentials are a configuration error."""
    service = AirbnbTokenService(None, None, session=Mock())

    with pytest.raises(NotConfigured):
        service(CREDENTIAL)
