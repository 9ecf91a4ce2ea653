"""
Unit tests for the Airbnb routes.
"""

from __future__ import annotations

from unittest.mock import MagicMock, Mock, patch

import pytest
from fastapi.testclient import TestClient

from channel_sync.airbnb.client import CalendarUpdate
from channel_sync.credentials.store import Platform
from channel_sync.errors import InvalidRequest, NotFound


@pytest.mark.unit
@patch("channel_sync.routes.airbnb.sync_unit_to_airbnb")
def test_sync_unit_passes_listing_defaults(
    mock_sync: Mock, client: TestClient, db: MagicMock, airbnb_client: Mock
) -> None:
    """Test that occupancy fields from the payload become listing defaults."""
    mock_sync.return_value = {"created": True, "listing": {"id": 42}}

    response = client.post(
        "/airbnb/sync",
        json={
            "user_id": "user-1",
            "action": "sync_unit_to_airbnb",
            "pms_unit_id": "u1",
            "accommodates": 4,
        },
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "created": True, "listing": {"id": 42}}
    args, kwargs = mock_sync.call_args
    assert args == (db, airbnb_client, "user-1", "u1")
    assert kwargs["defaults"].accommodates == 4
    assert kwargs["defaults"].bedrooms == 1


@pytest.mark.unit
def test_sync_unit_for_foreign_unit_returns_404(client: TestClient) -> None:
    """Test that a unit the user does not own maps to 404."""
    with patch(
        "channel_sync.routes.airbnb.sync_unit_to_airbnb", side_effect=NotFound("Unit u9 not found")
    ):
        response = client.post(
            "/airbnb/sync",
            json={"user_id": "user-1", "action": "sync_unit_to_airbnb", "pms_unit_id": "u9"},
        )

    assert response.status_code == 404


@pytest.mark.unit
@pytest.mark.parametrize("action", ["sync_price", "sync_availability"])
def test_sync_requires_listing_id(client: TestClient, action: str) -> None:
    """Test that price and availability sync need an Airbnb listing id."""
    response = client.post(
        "/airbnb/sync", json={"user_id": "user-1", "action": action, "pms_unit_id": "u1"}
    )

    assert response.status_code == 400
    assert "airbnb_listing_id" in response.json()["detail"]


@pytest.mark.unit
def test_sync_price_without_unit_price_returns_400(client: TestClient) -> None:
    """Test that a unit without a nightly price is a client error."""
    with patch(
        "channel_sync.routes.airbnb.sync_price",
        side_effect=InvalidRequest("Unit u1 has no price_per_night"),
    ):
        response = client.post(
            "/airbnb/sync",
            json={
                "user_id": "user-1",
                "action": "sync_price",
                "pms_unit_id": "u1",
                "airbnb_listing_id": "L1",
            },
        )

    assert response.status_code == 400


@pytest.mark.unit
def test_sync_availability_with_no_days_returns_400(client: TestClient) -> None:
    """Test that an empty availability list is rejected before any call."""
    response = client.post(
        "/airbnb/sync",
        json={
            "user_id": "user-1",
            "action": "sync_availability",
            "pms_unit_id": "u1",
            "airbnb_listing_id": "L1",
        },
    )

    assert response.status_code == 400


@pytest.mark.unit
@patch("channel_sync.routes.airbnb.sync_availability")
def test_sync_availability_builds_calendar_updates(mock_sync: Mock, client: TestClient) -> None:
    """Test that calendar days are converted and month count is returned."""
    mock_sync.return_value = 2

    response = client.post(
        "/airbnb/sync",
        json={
            "user_id": "user-1",
            "action": "sync_availability",
            "pms_unit_id": "u1",
            "airbnb_listing_id": "L1",
            "availability": [
                {"date": "2025-06-30", "available": True, "price": 120},
                {"date": "2025-07-01", "available": False},
            ],
        },
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "months": 2, "days": 2}
    updates = mock_sync.call_args.args[5]
    assert all(isinstance(u, CalendarUpdate) for u in updates)
    assert [u.date for u in updates] == ["2025-06-30", "2025-07-01"]


@pytest.mark.unit
def test_connect_stores_tokens_with_expiry(client: TestClient, store: Mock) -> None:
    """Test that connect stores the tokens and a computed expiry."""
    response = client.post(
        "/airbnb/connect",
        json={"user_id": "user-1", "access_token": "at", "refresh_token": "rt", "expires_in": 3600},
    )

    assert response.status_code == 200
    args, kwargs = store.connect.call_args
    assert args == (Platform.AIRBNB, "user-1")
    assert kwargs["access_token"] == "at"
    assert kwargs["refresh_token"] == "rt"
    assert "expires_at" in kwargs


@pytest.mark.unit
def test_disconnect_clears_tokens(client: TestClient, store: Mock) -> None:
    """Test that disconnect clears the user's Airbnb credential."""
    response = client.post("/airbnb/disconnect", json={"user_id": "user-1"})

    assert response.status_code == 200
    store.clear.assert_called_once_with(Platform.AIRBNB, "user-1")


@pytest.mark.unit
def test_token_without_connection_returns_404(client: TestClient, airbnb_client: Mock) -> None:
    """Test that a user without a usable token gets 404."""
    airbnb_client.get_user_access_token.return_value = None

    response = client.get("/airbnb/token", params={"user_id": "user-1"})

    assert response.status_code == 404


@pytest.mark.unit
def test_connection_and_listings(client: TestClient, airbnb_client: Mock) -> None:
    """Test the connection check and the listing count."""
    airbnb_client.has_valid_connection.return_value = True
    airbnb_client.get_listings.return_value = [{"id": 1}, {"id": 2}]

    connection = client.get("/airbnb/connection", params={"user_id": "user-1"})
    listings = client.get("/airbnb/listings", params={"user_id": "user-1"})

    assert connection.json() == {"connected": True}
    assert listings.json()["count"] == 2


@pytest.mark.unit
def test_add_listing_photos_forwards_urls(client: TestClient, airbnb_client: Mock) -> None:
    """Test that the photo route passes the listing id and URLs through unchanged."""
    airbnb_client.add_listing_photos.return_value = {
        "success": True,
        "photo_ids": [11],
        "message": "1 photos added successfully",
    }

    response = client.post(
        "/airbnb/listings/L1/photos",
        json={"user_id": "user-1", "photo_urls": ["https://x/a.jpg"]},
    )

    assert response.status_code == 200
    assert response.json()["photo_ids"] == [11]
    airbnb_client.add_listing_photos.assert_called_once_with("user-1", "L1", ["https://x/a.jpg"])


@pytest.mark.unit
def test_sync_availability_rejects_impossible_date(
    client: TestClient, airbnb_client: Mock
) -> None:
    """Test that a calendar day that does not exist is a validation error."""
    response = client.post(
        "/airbnb/sync",
        json={
            "user_id": "user-1",
            "action": "sync_availability",
            "pms_unit_id": "u1",
            "airbnb_listing_id": "L1",
            "availability": [{"date": "2025-02-30", "available": True}],
        },
    )

    assert response.status_code == 422
    airbnb_client.update_calendar.assert_not_called()
