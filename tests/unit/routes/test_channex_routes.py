"""
Unit tests for the Channex routes.
"""

from __future__ import annotations

from unittest.mock import MagicMock, Mock, patch

import pytest
from fastapi.testclient import TestClient

from channel_sync.credentials.store import Credential, Platform
from channel_sync.errors import NotConfigured, RemoteApiError
from channel_sync.routes.channex import run_catalog_sync


@pytest.fixture
def connected(store: Mock) -> Mock:
    """Store holding a Channex API key for user-1."""
    store.get.return_value = Credential(platform=Platform.CHANNEX, scope="user-1", api_key="key")
    return store


@pytest.mark.unit
def test_connect_invalid_key_returns_401(
    client: TestClient, store: Mock, channex_client: Mock
) -> None:
    """Test that a key Channex rejects is never stored."""
    channex_client.validate_api_key.return_value = False

    response = client.post("/channex/connect", json={"user_id": "user-1", "api_key": "bad"})

    assert response.status_code == 401
    store.connect.assert_not_called()


@pytest.mark.unit
def test_connect_stores_key_and_schedules_catalog_sync(
    client: TestClient, db: MagicMock, store: Mock, channex_client: Mock
) -> None:
    """Test that a valid key is stored and the catalog mirror runs in background."""
    channex_client.validate_api_key.return_value = True

    with patch("channel_sync.routes.channex.run_catalog_sync") as mock_sync:
        response = client.post("/channex/connect", json={"user_id": "user-1", "api_key": "key"})

    assert response.status_code == 200
    store.connect.assert_called_once_with(Platform.CHANNEX, "user-1", api_key="key")
    mock_sync.assert_called_once_with(db, channex_client, "user-1")


@pytest.mark.unit
def test_run_catalog_sync_logs_instead_of_raising() -> None:
    """Test that a background catalog failure does not escape the task."""
    with patch(
        "channel_sync.routes.channex.sync_channex_catalog", side_effect=RuntimeError("boom")
    ):
        run_catalog_sync(MagicMock(), Mock(), "user-1")


@pytest.mark.unit
def test_disconnect_clears_key(client: TestClient, store: Mock) -> None:
    """Test that disconnect clears the user's Channex credential."""
    response = client.post("/channex/disconnect", json={"user_id": "user-1"})

    assert response.status_code == 200
    store.clear.assert_called_once_with(Platform.CHANNEX, "user-1")


@pytest.mark.unit
def test_availability_push_collapses_consecutive_days(
    client: TestClient, connected: Mock, channex_client: Mock
) -> None:
    """Test that three equal consecutive days go out as one range item."""
    channex_client.push_availability_updates.return_value = {"data": []}
    values = [
        {"property_id": "p", "room_type_id": "r", "date": day, "availability": 2}
        for day in ("2025-06-01", "2025-06-02", "2025-06-03")
    ]

    response = client.post(
        "/channex/ari/availability", json={"user_id": "user-1", "values": values}
    )

    assert response.status_code == 200
    assert response.json()["ranges"] == 1
    channex_client.push_availability_updates.assert_called_once_with(
        [
            {
                "property_id": "p",
                "room_type_id": "r",
                "date_from": "2025-06-01",
                "date_to": "2025-06-03",
                "availability": 2,
            }
        ]
    )


@pytest.mark.unit
def test_restrictions_push_drops_unset_fields(
    client: TestClient, connected: Mock, channex_client: Mock
) -> None:
    """Test that only the restriction fields the caller set are sent."""
    channex_client.push_restrictions_updates.return_value = {"data": []}
    values = [{"property_id": "p", "rate_plan_id": "rp", "date": "2025-06-01", "rate": "120.00"}]

    response = client.post(
        "/channex/ari/restrictions", json={"user_id": "user-1", "values": values}
    )

    assert response.status_code == 200
    sent = channex_client.push_restrictions_updates.call_args.args[0]
    assert sent == [
        {
            "property_id": "p",
            "rate_plan_id": "rp",
            "date_from": "2025-06-01",
            "date_to": "2025-06-01",
            "rate": "120.00",
        }
    ]


@pytest.mark.unit
@pytest.mark.parametrize("day", ["2025-02-30", "2025-13-01", "tomorrow"])
def test_ari_push_rejects_impossible_dates(
    client: TestClient, connected: Mock, channex_client: Mock, day: str
) -> None:
    """Test that a date that does not exist is a validation error, not a server error."""
    values = [{"property_id": "p", "room_type_id": "r", "date": day, "availability": 1}]

    response = client.post(
        "/channex/ari/availability", json={"user_id": "user-1", "values": values}
    )

    assert response.status_code == 422
    channex_client.push_availability_updates.assert_not_called()


@pytest.mark.unit
def test_ari_push_without_connection_returns_404(client: TestClient, store: Mock) -> None:
    """Test that pushing ARI for a user without an API key maps to 404."""
    store.get.side_effect = NotConfigured("channex is not configured for user-1")
    values = [{"property_id": "p", "room_type_id": "r", "date": "2025-06-01", "availability": 1}]

    response = client.post(
        "/channex/ari/availability", json={"user_id": "user-1", "values": values}
    )

    assert response.status_code == 404


@pytest.mark.unit
def test_channex_error_is_reported_as_bad_gateway(
    client: TestClient, connected: Mock, channex_client: Mock
) -> None:
    """Test that a Channex error status is surfaced with its body."""
    channex_client.create_booking.side_effect = RemoteApiError(422, {"errors": {"arrival": "bad"}})

    response = client.post(
        "/channex/bookings", json={"user_id": "user-1", "booking": {"arrival_date": "x"}}
    )

    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["status"] == 422
    assert detail["body"] == {"errors": {"arrival": "bad"}}


@pytest.mark.unit
def test_create_booking_returns_201_with_id(
    client: TestClient, connected: Mock, channex_client: Mock
) -> None:
    """Test that a created booking returns its Channex id."""
    channex_client.create_booking.return_value = "b-1"

    response = client.post(
        "/channex/bookings", json={"user_id": "user-1", "booking": {"property_id": "p"}}
    )

    assert response.status_code == 201
    assert response.json() == {"success": True, "booking_id": "b-1"}


@pytest.mark.unit
def test_cancel_booking_passes_booking_body(
    client: TestClient, connected: Mock, channex_client: Mock
) -> None:
    """Test that the cancel route delegates to the client with the path id."""
    channex_client.cancel_booking.return_value = {"data": {"id": "b-1", "status": "cancelled"}}
    response = client.post(
        "/channex/bookings/b-1/cancel", json={"user_id": "user-1", "booking": {"notes": "guest"}}
    )

    assert response.status_code == 200
    channex_client.cancel_booking.assert_called_once_with("b-1", {"notes": "guest"})


@pytest.mark.unit
def test_webhook_known_event_is_dispatched(client: TestClient) -> None:
    """Test that a known event type reaches its handler."""
    handler = Mock()
    with patch.dict("channel_sync.routes.channex.WEBHOOK_HANDLERS", {"new_reservation": handler}):
        response = client.post(
            "/channex/webhook",
            json={"event_type": "new_reservation", "property_id": "p", "payload": {"id": "b"}},
        )

    assert response.status_code == 200
    assert response.json() == {"success": True}
    handler.assert_called_once()


@pytest.mark.unit
def test_webhook_unknown_event_is_acknowledged(client: TestClient) -> None:
    """Test that an unknown event type still returns success."""
    response = client.post("/channex/webhook", json={"event_type": "something_new"})

    assert response.status_code == 200
    assert response.json() == {"success": True}


@pytest.mark.unit
def test_scenario_route_runs_with_explicit_ids(
    client: TestClient, connected: Mock, channex_client: Mock
) -> None:
    """Test that given ids are used as-is and the catalog is not queried."""
    channex_client.push_availability_updates.return_value = {"data": [{"id": "task-1"}]}

    response = client.post(
        "/channex/test-scenarios",
        json={
            "user_id": "user-1",
            "test_case": "single-date-availability-update",
            "start_date": "2026-01-01",
            "property_id": "p1",
            "room_type_id": "twin",
            "rate_plan_id": "bar",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["test_case"] == "single-date-availability-update"
    assert body["result"]["ranges"][0]["date_from"] == "2026-06-01"
    channex_client.get_properties.assert_not_called()


@pytest.mark.unit
def test_scenario_route_unknown_case_returns_400(
    client: TestClient, connected: Mock, channex_client: Mock
) -> None:
    """Test that an unknown scenario name is a client error."""
    response = client.post(
        "/channex/test-scenarios", json={"user_id": "user-1", "test_case": "nope"}
    )

    assert response.status_code == 400
    channex_client.push_availability_updates.assert_not_called()


@pytest.mark.unit
def test_scenario_list_names_every_case(client: TestClient) -> None:
    response = client.get("/channex/test-scenarios")

    assert response.status_code == 200
    assert "booking-receiving" in response.json()["scenarios"]
