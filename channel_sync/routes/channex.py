"""Channex connection, ARI push, booking and webhook routes."""

from __future__ import annotations

from typing import Any, Callable

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.engine import Engine

from channel_sync.channex.ari import collapse_date_ranges
from channel_sync.channex.catalog import sync_channex_catalog
from channel_sync.channex.client import ChannexClient
from channel_sync.channex.scenarios import SCENARIOS, CertificationIds, run_scenario
from channel_sync.credentials.store import CredentialStore, Platform
from channel_sync.dependencies import (
    ChannexClientFactory,
    get_channex_client_factory,
    get_credential_store,
    get_db_engine,
)
from channel_sync.routes._errors import raise_http_error
from channel_sync.schemas.channex import (
    AvailabilityPushPayload,
    BookingPayload,
    ChannexConnectPayload,
    ChannexDisconnectPayload,
    ChannexWebhookPayload,
    RestrictionsPushPayload,
    ScenarioRunPayload,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


def run_catalog_sync(engine: Engine, client: ChannexClient, user_id: str) -> None:
    """Background wrapper around sync_channex_catalog that logs instead of raising."""
    try:
        sync_channex_catalog(engine, client, user_id)
    except Exception as e:
        logger.exception("channex_catalog_sync_failed", user_id=user_id, error=str(e))


def _client_for(
    store: CredentialStore, client_factory: ChannexClientFactory, user_id: str
) -> ChannexClient:
    credential = store.get(Platform.CHANNEX, user_id)
    return client_factory(credential.api_key or "")


@router.post("/connect", status_code=status.HTTP_200_OK)
def connect_channex(
    payload: ChannexConnectPayload,
    background_tasks: BackgroundTasks,
    db: Engine = Depends(get_db_engine),
    store: CredentialStore = Depends(get_credential_store),
    client_factory: ChannexClientFactory = Depends(get_channex_client_factory),
) -> dict[str, Any]:
    """
    Validate and store a Channex API key, then mirror the catalog in background.

    Args:
        payload: user_id and api_key
        background_tasks: FastAPI background task runner

    Returns:
        dict: Confirmation that the catalog sync was scheduled
    """
    try:
        client = client_factory(payload.api_key)
        if not client.validate_api_key():
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Channex API key"
            )

        store.connect(Platform.CHANNEX, payload.user_id, api_key=payload.api_key)
        logger.info("channex_connected", user_id=payload.user_id)

        background_tasks.add_task(run_catalog_sync, db, client, payload.user_id)
        return {"success": True, "message": "Channex connected. Catalog sync scheduled."}
    except Exception as e:
        raise_http_error(e, "channex_connect_failed", user_id=payload.user_id)


@router.post("/disconnect", status_code=status.HTTP_200_OK)
def disconnect_channex(
    payload: ChannexDisconnectPayload,
    store: CredentialStore = Depends(get_credential_store),
) -> dict[str, Any]:
    try:
        store.clear(Platform.CHANNEX, payload.user_id)
        logger.info("channex_disconnected", user_id=payload.user_id)
        return {"success": True}
    except Exception as e:
        raise_http_error(e, "channex_disconnect_failed", user_id=payload.user_id)


@router.post("/ari/availability", status_code=status.HTTP_200_OK)
def push_availability(
    payload: AvailabilityPushPayload,
    store: CredentialStore = Depends(get_credential_store),
    client_factory: ChannexClientFactory = Depends(get_channex_client_factory),
) -> dict[str, Any]:
    """
    Push per-day availability, merged into date ranges.

    Returns:
        dict: Number of range items sent and Channex's response
    """
    try:
        client = _client_for(store, client_factory, payload.user_id)
        ranges = collapse_date_ranges(v.model_dump(mode="json") for v in payload.values)
        result = client.push_availability_updates(ranges)
        return {"success": True, "ranges": len(ranges), "result": result}
    except Exception as e:
        raise_http_error(e, "channex_availability_push_failed", user_id=payload.user_id)


@router.post("/ari/restrictions", status_code=status.HTTP_200_OK)
def push_restrictions(
    payload: RestrictionsPushPayload,
    store: CredentialStore = Depends(get_credential_store),
    client_factory: ChannexClientFactory = Depends(get_channex_client_factory),
) -> dict[str, Any]:
    """Push per-day rates and restrictions, merged into date ranges."""
    try:
        client = _client_for(store, client_factory, payload.user_id)
        ranges = collapse_date_ranges(
            v.model_dump(mode="json", exclude_none=True) for v in payload.values
        )
        result = client.push_restrictions_updates(ranges)
        return {"success": True, "ranges": len(ranges), "result": result}
    except Exception as e:
        raise_http_error(e, "channex_restrictions_push_failed", user_id=payload.user_id)


@router.post("/bookings", status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingPayload,
    store: CredentialStore = Depends(get_credential_store),
    client_factory: ChannexClientFactory = Depends(get_channex_client_factory),
) -> dict[str, Any]:
    try:
        client = _client_for(store, client_factory, payload.user_id)
        booking_id = client.create_booking(payload.booking)
        return {"success": True, "booking_id": booking_id}
    except Exception as e:
        raise_http_error(e, "channex_booking_create_failed", user_id=payload.user_id)


@router.put("/bookings/{booking_id}", status_code=status.HTTP_200_OK)
def update_booking(
    booking_id: str,
    payload: BookingPayload,
    store: CredentialStore = Depends(get_credential_store),
    client_factory: ChannexClientFactory = Depends(get_channex_client_factory),
) -> dict[str, Any]:
    try:
        client = _client_for(store, client_factory, payload.user_id)
        result = client.update_booking(booking_id, payload.booking)
        return {"success": True, "result": result}
    except Exception as e:
        raise_http_error(e, "channex_booking_update_failed", booking_id=booking_id)


@router.post("/bookings/{booking_id}/cancel", status_code=status.HTTP_200_OK)
def cancel_booking(
    booking_id: str,
    payload: BookingPayload,
    store: CredentialStore = Depends(get_credential_store),
    client_factory: ChannexClientFactory = Depends(get_channex_client_factory),
) -> dict[str, Any]:
    try:
        client = _client_for(store, client_factory, payload.user_id)
        result = client.cancel_booking(booking_id, payload.booking)
        return {"success": True, "result": result}
    except Exception as e:
        raise_http_error(e, "channex_booking_cancel_failed", booking_id=booking_id)


@router.get("/test-scenarios", status_code=status.HTTP_200_OK)
def list_test_scenarios() -> dict[str, Any]:
    return {"scenarios": list(SCENARIOS)}


@router.post("/test-scenarios", status_code=status.HTTP_200_OK)
def run_test_scenario(
    payload: ScenarioRunPayload,
    store: CredentialStore = Depends(get_credential_store),
    client_factory: ChannexClientFactory = Depends(get_channex_client_factory),
) -> dict[str, Any]:
    """
    Run one certification scenario with the user's Channex key.

    Returns:
        dict: The scenario name and what Channex answered for each call
    """
    try:
        client = _client_for(store, client_factory, payload.user_id)
        ids = None
        if payload.property_id and payload.room_type_id and payload.rate_plan_id:
            ids = CertificationIds(
                property_id=payload.property_id,
                room_type_id=payload.room_type_id,
                rate_plan_id=payload.rate_plan_id,
                second_rate_plan_id=payload.second_rate_plan_id,
            )
        result = run_scenario(client, payload.test_case, ids=ids, start=payload.start_date)
        return {"success": True, "test_case": payload.test_case, "result": result}
    except Exception as e:
        raise_http_error(
            e, "channex_scenario_failed", user_id=payload.user_id, test_case=payload.test_case
        )


def handle_new_reservation(event: ChannexWebhookPayload) -> None:
    logger.info("channex_reservation_new", property_id=event.property_id, payload=event.payload)


def handle_reservation_updated(event: ChannexWebhookPayload) -> None:
    logger.info(
        "channex_reservation_updated", property_id=event.property_id, payload=event.payload
    )


def handle_reservation_cancelled(event: ChannexWebhookPayload) -> None:
    logger.info(
        "channex_reservation_cancelled", property_id=event.property_id, payload=event.payload
    )


def handle_rate_changed(event: ChannexWebhookPayload) -> None:
    logger.info("channex_rate_changed", property_id=event.property_id, payload=event.payload)


def handle_availability_changed(event: ChannexWebhookPayload) -> None:
    logger.info(
        "channex_availability_changed", property_id=event.property_id, payload=event.payload
    )


WEBHOOK_HANDLERS: dict[str, Callable[[ChannexWebhookPayload], None]] = {
    "new_reservation": handle_new_reservation,
    "reservation_updated": handle_reservation_updated,
    "reservation_cancelled": handle_reservation_cancelled,
    "rate_changed": handle_rate_changed,
    "availability_changed": handle_availability_changed,
}


@router.post("/webhook", status_code=status.HTTP_200_OK)
def receive_channex_webhook(payload: ChannexWebhookPayload) -> dict[str, bool]:
    """
    Acknowledge a Channex webhook event.

    Known event types are dispatched to their handler; unknown ones are
    logged and still acknowledged.

    Returns:
        dict: ``{"success": True}``
    """
    logger.info(
        "channex_webhook_received",
        event_type=payload.event_type,
        property_id=payload.property_id,
    )

    handler = WEBHOOK_HANDLERS.get(payload.event_type or "")
    if handler is None:
        logger.warning("channex_webhook_unknown_event", event_type=payload.event_type)
        return {"success": True}

    try:
        handler(payload)
    except Exception as e:
        raise_http_error(e, "channex_webhook_failed", event_type=payload.event_type)
    return {"success": True}
