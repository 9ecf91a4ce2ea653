"""Airbnb connection and unit sync routes."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.engine import Engine

from channel_sync.airbnb.client import AirbnbClient, CalendarUpdate
from channel_sync.airbnb.listings import ListingDefaults
from channel_sync.credentials.store import CredentialStore, Platform
from channel_sync.dependencies import get_airbnb_client, get_credential_store, get_db_engine
from channel_sync.routes._errors import raise_http_error
from channel_sync.schemas.airbnb import (
    AirbnbConnectPayload,
    AirbnbDisconnectPayload,
    AirbnbSyncPayload,
    ListingPhotosPayload,
)
from channel_sync.services.airbnb_sync import sync_availability, sync_price, sync_unit_to_airbnb
from channel_sync.utils.datetime import utc_now

logger = structlog.get_logger(__name__)
router = APIRouter()


def _require_listing_id(payload: AirbnbSyncPayload) -> str:
    if not payload.airbnb_listing_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"airbnb_listing_id is required for {payload.action}",
        )
    return payload.airbnb_listing_id


@router.post("/sync", status_code=status.HTTP_200_OK)
def sync_airbnb(
    payload: AirbnbSyncPayload,
    db: Engine = Depends(get_db_engine),
    client: AirbnbClient = Depends(get_airbnb_client),
) -> dict[str, Any]:
    """
    Run one Airbnb sync action for a unit.

    Actions:
        sync_unit_to_airbnb: Create the listing, or update it when a listing id is given.
        sync_price: Push the unit's nightly price.
        sync_availability: Push calendar days, one request per month.

    Returns:
        dict: Action result
    """
    try:
        if payload.action == "sync_unit_to_airbnb":
            result = sync_unit_to_airbnb(
                db,
                client,
                payload.user_id,
                payload.pms_unit_id,
                airbnb_listing_id=payload.airbnb_listing_id,
                defaults=ListingDefaults(
                    accommodates=payload.accommodates,
                    bedrooms=payload.bedrooms,
                    bathrooms=payload.bathrooms,
                    currency=payload.currency,
                ),
                sync_options=payload.sync_options,
            )
            return {"success": True, **result}

        listing_id = _require_listing_id(payload)

        if payload.action == "sync_price":
            listing = sync_price(
                db, client, payload.user_id, payload.pms_unit_id, listing_id, payload.currency
            )
            return {"success": True, "listing": listing}

        updates = [CalendarUpdate(**day.model_dump(mode="json")) for day in payload.availability]
        if not updates:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="availability must not be empty"
            )
        months = sync_availability(
            db, client, payload.user_id, payload.pms_unit_id, listing_id, updates, payload.currency
        )
        return {"success": True, "months": months, "days": len(updates)}
    except Exception as e:
        raise_http_error(
            e, "airbnb_sync_failed", action=payload.action, pms_unit_id=payload.pms_unit_id
        )


@router.post("/connect", status_code=status.HTTP_200_OK)
def connect_airbnb(
    payload: AirbnbConnectPayload,
    store: CredentialStore = Depends(get_credential_store),
) -> dict[str, Any]:
    """Store tokens from a completed OAuth exchange."""
    try:
        fields: dict[str, Any] = {"access_token": payload.access_token}
        if payload.refresh_token:
            fields["refresh_token"] = payload.refresh_token
        if payload.expires_in is not None:
            fields["expires_at"] = utc_now() + timedelta(seconds=payload.expires_in)

        store.connect(Platform.AIRBNB, payload.user_id, **fields)
        logger.info("airbnb_connected", user_id=payload.user_id)
        return {"success": True}
    except Exception as e:
        raise_http_error(e, "airbnb_connect_failed", user_id=payload.user_id)


@router.post("/disconnect", status_code=status.HTTP_200_OK)
def disconnect_airbnb(
    payload: AirbnbDisconnectPayload,
    store: CredentialStore = Depends(get_credential_store),
) -> dict[str, Any]:
    try:
        store.clear(Platform.AIRBNB, payload.user_id)
        logger.info("airbnb_disconnected", user_id=payload.user_id)
        return {"success": True, "message": "Airbnb account disconnected successfully"}
    except Exception as e:
        raise_http_error(e, "airbnb_disconnect_failed", user_id=payload.user_id)


@router.get("/token", status_code=status.HTTP_200_OK)
def get_airbnb_token(
    user_id: str = Query(...),
    client: AirbnbClient = Depends(get_airbnb_client),
) -> dict[str, str]:
    """
    Return a usable access token, refreshing it first if it has expired.

    Raises:
        HTTPException: 404 without a connection, 401 if the refresh fails.
    """
    try:
        token = client.get_user_access_token(user_id)
        if token is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No valid Airbnb connection found for user",
            )
        return {"access_token": token}
    except Exception as e:
        raise_http_error(e, "airbnb_token_failed", user_id=user_id)


@router.get("/connection", status_code=status.HTTP_200_OK)
def airbnb_connection(
    user_id: str = Query(...),
    client: AirbnbClient = Depends(get_airbnb_client),
) -> dict[str, bool]:
    try:
        return {"connected": client.has_valid_connection(user_id)}
    except Exception as e:
        raise_http_error(e, "airbnb_connection_check_failed", user_id=user_id)


@router.get("/listings", status_code=status.HTTP_200_OK)
def list_airbnb_listings(
    user_id: str = Query(...),
    client: AirbnbClient = Depends(get_airbnb_client),
) -> dict[str, Any]:
    try:
        listings = client.get_listings(user_id)
        return {"listings": listings, "count": len(listings)}
    except Exception as e:
        raise_http_error(e, "airbnb_listings_failed", user_id=user_id)


@router.post("/listings/{listing_id}/photos", status_code=status.HTTP_200_OK)
def add_airbnb_listing_photos(
    listing_id: str,
    payload: ListingPhotosPayload,
    client: AirbnbClient = Depends(get_airbnb_client),
) -> dict[str, Any]:
    """Upload photos to an Airbnb listing in the given order."""
    try:
        return client.add_listing_photos(payload.user_id, listing_id, payload.photo_urls)
    except Exception as e:
        raise_http_error(
            e, "airbnb_listing_photos_failed", user_id=payload.user_id, listing_id=listing_id
        )
