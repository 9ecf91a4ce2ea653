"""
Push local units to Airbnb listings.

Each operation performs the Airbnb call first and then records the linkage
in sync_records. The record is bookkeeping: if writing it fails the error is
logged and counted, and the already-successful push is still reported.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, Optional

import structlog
from sqlalchemy.engine import Engine

from channel_sync.airbnb.client import AirbnbClient, CalendarUpdate
from channel_sync.airbnb.listings import (
    ListingDefaults,
    LocalListing,
    price_update,
    to_airbnb_update,
)
from channel_sync.db.readers.units import get_owned_unit
from channel_sync.db.writers.sync_records import upsert_sync_record
from channel_sync.errors import InvalidRequest, NotFound
from channel_sync.metrics import sync_records_failed

logger = structlog.get_logger(__name__)

PLATFORM = "airbnb"


def record_sync(
    engine: Engine,
    pms_unit_id: str,
    external_listing_id: Optional[str],
    sync_settings: Optional[dict[str, Any]] = None,
) -> bool:
    """
    Upsert the sync record for a unit, never raising.

    Returns:
        bool: True if the record was written.
    """
    try:
        with engine.begin() as conn:
            upsert_sync_record(conn, pms_unit_id, PLATFORM, external_listing_id, sync_settings)
        return True
    except Exception as e:
        sync_records_failed.labels(platform=PLATFORM).inc()
        logger.error(
            "sync_record_write_failed",
            pms_unit_id=pms_unit_id,
            external_listing_id=external_listing_id,
            error=str(e),
        )
        return False


def _load_unit(engine: Engine, user_id: str, pms_unit_id: str) -> dict[str, Any]:
    with engine.connect() as conn:
        unit = get_owned_unit(conn, user_id, pms_unit_id)
    if unit is None:
        raise NotFound(f"Unit {pms_unit_id} not found for user {user_id}")
    return unit


def sync_unit_to_airbnb(
    engine: Engine,
    client: AirbnbClient,
    user_id: str,
    pms_unit_id: str,
    airbnb_listing_id: Optional[str] = None,
    defaults: Optional[ListingDefaults] = None,
    sync_options: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Create the unit's Airbnb listing, or update it when a listing id is given.

    Args:
        engine: SQLAlchemy engine.
        client: Airbnb client.
        user_id: Owner of the unit and of the Airbnb connection.
        pms_unit_id: Local unit id.
        airbnb_listing_id: Existing listing to update; None creates one.
        defaults: Occupancy values for fields units do not track.
        sync_options: Stored as the record's sync_settings.

    Returns:
        dict[str, Any]: ``{"created": bool, "listing": <airbnb listing>}``.

    Raises:
        NotFound: If the unit is not the user's.
        NotConnected: If Airbnb is not connected.
    """
    defaults = defaults or ListingDefaults()
    unit = _load_unit(engine, user_id, pms_unit_id)
    listing = LocalListing.from_unit(unit)

    if airbnb_listing_id:
        update = to_airbnb_update(listing, defaults)
        result = client.update_listing(user_id, airbnb_listing_id, update)
        listing_id = airbnb_listing_id
        created = False
    else:
        result = client.create_listing(user_id, listing, defaults)
        listing_id = str(result["id"]) if result.get("id") is not None else None
        created = True

    logger.info(
        "airbnb_unit_synced", user_id=user_id, pms_unit_id=pms_unit_id, listing_id=listing_id,
        created=created,
    )
    record_sync(engine, pms_unit_id, listing_id, sync_options)
    return {"created": created, "listing": result}


def sync_price(
    engine: Engine,
    client: AirbnbClient,
    user_id: str,
    pms_unit_id: str,
    airbnb_listing_id: str,
    currency: Optional[str] = None,
) -> dict[str, Any]:
    """
    Push the unit's nightly price as the listing's default price.

    Raises:
        NotFound: If the unit is not the user's.
        NotConnected: If Airbnb is not connected.
        InvalidRequest: If the unit has no price.
    """
    unit = _load_unit(engine, user_id, pms_unit_id)
    if unit.get("price_per_night") is None:
        raise InvalidRequest(f"Unit {pms_unit_id} has no price_per_night")

    result = client.update_listing(
        user_id,
        airbnb_listing_id,
        price_update(Decimal(str(unit["price_per_night"])), currency),
    )
    logger.info("airbnb_price_synced", pms_unit_id=pms_unit_id, listing_id=airbnb_listing_id)
    record_sync(engine, pms_unit_id, airbnb_listing_id, {"price": True})
    return result


def sync_availability(
    engine: Engine,
    client: AirbnbClient,
    user_id: str,
    pms_unit_id: str,
    airbnb_listing_id: str,
    updates: Iterable[CalendarUpdate],
    currency: Optional[str] = None,
) -> int:
    """
    Push availability days to the listing calendar.

    Returns:
        int: Number of month requests sent.
    """
    _load_unit(engine, user_id, pms_unit_id)
    months = client.update_calendar(user_id, airbnb_listing_id, updates, currency)
    logger.info(
        "airbnb_availability_synced",
        pms_unit_id=pms_unit_id,
        listing_id=airbnb_listing_id,
        months=months,
    )
    record_sync(engine, pms_unit_id, airbnb_listing_id, {"availability": True})
    return months
