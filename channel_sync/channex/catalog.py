"""
Pull the Channex catalog into the local mirror tables.

Runs after a successful connect. A failure on one sub-resource of one
property is logged and skipped; the rest of the catalog still syncs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

import structlog
from sqlalchemy.engine import Engine

from channel_sync.channex.client import ChannexClient
from channel_sync.db.writers.channex import (
    upsert_channex_properties,
    upsert_channex_property_channels,
    upsert_channex_rate_plans,
    upsert_channex_room_types,
)
from channel_sync.db.writers.credentials import upsert_credential
from channel_sync.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


@dataclass
class CatalogSyncResult:
    properties: int = 0
    room_types: int = 0
    rate_plans: int = 0
    property_channels: int = 0
    errors: list[str] = field(default_factory=list)


def _sub_resources() -> tuple[tuple[str, str, Callable[..., None]], ...]:
    return (
        ("room_types", "get_room_types", upsert_channex_room_types),
        ("rate_plans", "get_rate_plans", upsert_channex_rate_plans),
        ("property_channels", "get_property_channels", upsert_channex_property_channels),
    )


def sync_channex_catalog(engine: Engine, client: ChannexClient, user_id: str) -> CatalogSyncResult:
    """
    Mirror properties, room types, rate plans and property channels.

    Args:
        engine (Engine): SQLAlchemy engine.
        client (ChannexClient): Client bound to the user's API key.
        user_id (str): Owner of the Channex connection.

    Returns:
        CatalogSyncResult: Per-resource counts and the sub-resources that failed.

    Raises:
        RemoteApiError: If the property list itself cannot be fetched.
    """
    result = CatalogSyncResult()
    properties: list[dict[str, Any]] = client.get_properties()

    with engine.begin() as conn:
        upsert_channex_properties(conn, user_id, properties)
    result.properties = len(properties)

    for prop in properties:
        property_id = prop["id"]
        for name, getter, writer in _sub_resources():
            try:
                items = getattr(client, getter)(property_id)
                with engine.begin() as conn:
                    writer(conn, property_id, items)
                setattr(result, name, getattr(result, name) + len(items))
            except Exception as e:
                logger.error(
                    "channex_catalog_resource_failed",
                    user_id=user_id,
                    property_id=property_id,
                    resource=name,
                    error=str(e),
                )
                result.errors.append(f"{name}:{property_id}")

    with engine.begin() as conn:
        upsert_credential(conn, "channex", user_id, {"last_sync_at": utc_now()})

    logger.info(
        "channex_catalog_synced",
        user_id=user_id,
        properties=result.properties,
        room_types=result.room_types,
        rate_plans=result.rate_plans,
        property_channels=result.property_channels,
        failed=len(result.errors),
    )
    return result
