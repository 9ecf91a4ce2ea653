"""Writers for the local Channex catalog mirror."""

from typing import Any

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.engine import Connection

from channel_sync.channex.client import read_field
from channel_sync.models.channex import (
    ChannexProperty,
    ChannexPropertyChannel,
    ChannexRatePlan,
    ChannexRoomType,
)
from channel_sync.utils.datetime import utc_now


def _mirror(
    conn: Connection,
    table: type,
    key_column: str,
    rows: list[dict[str, Any]],
    fixed: tuple[str, ...] = (),
) -> None:
    """
    Upsert catalog rows keyed by their Channex id.

    A stored row is rewritten only when its raw_payload differs, so re-pulling
    an unchanged catalog leaves updated_at alone. When an id appears twice in
    one batch the last occurrence wins. Columns in ``fixed`` keep their stored
    value on conflict.
    """
    if not rows:
        return

    unique = list({row[key_column]: row for row in rows}.values())
    stmt = insert(table).values(unique)
    updated = [col for col in unique[0] if col != key_column and col not in fixed]
    stmt = stmt.on_conflict_do_update(
        index_elements=[key_column],
        set_={col: getattr(stmt.excluded, col) for col in updated},
        where=table.raw_payload.is_distinct_from(stmt.excluded.raw_payload),
    )
    conn.execute(stmt)


def upsert_channex_properties(conn: Connection, user_id: str, items: list[dict[str, Any]]) -> None:
    now = utc_now()
    rows = [
        {
            "channex_property_id": item["id"],
            "user_id": user_id,
            "name": read_field(item, "name", "title"),
            "currency_code": read_field(item, "currency_code", "currency"),
            "timezone": read_field(item, "timezone"),
            "raw_payload": item,
            "updated_at": now,
        }
        for item in items
    ]
    _mirror(conn, ChannexProperty, "channex_property_id", rows, fixed=("user_id",))


def upsert_channex_room_types(
    conn: Connection, property_id: str, items: list[dict[str, Any]]
) -> None:
    now = utc_now()
    rows = [
        {
            "channex_room_type_id": item["id"],
            "channex_property_id": property_id,
            "name": read_field(item, "name", "title"),
            "raw_payload": item,
            "updated_at": now,
        }
        for item in items
    ]
    _mirror(conn, ChannexRoomType, "channex_room_type_id", rows)


def upsert_channex_rate_plans(
    conn: Connection, property_id: str, items: list[dict[str, Any]]
) -> None:
    now = utc_now()
    rows = [
        {
            "channex_rate_plan_id": item["id"],
            "channex_property_id": property_id,
            "channex_room_type_id": read_field(item, "room_type_id"),
            "name": read_field(item, "name", "title"),
            "raw_payload": item,
            "updated_at": now,
        }
        for item in items
    ]
    _mirror(conn, ChannexRatePlan, "channex_rate_plan_id", rows)


def upsert_channex_property_channels(
    conn: Connection, property_id: str, items: list[dict[str, Any]]
) -> None:
    now = utc_now()
    rows = [
        {
            "channex_property_channel_id": item["id"],
            "channex_property_id": property_id,
            "channel_name": read_field(item, "channel_name", "channel", "title"),
            "is_enabled": bool(read_field(item, "is_enabled", "is_active")),
            "raw_payload": item,
            "updated_at": now,
        }
        for item in items
    ]
    _mirror(conn, ChannexPropertyChannel, "channex_property_channel_id", rows)
