from typing import Any, Optional

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.engine import Connection

from channel_sync.models.sync_records import SyncRecord
from channel_sync.utils.datetime import utc_now


def upsert_sync_record(
    conn: Connection,
    pms_unit_id: str,
    platform: str,
    external_listing_id: Optional[str],
    sync_settings: Optional[dict[str, Any]] = None,
) -> None:
    """
    Record that a unit was pushed to a platform listing.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        pms_unit_id (str): Local unit id.
        platform (str): Target platform.
        external_listing_id (Optional[str]): Remote listing id.
        sync_settings (Optional[dict[str, Any]]): Which facets are synced (price, availability).
    """
    values = {
        "pms_unit_id": pms_unit_id,
        "platform": platform,
        "external_listing_id": external_listing_id,
        "sync_settings": sync_settings or {},
        "is_sync_enabled": True,
        "last_sync_at": utc_now(),
    }
    stmt = insert(SyncRecord).values([values])
    stmt = stmt.on_conflict_do_update(
        index_elements=["pms_unit_id", "platform"],
        set_={
            "external_listing_id": stmt.excluded.external_listing_id,
            "sync_settings": stmt.excluded.sync_settings,
            "is_sync_enabled": stmt.excluded.is_sync_enabled,
            "last_sync_at": stmt.excluded.last_sync_at,
        },
    )
    conn.execute(stmt)
