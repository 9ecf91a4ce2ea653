from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection


def get_sync_record(conn: Connection, pms_unit_id: str, platform: str) -> Optional[dict[str, Any]]:
    """
    Fetch the listing linkage of a unit on one platform.

    Args:
        conn (Connection): Active DB connection.
        pms_unit_id (str): Local unit id.
        platform (str): Target platform.

    Returns:
        Optional[dict[str, Any]]: Sync record row, or None if the unit was never pushed.
    """
    result = conn.execute(
        text(
            """
            SELECT pms_unit_id, external_listing_id, platform, last_sync_at,
                   sync_settings, is_sync_enabled
            FROM channel_sync.sync_records
            WHERE pms_unit_id = :pms_unit_id AND platform = :platform
        """
        ),
        {"pms_unit_id": pms_unit_id, "platform": platform},
    )
    row = result.mappings().fetchone()
    return dict(row) if row else None
