from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection


def get_locks_for_property(conn: Connection, property_id: str) -> list[dict[str, Any]]:
    """
    List smart locks attached to any unit of a property.

    Args:
        conn (Connection): Active DB connection.
        property_id (str): Local property id.

    Returns:
        list[dict[str, Any]]: Lock rows.
    """
    result = conn.execute(
        text(
            """
            SELECT l.id, l.unit_id, l.device_id, l.name, l.status,
                   l.battery_level, l.last_activity
            FROM channel_sync.smart_locks l
            JOIN channel_sync.units u ON u.id = l.unit_id
            WHERE u.property_id = :property_id
        """
        ),
        {"property_id": property_id},
    )
    return [dict(row) for row in result.mappings().fetchall()]


def get_lock(conn: Connection, lock_id: int) -> Optional[dict[str, Any]]:
    """
    Fetch one lock with the property its unit belongs to.

    Args:
        conn (Connection): Active DB connection.
        lock_id (int): Local lock id.

    Returns:
        Optional[dict[str, Any]]: Lock row plus property_id, or None.
    """
    result = conn.execute(
        text(
            """
            SELECT l.id, l.unit_id, l.device_id, l.name, l.status,
                   l.battery_level, l.last_activity, u.property_id
            FROM channel_sync.smart_locks l
            JOIN channel_sync.units u ON u.id = l.unit_id
            WHERE l.id = :lock_id
        """
        ),
        {"lock_id": lock_id},
    )
    row = result.mappings().fetchone()
    return dict(row) if row else None


def get_lock_by_device_id(conn: Connection, device_id: str) -> Optional[dict[str, Any]]:
    """
    Fetch the lock stored for a Tuya device, whichever property owns it.

    Args:
        conn (Connection): Active DB connection.
        device_id (str): Tuya device id.

    Returns:
        Optional[dict[str, Any]]: Lock row plus property_id, or None.
    """
    result = conn.execute(
        text(
            """
            SELECT l.id, l.unit_id, l.device_id, l.name, l.status,
                   l.battery_level, l.last_activity, u.property_id
            FROM channel_sync.smart_locks l
            JOIN channel_sync.units u ON u.id = l.unit_id
            WHERE l.device_id = :device_id
        """
        ),
        {"device_id": device_id},
    )
    row = result.mappings().fetchone()
    return dict(row) if row else None
