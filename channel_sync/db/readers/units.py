from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection


def get_units_for_property(conn: Connection, property_id: str) -> list[dict[str, Any]]:
    """
    List the units of one property.

    Args:
        conn (Connection): Active DB connection.
        property_id (str): Local property id.

    Returns:
        list[dict[str, Any]]: Rows with id and name.
    """
    result = conn.execute(
        text(
            """
            SELECT id, name
            FROM channel_sync.units
            WHERE property_id = :property_id
            ORDER BY name
        """
        ),
        {"property_id": property_id},
    )
    return [dict(row) for row in result.mappings().fetchall()]


def get_owned_unit(conn: Connection, user_id: str, unit_id: str) -> Optional[dict[str, Any]]:
    """
    Fetch a unit joined with its property, if the property belongs to the user.

    Args:
        conn (Connection): Active DB connection.
        user_id (str): Owner of the property.
        unit_id (str): Local unit id.

    Returns:
        Optional[dict[str, Any]]: Unit and property columns, or None.
    """
    result = conn.execute(
        text(
            """
            SELECT u.id, u.name, u.price_per_night, u.property_id,
                   p.user_id, p.name AS property_name, p.address, p.city, p.country
            FROM channel_sync.units u
            JOIN channel_sync.properties p ON p.id = u.property_id
            WHERE u.id = :unit_id AND p.user_id = :user_id
        """
        ),
        {"unit_id": unit_id, "user_id": user_id},
    )
    row = result.mappings().fetchone()
    return dict(row) if row else None


def property_belongs_to_user(conn: Connection, property_id: str, user_id: str) -> bool:
    """
    Check property ownership.

    Args:
        conn (Connection): Active DB connection.
        property_id (str): Local property id.
        user_id (str): Claimed owner.

    Returns:
        bool: True if the property exists and is owned by the user.
    """
    result = conn.execute(
        text(
            "SELECT 1 FROM channel_sync.properties WHERE id = :property_id AND user_id = :user_id"
        ),
        {"property_id": property_id, "user_id": user_id},
    )
    return result.fetchone() is not None
