from datetime import datetime
from typing import Any, Iterable, Optional

from sqlalchemy import delete, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.engine import Connection

from channel_sync.models.smart_locks import SmartLock


def upsert_lock(conn: Connection, row: dict[str, Any]) -> None:
    """
    Insert a smart lock or update it by device_id.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        row (dict[str, Any]): unit_id, device_id, name, status, battery_level, last_activity.
    """
    stmt = insert(SmartLock).values([row])
    stmt = stmt.on_conflict_do_update(
        index_elements=["device_id"],
        set_={
            "unit_id": stmt.excluded.unit_id,
            "name": stmt.excluded.name,
            "status": stmt.excluded.status,
            "battery_level": stmt.excluded.battery_level,
            "last_activity": stmt.excluded.last_activity,
        },
    )
    conn.execute(stmt)


def update_lock_state(
    conn: Connection,
    lock_id: int,
    status: str,
    battery_level: Optional[int],
    last_activity: datetime,
) -> None:
    """
    Store a freshly derived status on one lock.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        lock_id (int): Local lock id.
        status (str): locked, unlocked or unknown.
        battery_level (Optional[int]): Percentage, None if the device reports none.
        last_activity (datetime): Timestamp to record.
    """
    conn.execute(
        update(SmartLock)
        .where(SmartLock.id == lock_id)
        .values(status=status, battery_level=battery_level, last_activity=last_activity)
    )


def delete_locks_by_device_ids(conn: Connection, device_ids: Iterable[str]) -> int:
    """
    Delete locks whose device disappeared from the remote device list.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        device_ids (Iterable[str]): Vendor device ids to remove.

    Returns:
        int: Number of rows deleted.
    """
    ids = list(device_ids)
    if not ids:
        return 0
    result = conn.execute(delete(SmartLock).where(SmartLock.device_id.in_(ids)))
    return result.rowcount
