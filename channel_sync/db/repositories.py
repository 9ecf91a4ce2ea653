"""
Engine-backed implementations of the persistence interfaces.

The sync components depend only on the small Protocols they declare
(CredentialRepository, UnitDirectory, LockRepository). These classes satisfy
them with the readers and writers in this package; unit tests use
in-memory fakes instead.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

from sqlalchemy.engine import Engine

from channel_sync.credentials.store import Credential
from channel_sync.db.readers.credentials import get_credential_row
from channel_sync.db.readers.smart_locks import (
    get_lock,
    get_lock_by_device_id,
    get_locks_for_property,
)
from channel_sync.db.readers.units import get_units_for_property
from channel_sync.db.writers.credentials import clear_credential, upsert_credential
from channel_sync.db.writers.smart_locks import (
    delete_locks_by_device_ids,
    update_lock_state,
    upsert_lock,
)
from channel_sync.locks.reconciler import LockRecord, UnitRef
from channel_sync.locks.status import LockStatus


class SqlCredentialRepository:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def load(self, platform: str, scope: str) -> Optional[Credential]:
        with self.engine.connect() as conn:
            row = get_credential_row(conn, platform, scope)
        return Credential.from_row(row) if row else None

    def save(self, platform: str, scope: str, fields: dict[str, Any]) -> None:
        with self.engine.begin() as conn:
            upsert_credential(conn, platform, scope, fields)

    def clear(self, platform: str, scope: str) -> None:
        with self.engine.begin() as conn:
            clear_credential(conn, platform, scope)


class SqlUnitDirectory:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def list_units(self, property_id: str) -> list[UnitRef]:
        with self.engine.connect() as conn:
            rows = get_units_for_property(conn, property_id)
        return [UnitRef(id=row["id"], name=row["name"]) for row in rows]


def _lock_from_row(row: dict[str, Any]) -> LockRecord:
    return LockRecord(
        id=row["id"],
        unit_id=row["unit_id"],
        device_id=row["device_id"],
        name=row["name"],
        status=LockStatus(row["status"]) if row.get("status") else LockStatus.UNKNOWN,
        battery_level=row.get("battery_level"),
        last_activity=row.get("last_activity"),
        property_id=row.get("property_id"),
    )


class SqlLockRepository:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def list_locks(self, property_id: str) -> list[LockRecord]:
        with self.engine.connect() as conn:
            rows = get_locks_for_property(conn, property_id)
        return [_lock_from_row({**row, "property_id": property_id}) for row in rows]

    def get_lock(self, lock_id: int) -> Optional[LockRecord]:
        with self.engine.connect() as conn:
            row = get_lock(conn, lock_id)
        return _lock_from_row(row) if row else None

    def find_by_device_id(self, device_id: str) -> Optional[LockRecord]:
        with self.engine.connect() as conn:
            row = get_lock_by_device_id(conn, device_id)
        return _lock_from_row(row) if row else None

    def upsert_lock(self, lock: LockRecord) -> None:
        with self.engine.begin() as conn:
            upsert_lock(
                conn,
                {
                    "unit_id": lock.unit_id,
                    "device_id": lock.device_id,
                    "name": lock.name,
                    "status": lock.status.value,
                    "battery_level": lock.battery_level,
                    "last_activity": lock.last_activity,
                },
            )

    def update_lock_state(
        self,
        lock_id: int,
        status: LockStatus,
        battery_level: Optional[int],
        last_activity: datetime,
    ) -> None:
        with self.engine.begin() as conn:
            update_lock_state(conn, lock_id, status.value, battery_level, last_activity)

    def delete_locks(self, device_ids: Iterable[str]) -> int:
        with self.engine.begin() as conn:
            return delete_locks_by_device_ids(conn, device_ids)
