"""
In-memory stand-ins for the Tuya client and lock storage, shared by unit tests.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, Optional

import pytest

from channel_sync.errors import ProtocolError
from channel_sync.locks.reconciler import LockRecord
from channel_sync.locks.status import LockStatus
from channel_sync.tuya.client import RemoteDevice


class FakeTuya:
    """Device list, per-device status and a command log."""

    def __init__(self) -> None:
        self.devices: list[RemoteDevice] = []
        self.status: dict[str, Any] = {}
        self.specification: Optional[dict[str, Any]] = None
        self.accepted_codes: set[str] = set()
        self.sent: list[dict[str, Any]] = []

    def get_devices(
        self, access_token: str, page: int = 1, page_size: int = 20
    ) -> list[RemoteDevice]:
        start = (page - 1) * page_size
        return self.devices[start : start + page_size]

    def get_all_devices(self, access_token: str) -> list[RemoteDevice]:
        return list(self.devices)

    def get_device_status(self, device_id: str, access_token: str) -> Any:
        value = self.status.get(device_id, ())
        if isinstance(value, Exception):
            raise value
        return value

    def get_device_specification(self, device_id: str, access_token: str) -> dict[str, Any]:
        if self.specification is None:
            raise ProtocolError("specification not available")
        return self.specification

    def send_command(
        self, device_id: str, commands: list[dict[str, Any]], access_token: str
    ) -> bool:
        self.sent.extend(commands)
        if commands[0]["code"] not in self.accepted_codes:
            raise ProtocolError(f"command {commands[0]['code']} not supported")
        return True


class FakeLocks:
    """
    Lock rows keyed by device_id, ids assigned on insert.

    A row without a property_id is listed under every property.
    """

    def __init__(self) -> None:
        self.rows: dict[str, LockRecord] = {}
        self.next_id = 1
        self.fail_upsert_for: set[str] = set()
        self.state_updates: list[tuple[int, LockStatus, Optional[int]]] = []

    def list_locks(self, property_id: str) -> list[LockRecord]:
        return [lock for lock in self.rows.values() if lock.property_id in (None, property_id)]

    def get_lock(self, lock_id: int) -> Optional[LockRecord]:
        return next((lock for lock in self.rows.values() if lock.id == lock_id), None)

    def find_by_device_id(self, device_id: str) -> Optional[LockRecord]:
        return self.rows.get(device_id)

    def upsert_lock(self, lock: LockRecord) -> None:
        if lock.device_id in self.fail_upsert_for:
            raise RuntimeError("write failed")
        current = self.rows.get(lock.device_id)
        lock_id = current.id if current else self.next_id
        if current is None:
            self.next_id += 1
        self.rows[lock.device_id] = replace(lock, id=lock_id)

    def update_lock_state(
        self,
        lock_id: int,
        status: LockStatus,
        battery_level: Optional[int],
        last_activity: datetime,
    ) -> None:
        self.state_updates.append((lock_id, status, battery_level))

    def delete_locks(self, device_ids: Iterable[str]) -> int:
        deleted = 0
        for device_id in list(device_ids):
            if self.rows.pop(device_id, None) is not None:
                deleted += 1
        return deleted


@pytest.fixture
def tuya() -> FakeTuya:
    return FakeTuya()


@pytest.fixture
def locks() -> FakeLocks:
    return FakeLocks()