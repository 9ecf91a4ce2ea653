"""
Integration tests for smart lock persistence and reconciliation against Postgres.
"""

from __future__ import annotations

from typing import Any

import pytest

from channel_sync.db.engine import engine
from channel_sync.db.repositories import SqlLockRepository, SqlUnitDirectory
from channel_sync.locks.reconciler import DeviceReconciler, LockRecord
from channel_sync.locks.status import LockStatus
from channel_sync.tuya.client import RemoteDevice
from channel_sync.utils.datetime import utc_now


class StaticDevices:
    def __init__(self, devices: list[RemoteDevice]) -> None:
        self.devices = devices

    def get_all_devices(self, access_token: str) -> list[RemoteDevice]:
        return list(self.devices)

    def get_device_status(self, device_id: str, access_token: str) -> Any:
        return [("lock_state", "locked"), ("battery_percentage", 64)]


@pytest.mark.integration
def test_unit_directory_lists_property_units(test_property):
    """Test that units are read by property."""
    property_id, unit_ids = test_property

    units = SqlUnitDirectory(engine).list_units(property_id)

    assert sorted(u.id for u in units) == sorted(unit_ids)


@pytest.mark.integration
def test_reconcile_creates_updates_and_deletes(test_property):
    """Test a full create, then update and delete, cycle against the database."""
    property_id, unit_ids = test_property
    locks = SqlLockRepository(engine)
    devices = StaticDevices(
        [
            RemoteDevice(id="it-dev-1", name="Lock Villa A"),
            RemoteDevice(id="it-dev-2", name="Villa B front door"),
        ]
    )
    reconciler = DeviceReconciler(devices, SqlUnitDirectory(engine), locks)

    first = reconciler.reconcile(property_id, "tok")
    stored = {lock.device_id: lock for lock in locks.list_locks(property_id)}

    assert first.created == 2
    assert stored["it-dev-1"].unit_id == unit_ids[0]
    assert stored["it-dev-2"].unit_id == unit_ids[1]
    assert stored["it-dev-1"].status is LockStatus.LOCKED
    assert stored["it-dev-1"].battery_level == 64

    devices.devices = devices.devices[:1]
    second = reconciler.reconcile(property_id, "tok")

    assert second.updated == 1
    assert second.deleted == 1
    assert [lock.device_id for lock in locks.list_locks(property_id)] == ["it-dev-1"]


@pytest.mark.integration
def test_get_lock_includes_property_and_state_update(test_property):
    """Test that get_lock joins the property and update_lock_state persists."""
    property_id, unit_ids = test_property
    locks = SqlLockRepository(engine)
    locks.upsert_lock(LockRecord(unit_id=unit_ids[0], device_id="it-dev-9", name="Lock Villa A"))
    lock_id = locks.list_locks(property_id)[0].id

    locks.update_lock_state(lock_id, LockStatus.UNLOCKED, 12, utc_now())
    lock = locks.get_lock(lock_id)

    assert lock is not None
    assert lock.property_id == property_id
    assert lock.status is LockStatus.UNLOCKED
    assert lock.battery_level == 12


@pytest.mark.integration
def test_delete_locks_with_no_ids_is_noop(test_property):
    """Test that an empty delete list deletes nothing."""
    assert SqlLockRepository(engine).delete_locks([]) == 0


@pytest.mark.integration
def test_find_by_device_id_returns_owning_property(test_property):
    """Test that a device can be found without knowing its property."""
    property_id, unit_ids = test_property
    locks = SqlLockRepository(engine)
    locks.upsert_lock(LockRecord(unit_id=unit_ids[1], device_id="it-dev-8", name="Villa B door"))

    found = locks.find_by_device_id("it-dev-8")

    assert found is not None
    assert found.property_id == property_id
    assert found.unit_id == unit_ids[1]
    assert locks.find_by_device_id("it-dev-missing") is None
