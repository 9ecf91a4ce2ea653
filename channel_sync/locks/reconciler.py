"""
Keep local smart_locks rows congruent with a property's Tuya device list.

One run is a full reconciliation for one property:

1. Load the property's units as match candidates.
2. List every remote device and keep the lock-like ones.
3. Match each device to a unit by name; unmatched devices are skipped, never
   stored unassigned.
4. Read each matched device's status and derive lock state and battery.
5. Upsert the lock by device_id.
6. Delete local locks whose device is no longer in the lock-like remote set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Protocol

import requests
import structlog

from channel_sync.errors import ChannelSyncError, NoMatch
from channel_sync.locks.matching import SubstringUnitMatcher, UnitMatcher
from channel_sync.locks.status import LockStatus, derive_battery_level, derive_lock_status
from channel_sync.metrics import reconcile_total
from channel_sync.tuya.client import RemoteDevice
from channel_sync.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

LOCK_CATEGORIES = frozenset({"dl", "cl", "ml", "wk"})
LOCK_NAME_KEYWORDS = ("lock", "door", "porte")


@dataclass(frozen=True)
class UnitRef:
    id: str
    name: str


@dataclass(frozen=True)
class LockRecord:
    unit_id: str
    device_id: str
    name: str
    status: LockStatus = LockStatus.UNKNOWN
    battery_level: Optional[int] = None
    last_activity: Optional[datetime] = None
    id: Optional[int] = None
    property_id: Optional[str] = None


class UnitDirectory(Protocol):
    def list_units(self, property_id: str) -> list[UnitRef]: ...


class LockRepository(Protocol):
    def list_locks(self, property_id: str) -> list[LockRecord]: ...

    def get_lock(self, lock_id: int) -> Optional[LockRecord]: ...

    def find_by_device_id(self, device_id: str) -> Optional[LockRecord]: ...

    def upsert_lock(self, lock: LockRecord) -> None: ...

    def update_lock_state(
        self,
        lock_id: int,
        status: LockStatus,
        battery_level: Optional[int],
        last_activity: datetime,
    ) -> None: ...

    def delete_locks(self, device_ids: Iterable[str]) -> int: ...


class DeviceSource(Protocol):
    def get_all_devices(self, access_token: str) -> list[RemoteDevice]: ...

    def get_device_status(self, device_id: str, access_token: str) -> Any: ...


@dataclass
class ReconcileResult:
    created: int = 0
    updated: int = 0
    skipped: int = 0
    deleted: int = 0
    failed: int = 0
    deletion_skipped: bool = False
    device_ids: list[str] = field(default_factory=list)

    @property
    def synced(self) -> int:
        return self.created + self.updated


def is_lock_like(device: RemoteDevice) -> bool:
    """A device is a lock if its category is a lock category or its name says so."""
    if device.category and device.category.lower() in LOCK_CATEGORIES:
        return True
    name = (device.name or "").lower()
    return any(keyword in name for keyword in LOCK_NAME_KEYWORDS)


class DeviceReconciler:
    """
    Project remote lock devices onto local smart_locks rows.

    Args:
        devices: Tuya client (anything with get_all_devices / get_device_status).
        units: Local unit directory.
        locks: Local lock storage.
        matcher: Device-name to unit resolution strategy.
        clock: Timestamp source for last_activity.
    """

    def __init__(
        self,
        devices: DeviceSource,
        units: UnitDirectory,
        locks: LockRepository,
        matcher: Optional[UnitMatcher] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.devices = devices
        self.units = units
        self.locks = locks
        self.matcher = matcher or SubstringUnitMatcher()
        self.clock = clock

    def reconcile(
        self, property_id: str, access_token: str, allow_empty_delete: bool = False
    ) -> ReconcileResult:
        """
        Run one full reconciliation for a property.

        Args:
            property_id: Local property id; scopes units and locks.
            access_token: Valid Tuya token for the property's cloud project.
            allow_empty_delete: Delete every local lock when the remote
                lock-like set is empty. Off by default.

        Returns:
            ReconcileResult: Per-outcome counts.

        Raises:
            RemoteApiError, ProtocolError: If the device list cannot be fetched.
                Nothing is written or deleted in that case.
        """
        result = ReconcileResult()
        log = logger.bind(property_id=property_id)

        candidates = {unit.name: unit.id for unit in self.units.list_units(property_id)}

        remote = self.devices.get_all_devices(access_token)
        lock_like = [device for device in remote if is_lock_like(device)]
        existing = {lock.device_id: lock for lock in self.locks.list_locks(property_id)}

        log.info(
            "lock_reconcile_started",
            units=len(candidates),
            remote_devices=len(remote),
            lock_like=len(lock_like),
            local_locks=len(existing),
        )

        for device in lock_like:
            outcome = self._sync_device(device, candidates, existing, access_token, log)
            setattr(result, outcome, getattr(result, outcome) + 1)
            reconcile_total.labels(outcome=outcome).inc()
            if outcome in ("created", "updated"):
                result.device_ids.append(device.id)

        remote_ids = {device.id for device in lock_like}
        stale = [device_id for device_id in existing if device_id not in remote_ids]

        if stale and not lock_like and not allow_empty_delete:
            result.deletion_skipped = True
            log.warning(
                "lock_reconcile_delete_skipped", reason="empty_remote_set", stale=len(stale)
            )
        elif stale:
            result.deleted = self.locks.delete_locks(stale)
            reconcile_total.labels(outcome="deleted").inc(result.deleted)
            log.info("lock_reconcile_deleted", device_ids=stale, deleted=result.deleted)

        log.info(
            "lock_reconcile_completed",
            created=result.created,
            updated=result.updated,
            skipped=result.skipped,
            deleted=result.deleted,
            failed=result.failed,
        )
        return result

    def _sync_device(
        self,
        device: RemoteDevice,
        candidates: dict[str, str],
        existing: dict[str, LockRecord],
        access_token: str,
        log: Any,
    ) -> str:
        """Match, read status and upsert one device. Returns the outcome name."""
        unit_id = self.matcher.match(device.name, candidates)
        if unit_id is None:
            skip = NoMatch(device.id, device.name)
            log.info("lock_device_unmatched", device_id=device.id, reason=str(skip))
            return "skipped"

        try:
            status = self.devices.get_device_status(device.id, access_token)
            lock_status = derive_lock_status(status)
            battery = derive_battery_level(status)
        except (ChannelSyncError, requests.RequestException) as e:
            log.warning("lock_status_unavailable", device_id=device.id, error=str(e))
            lock_status, battery = LockStatus.UNKNOWN, None

        previous = existing.get(device.id) or self.locks.find_by_device_id(device.id)
        if previous is not None and device.id not in existing:
            log.info(
                "lock_device_moved",
                device_id=device.id,
                from_property_id=previous.property_id,
            )

        record = LockRecord(
            unit_id=unit_id,
            device_id=device.id,
            name=device.name,
            status=lock_status,
            battery_level=battery,
            last_activity=self.clock(),
        )
        try:
            self.locks.upsert_lock(record)
        except Exception as e:
            log.error("lock_upsert_failed", device_id=device.id, error=str(e))
            return "failed"

        return "updated" if previous is not None else "created"
