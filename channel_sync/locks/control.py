"""Lock, unlock and status refresh for one smart lock."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Protocol

import requests
import structlog

from channel_sync.config import LOCK_STATUS_DELAY_SECONDS
from channel_sync.errors import ChannelSyncError, CommandRejected
from channel_sync.locks.commands import LockCommand, LockIntent, candidate_commands
from channel_sync.locks.reconciler import LockRecord, LockRepository
from channel_sync.locks.status import LockStatus, derive_battery_level, derive_lock_status
from channel_sync.metrics import lock_commands
from channel_sync.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


class CommandTransport(Protocol):
    def get_device_specification(self, device_id: str, access_token: str) -> dict[str, Any]: ...

    def send_command(
        self, device_id: str, commands: list[dict[str, Any]], access_token: str
    ) -> bool: ...

    def get_device_status(self, device_id: str, access_token: str) -> Any: ...


@dataclass(frozen=True)
class LockState:
    status: LockStatus
    battery_level: Optional[int]
    command: Optional[LockCommand] = None


class LockController:
    """
    Send lock/unlock commands and keep the local row in step.

    State propagation on Tuya's side is asynchronous, so after an accepted
    command the controller waits ``delay_seconds`` before reading the status
    back. This is a polling workaround; the status read may still be stale.

    Args:
        transport: Tuya client.
        locks: Local lock storage.
        delay_seconds: Wait between command and status read.
        sleep: Sleep function, replaced in tests.
        clock: Timestamp source for last_activity.
    """

    def __init__(
        self,
        transport: CommandTransport,
        locks: LockRepository,
        delay_seconds: float = LOCK_STATUS_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.transport = transport
        self.locks = locks
        self.delay_seconds = delay_seconds
        self.sleep = sleep
        self.clock = clock

    def _specification(self, device_id: str, access_token: str) -> Optional[dict[str, Any]]:
        try:
            return self.transport.get_device_specification(device_id, access_token)
        except (ChannelSyncError, requests.RequestException) as e:
            logger.warning("lock_specification_unavailable", device_id=device_id, error=str(e))
            return None

    def execute(self, lock: LockRecord, intent: LockIntent, access_token: str) -> LockState:
        """
        Lock or unlock a device.

        Candidates are sent one at a time and the first accepted command
        stops the loop; commands are never sent concurrently to one device.

        Args:
            lock: Local lock row.
            intent: Lock or unlock.
            access_token: Valid Tuya token.

        Returns:
            LockState: Status read back after the command, and the command used.

        Raises:
            CommandRejected: If no candidate command was accepted.
        """
        device_id = lock.device_id
        specification = self._specification(device_id, access_token)
        candidates = candidate_commands(intent, specification)

        accepted: Optional[LockCommand] = None
        for command in candidates:
            try:
                self.transport.send_command(device_id, [command.as_payload()], access_token)
            except (ChannelSyncError, requests.RequestException) as e:
                lock_commands.labels(
                    intent=intent.value, code=command.code, status="rejected"
                ).inc()
                logger.info(
                    "lock_command_rejected",
                    device_id=device_id,
                    intent=intent.value,
                    code=command.code,
                    error=str(e),
                )
                continue
            lock_commands.labels(intent=intent.value, code=command.code, status="accepted").inc()
            accepted = command
            break

        if accepted is None:
            logger.warning(
                "lock_command_exhausted",
                device_id=device_id,
                intent=intent.value,
                tried=[c.code for c in candidates],
            )
            raise CommandRejected(f"No {intent.value} command accepted by device {device_id}")

        logger.info(
            "lock_command_accepted", device_id=device_id, intent=intent.value, code=accepted.code
        )
        self.sleep(self.delay_seconds)
        state = self.refresh_status(lock, access_token)
        return LockState(state.status, state.battery_level, accepted)

    def refresh_status(self, lock: LockRecord, access_token: str) -> LockState:
        """
        Read the device status and store the derived state on the lock row.

        A failed row update is logged; the freshly read state is still returned.
        """
        status = self.transport.get_device_status(lock.device_id, access_token)
        lock_status = derive_lock_status(status)
        battery = derive_battery_level(status)

        if lock.id is not None:
            try:
                self.locks.update_lock_state(lock.id, lock_status, battery, self.clock())
            except Exception as e:
                logger.error("lock_state_update_failed", lock_id=lock.id, error=str(e))

        return LockState(lock_status, battery)
