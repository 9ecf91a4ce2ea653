"""
Canonical lock status and battery level from Tuya data points.

Lock firmwares report state under different codes. Codes are checked in a
fixed priority order and the first one present decides.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Iterable, Optional


class LockStatus(str, Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    UNKNOWN = "unknown"


# (code, inverted). door_contact reports "door open", so truthy means unlocked.
# switch is device-dependent; most lock firmwares use it as "bolt engaged".
LOCK_STATUS_CODES: tuple[tuple[str, bool], ...] = (
    ("lock_state", False),
    ("lock", False),
    ("switch", False),
    ("door_contact", True),
)

BATTERY_CODES: tuple[str, ...] = (
    "battery_percentage",
    "electricity",
    "bat_percent",
    "battery",
)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

LOCKED_WORDS = frozenset({"locked", "lock", "close", "closed"})
UNLOCKED_WORDS = frozenset({"unlocked", "unlock", "open", "opened"})


def _truthy_status(value: Any) -> LockStatus:
    """Map a raw value to locked/unlocked assuming truthy means locked."""
    if isinstance(value, bool):
        return LockStatus.LOCKED if value else LockStatus.UNLOCKED
    if isinstance(value, (int, float)):
        return LockStatus.LOCKED if value else LockStatus.UNLOCKED
    if isinstance(value, str):
        word = value.strip().lower()
        if word in LOCKED_WORDS or word in ("true", "1"):
            return LockStatus.LOCKED
        if word in UNLOCKED_WORDS or word in ("false", "0"):
            return LockStatus.UNLOCKED
    return LockStatus.UNKNOWN


def _invert(status: LockStatus) -> LockStatus:
    if status is LockStatus.LOCKED:
        return LockStatus.UNLOCKED
    if status is LockStatus.UNLOCKED:
        return LockStatus.LOCKED
    return status


def derive_lock_status(status: Iterable[tuple[str, Any]]) -> LockStatus:
    """
    Derive the canonical lock state from (code, value) pairs.

    Args:
        status: Data points as reported by the device.

    Returns:
        LockStatus: First known code in priority order decides. UNKNOWN if
        none is present or its value cannot be interpreted.

    Example:
        >>> derive_lock_status([("lock_state", "Locked")])
        <LockStatus.LOCKED: 'locked'>
        >>> derive_lock_status([("door_contact", True)])
        <LockStatus.UNLOCKED: 'unlocked'>
    """
    values = dict(status)
    for code, inverted in LOCK_STATUS_CODES:
        if code in values:
            derived = _truthy_status(values[code])
            return _invert(derived) if inverted else derived
    return LockStatus.UNKNOWN


def derive_battery_level(status: Iterable[tuple[str, Any]]) -> Optional[int]:
    """
    Battery percentage from the first battery code present.

    Strings are read up to the first non-digit ("85%" is 85); a value with no
    leading integer yields None.
    """
    values = dict(status)
    for code in BATTERY_CODES:
        if code not in values:
            continue
        value = values[code]
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return int(value)
        if isinstance(value, str):
            match = _LEADING_INT.match(value)
            return int(match.group(1)) if match else None
        return None
    return None
