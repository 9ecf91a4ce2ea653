"""
Choose the Tuya command that locks or unlocks a given device.

Lock firmwares disagree on vocabulary. When the device publishes a
specification, the matching function is picked from it. Otherwise, or in
addition, a fixed list of commonly used command shapes is tried in order.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional


class LockIntent(str, Enum):
    LOCK = "lock"
    UNLOCK = "unlock"


@dataclass(frozen=True)
class LockCommand:
    code: str
    value: Any

    def as_payload(self) -> dict[str, Any]:
        return {"code": self.code, "value": self.value}


FALLBACK_COMMANDS: dict[LockIntent, tuple[LockCommand, ...]] = {
    LockIntent.UNLOCK: (
        LockCommand("switch", False),
        LockCommand("lock", False),
        LockCommand("control", "unlock"),
        LockCommand("lock_control", "unlock"),
    ),
    LockIntent.LOCK: (
        LockCommand("switch", True),
        LockCommand("lock", True),
        LockCommand("control", "lock"),
        LockCommand("lock_control", "lock"),
    ),
}

# Enum values that express each direction, in preference order.
ENUM_VALUES: dict[LockIntent, tuple[str, ...]] = {
    LockIntent.UNLOCK: ("unlock", "open"),
    LockIntent.LOCK: ("lock", "close"),
}

CONTROL_CODES = ("control", "lock_control")


def _mentions_direction(text: str, intent: LockIntent) -> bool:
    text = text.lower()
    if intent is LockIntent.UNLOCK:
        return "unlock" in text or "open" in text
    # "unlock" contains "lock"; strip it before looking for the lock direction.
    return "lock" in text.replace("unlock", "") or "close" in text


def _parse_values(values: Any) -> dict[str, Any]:
    """Tuya sends ``values`` as a JSON string on most endpoints, an object on some."""
    if isinstance(values, Mapping):
        return dict(values)
    if isinstance(values, str) and values:
        try:
            parsed = json.loads(values)
        except ValueError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def resolve_from_specification(
    specification: Optional[Mapping[str, Any]], intent: LockIntent
) -> Optional[LockCommand]:
    """
    Pick the command for an intent from a device specification.

    A Boolean function whose code mentions lock or control and whose name
    (or code, when unnamed) points in the intent's direction wins. Failing
    that, an enum ``control``/``lock_control`` function whose range holds a
    value for the direction is used.

    Args:
        specification: Tuya specification with a ``functions`` list.
        intent: Lock or unlock.

    Returns:
        Optional[LockCommand]: The command, or None if nothing fits.

    Example:
        >>> schema = {"functions": [{"code": "lock_motor", "type": "Boolean", "name": "Unlock"}]}
        >>> resolve_from_specification(schema, LockIntent.UNLOCK)
        LockCommand(code='lock_motor', value=True)
    """
    if not specification:
        return None
    functions = [f for f in specification.get("functions") or [] if isinstance(f, Mapping)]

    for function in functions:
        code = function.get("code") or ""
        if function.get("type") != "Boolean":
            continue
        if "lock" not in code and "control" not in code:
            continue
        label = function.get("name") or code
        if _mentions_direction(label, intent):
            value = function["defaultValue"] if "defaultValue" in function else True
            return LockCommand(code, value)

    for function in functions:
        code = function.get("code")
        if code not in CONTROL_CODES:
            continue
        allowed = _parse_values(function.get("values")).get("range") or []
        for value in ENUM_VALUES[intent]:
            if value in allowed:
                return LockCommand(code, value)

    return None


def candidate_commands(
    intent: LockIntent, specification: Optional[Mapping[str, Any]] = None
) -> list[LockCommand]:
    """
    The ordered commands to try: the resolved one first, then the fallbacks.

    Duplicates are dropped so no command is sent twice.
    """
    candidates: list[LockCommand] = []
    resolved = resolve_from_specification(specification, intent)
    if resolved is not None:
        candidates.append(resolved)
    for command in FALLBACK_COMMANDS[intent]:
        if command not in candidates:
            candidates.append(command)
    return candidates
