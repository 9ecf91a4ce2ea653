"""
Unit tests for lock command resolution.
"""

from __future__ import annotations

import json

import pytest

from channel_sync.locks.commands import (
    FALLBACK_COMMANDS,
    LockCommand,
    LockIntent,
    candidate_commands,
    resolve_from_specification,
)


@pytest.mark.unit
def test_boolean_function_named_for_direction_is_used() -> None:
    """Test that a Boolean lock function whose name says unlock is chosen for unlock."""
    schema = {
        "functions": [
            {"code": "lock_motor_state", "type": "Boolean", "name": "Remote unlock"},
        ]
    }

    assert resolve_from_specification(schema, LockIntent.UNLOCK) == LockCommand(
        "lock_motor_state", True
    )


@pytest.mark.unit
def test_default_value_is_used_when_declared() -> None:
    """Test that a declared defaultValue replaces the implicit True."""
    schema = {
        "functions": [
            {"code": "unlock_request", "type": "Boolean", "name": "Open", "defaultValue": False},
        ]
    }

    assert resolve_from_specification(schema, LockIntent.UNLOCK) == LockCommand(
        "unlock_request", False
    )


@pytest.mark.unit
def test_lock_direction_excludes_unlock_names() -> None:
    """Test that 'unlock' does not count as mentioning 'lock' for the lock intent."""
    schema = {"functions": [{"code": "lock_motor", "type": "Boolean", "name": "Unlock"}]}

    assert resolve_from_specification(schema, LockIntent.LOCK) is None


@pytest.mark.unit
def test_enum_control_with_json_string_values() -> None:
    """Test the enum fallback with Tuya's JSON-string values field."""
    schema = {
        "functions": [
            {
                "code": "lock_control",
                "type": "Enum",
                "values": json.dumps({"range": ["open", "close"]}),
            }
        ]
    }

    assert resolve_from_specification(schema, LockIntent.UNLOCK) == LockCommand(
        "lock_control", "open"
    )
    assert resolve_from_specification(schema, LockIntent.LOCK) == LockCommand(
        "lock_control", "close"
    )


@pytest.mark.unit
def test_enum_control_with_mapping_values_prefers_lock_word() -> None:
    """Test that 'lock' is preferred over 'close' and mapping values are accepted."""
    schema = {
        "functions": [
            {"code": "control", "type": "Enum", "values": {"range": ["close", "lock", "unlock"]}}
        ]
    }

    assert resolve_from_specification(schema, LockIntent.LOCK) == LockCommand("control", "lock")


@pytest.mark.unit
@pytest.mark.parametrize("schema", [None, {}, {"functions": []}, {"functions": "garbage"}])
def test_unusable_specification_resolves_nothing(schema: object) -> None:
    """Test that missing or malformed specifications yield None."""
    assert resolve_from_specification(schema, LockIntent.UNLOCK) is None  # type: ignore[arg-type]


@pytest.mark.unit
def test_candidates_without_specification_are_the_fallbacks_in_order() -> None:
    """Test the fallback table order for unlock."""
    assert candidate_commands(LockIntent.UNLOCK) == [
        LockCommand("switch", False),
        LockCommand("lock", False),
        LockCommand("control", "unlock"),
        LockCommand("lock_control", "unlock"),
    ]


@pytest.mark.unit
def test_resolved_command_comes_first_without_duplicates() -> None:
    """Test that a resolved fallback shape is not sent twice."""
    schema = {"functions": [{"code": "control", "type": "Enum", "values": {"range": ["lock"]}}]}

    candidates = candidate_commands(LockIntent.LOCK, schema)

    assert candidates[0] == LockCommand("control", "lock")
    assert len(candidates) == len(FALLBACK_COMMANDS[LockIntent.LOCK])
    assert candidates.count(LockCommand("control", "lock")) == 1
