"""
Collapse per-date ARI values into Channex date ranges.

Channex accepts ``date_from``/``date_to`` ranges, so a run of consecutive
days carrying identical values is sent as one item instead of one per day.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Iterable, Mapping

TARGET_KEYS = ("room_type_id", "rate_plan_id")


def _target(item: Mapping[str, Any]) -> tuple[str, str, str]:
    for key in TARGET_KEYS:
        if item.get(key):
            return item["property_id"], key, item[key]
    raise ValueError("ARI value needs a room_type_id or a rate_plan_id")


def _day(value: Any) -> date:
    return value if isinstance(value, date) else date.fromisoformat(value)


def _values(item: Mapping[str, Any]) -> tuple[tuple[str, Any], ...]:
    skip = {"property_id", "date", *TARGET_KEYS}
    return tuple(sorted((k, v) for k, v in item.items() if k not in skip))


def collapse_date_ranges(items: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """
    Merge contiguous days with equal values into range items.

    Args:
        items: Per-day values, each ``{property_id, room_type_id | rate_plan_id,
            date: "YYYY-MM-DD" | date, **fields}``.

    Returns:
        list[dict[str, Any]]: Items of ``{property_id, <target>, date_from,
        date_to, **fields}``, ordered by target then date.

    Example:
        >>> collapse_date_ranges([
        ...     {"property_id": "p", "room_type_id": "r", "date": "2025-01-01", "availability": 1},
        ...     {"property_id": "p", "room_type_id": "r", "date": "2025-01-02", "availability": 1},
        ... ])
        [{'property_id': 'p', 'room_type_id': 'r', 'date_from': '2025-01-01',
          'date_to': '2025-01-02', 'availability': 1}]
    """
    keyed = sorted(
        ((_target(item), _day(item["date"]), _values(item)) for item in items),
        key=lambda entry: (entry[0], entry[1]),
    )

    ranges: list[dict[str, Any]] = []
    current: dict[str, Any] | None = None
    current_key: tuple[Any, ...] | None = None
    current_end: date | None = None

    for target, day, values in keyed:
        key = (target, values)
        if current is not None and key == current_key and day == current_end + timedelta(days=1):
            current_end = day
            current["date_to"] = day.isoformat()
            continue

        property_id, target_field, target_id = target
        current = {
            "property_id": property_id,
            target_field: target_id,
            "date_from": day.isoformat(),
            "date_to": day.isoformat(),
            **dict(values),
        }
        current_key = key
        current_end = day
        ranges.append(current)

    return ranges
