"""
Channex certification scenarios.

Channex certifies a PMS by watching it perform a fixed list of ARI and booking
calls against a "Test Property" on staging. Each scenario here builds its
values per day, merges them with collapse_date_ranges and pushes them through
ChannexClient. Dates are offsets from a start date so the run always lands in
the future.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Any, Callable, Iterator, Optional

import structlog

from channel_sync.channex.ari import collapse_date_ranges
from channel_sync.channex.client import ChannexClient, read_field
from channel_sync.errors import InvalidRequest, NotFound

logger = structlog.get_logger(__name__)

TEST_PROPERTY_NAMES = ("Test Property", "Provider Name")
BEST_AVAILABLE = "Best Available"
BED_AND_BREAKFAST = "Bed & Breakfast"


@dataclass(frozen=True)
class CertificationIds:
    """Channex ids of the test property, its Twin Room and that room's two rate plans."""

    property_id: str
    room_type_id: str
    rate_plan_id: str
    second_rate_plan_id: Optional[str] = None
    double_room_type_id: Optional[str] = None


def _named(items: list[dict[str, Any]], *needles: str) -> Optional[dict[str, Any]]:
    for item in items:
        title = read_field(item, "title", "name") or ""
        if any(needle in title for needle in needles):
            return item
    return None


def _room_type_of(rate_plan: dict[str, Any]) -> Optional[str]:
    if read_field(rate_plan, "room_type_id"):
        return read_field(rate_plan, "room_type_id")
    relation = rate_plan.get("relationships", {}).get("room_type", {}).get("data") or {}
    return relation.get("id")


def discover_certification_ids(client: ChannexClient) -> CertificationIds:
    """
    Find the certification property, room types and rate plans by name.

    Raises:
        NotFound: If the test property, its Twin Room or the Best Available
            rate plan is missing from the account.
    """
    prop = _named(client.get_properties(), *TEST_PROPERTY_NAMES)
    if prop is None:
        raise NotFound("Channex account has no 'Test Property'")

    room_types = client.get_room_types(prop["id"])
    twin = _named(room_types, "Twin Room")
    double = _named(room_types, "Double Room")
    if twin is None:
        raise NotFound(f"Channex property {prop['id']} has no 'Twin Room'")

    rate_plans = client.get_rate_plans(prop["id"])
    twin_plans = [rp for rp in rate_plans if _room_type_of(rp) == twin["id"]]
    best = _named(twin_plans, BEST_AVAILABLE)
    breakfast = _named(twin_plans, BED_AND_BREAKFAST)
    if best is None:
        raise NotFound(f"Twin Room {twin['id']} has no '{BEST_AVAILABLE}' rate plan")

    ids = CertificationIds(
        property_id=prop["id"],
        room_type_id=twin["id"],
        rate_plan_id=best["id"],
        second_rate_plan_id=breakfast["id"] if breakfast else None,
        double_room_type_id=double["id"] if double else None,
    )
    logger.info("channex_certification_ids_found", **asdict(ids))
    return ids


def _days(first: date, count: int) -> Iterator[date]:
    for offset in range(count):
        yield first + timedelta(days=offset)


def _rates(
    ids: CertificationIds, rate_plan_id: str, first: date, count: int, **fields: Any
) -> list[dict[str, Any]]:
    return [
        {"property_id": ids.property_id, "rate_plan_id": rate_plan_id, "date": day, **fields}
        for day in _days(first, count)
    ]


def _availability(
    ids: CertificationIds, first: date, count: int, availability: int
) -> list[dict[str, Any]]:
    return [
        {
            "property_id": ids.property_id,
            "room_type_id": ids.room_type_id,
            "date": day,
            "availability": availability,
        }
        for day in _days(first, count)
    ]


def _second_plan(ids: CertificationIds) -> str:
    if not ids.second_rate_plan_id:
        raise NotFound(f"Twin Room {ids.room_type_id} has no '{BED_AND_BREAKFAST}' rate plan")
    return ids.second_rate_plan_id


def _push_restrictions(client: ChannexClient, values: list[dict[str, Any]]) -> dict[str, Any]:
    ranges = collapse_date_ranges(values)
    return {"ranges": ranges, "response": client.push_restrictions_updates(ranges)}


def _push_availability(client: ChannexClient, values: list[dict[str, Any]]) -> dict[str, Any]:
    ranges = collapse_date_ranges(values)
    return {"ranges": ranges, "response": client.push_availability_updates(ranges)}


def full_sync(client: ChannexClient, ids: CertificationIds, start: date) -> dict[str, Any]:
    availability = _push_availability(client, _availability(ids, start, 500, 50))
    restrictions = _push_restrictions(
        client,
        _rates(
            ids, ids.rate_plan_id, start, 500, rate="120.00", min_stay_arrival=1, stop_sell=False
        ),
    )
    return {"availability": availability, "restrictions": restrictions}


def single_date_single_rate(
    client: ChannexClient, ids: CertificationIds, start: date
) -> dict[str, Any]:
    values = _rates(ids, ids.rate_plan_id, start + timedelta(12), 1, rate="150.00")
    return _push_restrictions(client, values)


def single_date_multiple_rates(
    client: ChannexClient, ids: CertificationIds, start: date
) -> dict[str, Any]:
    day = start + timedelta(13)
    values = _rates(ids, ids.rate_plan_id, day, 1, rate="200.00")
    values += _rates(ids, _second_plan(ids), day, 1, rate="180.00")
    return _push_restrictions(client, values)


def multiple_dates_multiple_rates(
    client: ChannexClient, ids: CertificationIds, start: date
) -> dict[str, Any]:
    first = start + timedelta(43)
    values = _rates(ids, ids.rate_plan_id, first, 5, rate="250.00")
    values += _rates(ids, _second_plan(ids), first, 5, rate="230.00")
    return _push_restrictions(client, values)


def min_stay(client: ChannexClient, ids: CertificationIds, start: date) -> dict[str, Any]:
    return _push_restrictions(
        client, _rates(ids, ids.rate_plan_id, start + timedelta(71), 10, min_stay_arrival=3)
    )


def stop_sell(client: ChannexClient, ids: CertificationIds, start: date) -> dict[str, Any]:
    return _push_restrictions(
        client, _rates(ids, ids.rate_plan_id, start + timedelta(102), 5, stop_sell=True)
    )


def multiple_restrictions(
    client: ChannexClient, ids: CertificationIds, start: date
) -> dict[str, Any]:
    return _push_restrictions(
        client,
        _rates(
            ids,
            ids.rate_plan_id,
            start + timedelta(132),
            5,
            min_stay_arrival=3,
            closed_to_arrival=True,
        ),
    )


def half_year(client: ChannexClient, ids: CertificationIds, start: date) -> dict[str, Any]:
    return _push_restrictions(
        client,
        _rates(
            ids, ids.rate_plan_id, start + timedelta(163), 184, rate="190.00", min_stay_arrival=2
        ),
    )


def single_date_availability(
    client: ChannexClient, ids: CertificationIds, start: date
) -> dict[str, Any]:
    return _push_availability(client, _availability(ids, start + timedelta(151), 1, 5))


def multiple_dates_availability(
    client: ChannexClient, ids: CertificationIds, start: date
) -> dict[str, Any]:
    return _push_availability(client, _availability(ids, start + timedelta(193), 10, 20))


def _booking_room(ids: CertificationIds, arrival: date, nights: int) -> dict[str, Any]:
    return {
        "room_type_id": ids.room_type_id,
        "rate_plan_id": ids.rate_plan_id,
        "days": {day.isoformat(): "120.00" for day in _days(arrival, nights)},
        "occupancy": {"adults": 2, "children": 0, "infants": 0, "ages": []},
    }


def booking_receiving(client: ChannexClient, ids: CertificationIds, start: date) -> dict[str, Any]:
    """Create a one-night booking, extend it to two nights, then cancel it."""
    arrival = start + timedelta(255)
    reference = {
        "property_id": ids.property_id,
        "ota_reservation_code": f"CERT-{arrival:%Y%m%d}-001",
        "ota_name": "Offline",
    }

    booking_id = client.create_booking(
        {
            **reference,
            "arrival_date": arrival.isoformat(),
            "departure_date": (arrival + timedelta(1)).isoformat(),
            "arrival_hour": "14:00",
            "currency": "USD",
            "customer": {
                "name": "John",
                "surname": "Doe",
                "mail": "john@doe.com",
                "country": "US",
                "phone": "123456789",
            },
            "rooms": [
                {
                    **_booking_room(ids, arrival, 1),
                    "guests": [{"name": "John", "surname": "Doe"}],
                }
            ],
        }
    )
    updated = client.update_booking(
        booking_id,
        {
            **reference,
            "status": "modified",
            "arrival_date": arrival.isoformat(),
            "departure_date": (arrival + timedelta(2)).isoformat(),
            "rooms": [_booking_room(ids, arrival, 2)],
        },
    )
    cancelled = client.cancel_booking(booking_id, reference)
    return {"booking_id": booking_id, "update": updated, "cancel": cancelled}


ScenarioFn = Callable[[ChannexClient, CertificationIds, date], dict[str, Any]]

SCENARIOS: dict[str, ScenarioFn] = {
    "full-sync": full_sync,
    "single-date-update-single-rate": single_date_single_rate,
    "single-date-update-multiple-rates": single_date_multiple_rates,
    "multiple-date-update-multiple-rates": multiple_dates_multiple_rates,
    "min-stay-update": min_stay,
    "stop-sell-update": stop_sell,
    "multiple-restrictions-update": multiple_restrictions,
    "half-year-update": half_year,
    "single-date-availability-update": single_date_availability,
    "multiple-date-availability-update": multiple_dates_availability,
    "booking-receiving": booking_receiving,
}


def run_scenario(
    client: ChannexClient,
    name: str,
    ids: Optional[CertificationIds] = None,
    start: Optional[date] = None,
) -> dict[str, Any]:
    """
    Run one certification scenario.

    Args:
        client (ChannexClient): Client bound to the certification account.
        name (str): A key of SCENARIOS.
        ids (Optional[CertificationIds]): Target ids; discovered by name when omitted.
        start (Optional[date]): First day of the run; defaults to tomorrow.

    Returns:
        dict[str, Any]: What was sent and what Channex answered.

    Raises:
        InvalidRequest: If the scenario name is unknown.
        NotFound: If a required test entity is missing.
        RemoteApiError: If Channex rejects a call.
    """
    scenario = SCENARIOS.get(name)
    if scenario is None:
        raise InvalidRequest(f"Unknown Channex scenario {name!r}")

    ids = ids or discover_certification_ids(client)
    start = start or date.today() + timedelta(days=1)
    logger.info("channex_scenario_started", scenario=name, property_id=ids.property_id)
    result = scenario(client, ids, start)
    logger.info("channex_scenario_completed", scenario=name, property_id=ids.property_id)
    return result
