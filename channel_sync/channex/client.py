"""
API-key authenticated client for the Channex channel manager.

Every call sends the ``user-api-key`` header. Non-2xx answers raise
RemoteApiError carrying Channex's error payload unchanged; its validation
messages are the only useful diagnostics for a rejected ARI batch.
"""

from __future__ import annotations

from typing import Any, Optional

import requests
import structlog

from channel_sync.config import CHANNEX_BASE_URL
from channel_sync.errors import ProtocolError
from channel_sync.network.client import response_body, send_request

logger = structlog.get_logger(__name__)

PLATFORM = "channex"


class ChannexClient:
    """
    Typed wrapper over the Channex v1 API.

    Args:
        api_key: The user's Channex API key.
        base_url: API root; defaults to CHANNEX_BASE_URL.
        session: Optional requests session.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = (base_url or CHANNEX_BASE_URL).rstrip("/")
        self.session = session

    def _request(
        self,
        method: str,
        path: str,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
        payload: Optional[dict[str, Any]] = None,
    ) -> Any:
        headers = {
            "Content-Type": "application/json",
            "user-api-key": self.api_key,
        }
        res = send_request(
            method,
            f"{self.base_url}{path}",
            platform=PLATFORM,
            endpoint=endpoint,
            session=self.session,
            headers=headers,
            params=params,
            json=payload,
        )
        return response_body(res)

    def _list(self, path: str, endpoint: str, params: Optional[dict[str, Any]] = None) -> list[Any]:
        body = self._request("GET", path, endpoint, params=params)
        if not isinstance(body, dict):
            raise ProtocolError(f"Channex {endpoint}: unexpected response body", body=body)
        return body.get("data") or []

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def get_properties(self) -> list[dict[str, Any]]:
        return self._list("/properties", "properties")

    def get_room_types(self, property_id: str) -> list[dict[str, Any]]:
        return self._list("/room-types", "room_types", params={"property_id": property_id})

    def get_rate_plans(self, property_id: str) -> list[dict[str, Any]]:
        return self._list("/rate-plans", "rate_plans", params={"property_id": property_id})

    def get_property_channels(self, property_id: str) -> list[dict[str, Any]]:
        return self._list(
            "/property-channels", "property_channels", params={"property_id": property_id}
        )

    def get_all_channels(self) -> list[dict[str, Any]]:
        return self._list("/channels", "channels")

    def validate_api_key(self) -> bool:
        """
        Check the API key by listing properties.

        Returns:
            bool: True if the call succeeded. Any failure, including network
            errors, yields False rather than raising.
        """
        try:
            self.get_properties()
            return True
        except Exception as e:
            logger.warning("channex_api_key_invalid", error=str(e))
            return False

    # ------------------------------------------------------------------
    # ARI
    # ------------------------------------------------------------------

    def push_availability_updates(self, values: list[dict[str, Any]]) -> Any:
        """
        Push availability ranges.

        Args:
            values: Items of ``{property_id, room_type_id, date_from, date_to,
                availability}``, forwarded verbatim.

        Returns:
            Any: Channex's response body.
        """
        logger.info("channex_availability_push", values=len(values))
        return self._request("POST", "/availability", "availability", payload={"values": values})

    def push_restrictions_updates(self, values: list[dict[str, Any]]) -> Any:
        """
        Push rate and restriction ranges.

        Args:
            values: Items of ``{property_id, rate_plan_id, date_from, date_to,
                rate?, min_stay_arrival?, stop_sell?, ...}``, forwarded verbatim.
        """
        logger.info("channex_restrictions_push", values=len(values))
        return self._request("POST", "/restrictions", "restrictions", payload={"values": values})

    def push_updates(self, property_id: str, data: dict[str, Any]) -> Any:
        """Combined ARI push for one property."""
        return self._request(
            "POST",
            "/availability_rates_inventory",
            "availability_rates_inventory",
            payload={"property_id": property_id, **data},
        )

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    def create_booking(self, booking: dict[str, Any]) -> str:
        """
        Create a booking.

        Args:
            booking: Booking body (ota_reservation_code, arrival_date,
                departure_date, customer, rooms[] with days and occupancy).

        Returns:
            str: Channex booking id.

        Raises:
            ProtocolError: If the response carries no id.
        """
        body = self._request("POST", "/bookings", "bookings", payload={"booking": booking})
        booking_id = _extract_id(body)
        if booking_id is None:
            raise ProtocolError("Channex booking response has no id", body=body)
        logger.info("channex_booking_created", booking_id=booking_id)
        return booking_id

    def update_booking(self, booking_id: str, patch: dict[str, Any]) -> Any:
        logger.info("channex_booking_update", booking_id=booking_id)
        return self._request(
            "PUT", f"/bookings/{booking_id}", "booking", payload={"booking": patch}
        )

    def cancel_booking(self, booking_id: str, payload: Optional[dict[str, Any]] = None) -> Any:
        """Cancel a booking; ``status`` is always sent as ``cancelled``."""
        body = {**(payload or {}), "status": "cancelled"}
        logger.info("channex_booking_cancel", booking_id=booking_id)
        return self._request("PUT", f"/bookings/{booking_id}", "booking", payload={"booking": body})


def _extract_id(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    data = body.get("data")
    if isinstance(data, dict) and data.get("id"):
        return str(data["id"])
    if body.get("id"):
        return str(body["id"])
    return None


def read_field(item: dict[str, Any], *names: str) -> Any:
    """
    Read the first present field, flat or nested under JSON:API "attributes".

    Channex returns either shape depending on the endpoint version.
    """
    attrs = item.get("attributes")
    sources = (item, attrs) if isinstance(attrs, dict) else (item,)
    for name in names:
        for source in sources:
            if source.get(name) is not None:
                return source[name]
    return None
