"""
Per-user client for the Airbnb listing, reservation and calendar APIs.

Tokens come from the CredentialStore, which refreshes them through
AirbnbTokenService. A user without a connection gets None from
get_user_access_token and NotConnected from every authenticated call.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Optional, Union

import requests
import structlog

from channel_sync.airbnb.listings import ListingDefaults, LocalListing, to_airbnb_listing
from channel_sync.airbnb.money import to_minor_units
from channel_sync.credentials.store import CredentialStore, Platform
from channel_sync.errors import NotConnected, ProtocolError
from channel_sync.network.client import response_body, send_request

logger = structlog.get_logger(__name__)

PLATFORM = "airbnb"
LISTINGS_URL = "https://api.airbnb.com/v2/listings"
LISTING_PHOTOS_URL = "https://api.airbnb.com/v2/listing_photos"
RESERVATIONS_URL = "https://api.airbnb.com/v2/reservations"
CALENDAR_URL = "https://api.airbnb.com/v2/calendars/{listing_id}/{start_date}/{end_date}"
CALENDAR_UPDATE_URL = "https://www.airbnb.com/api/v2/pulse/calendar/{listing_id}/update_calendars"


@dataclass(frozen=True)
class CalendarUpdate:
    """One day of availability and pricing to push."""

    date: str  # YYYY-MM-DD
    available: bool
    price: Optional[Union[Decimal, float, str]] = None
    minimum_nights: Optional[int] = None
    maximum_nights: Optional[int] = None


def group_by_month(updates: Iterable[CalendarUpdate]) -> dict[str, list[CalendarUpdate]]:
    """Group updates by their ``YYYY-MM`` prefix, months in first-seen order."""
    grouped: dict[str, list[CalendarUpdate]] = {}
    for update in updates:
        grouped.setdefault(update.date[:7], []).append(update)
    return grouped


def calendar_form(
    updates: Iterable[CalendarUpdate], currency: Optional[str] = None
) -> dict[str, str]:
    """
    Encode one month of updates as the calendar endpoint's form fields.

    Each key is ``calendar_updates[DATE]`` and each value a compact JSON object.
    """
    form: dict[str, str] = {}
    for update in updates:
        fields: dict[str, Any] = {"available": update.available}
        if update.price is not None:
            fields["price"] = to_minor_units(update.price, currency)
        if update.minimum_nights is not None:
            fields["minimum_nights"] = update.minimum_nights
        if update.maximum_nights is not None:
            fields["maximum_nights"] = update.maximum_nights
        form[f"calendar_updates[{update.date}]"] = json.dumps(fields, separators=(",", ":"))
    return form


class AirbnbClient:
    """
    Airbnb API wrapper scoped per call to a user id.

    Args:
        credential_store: Store holding airbnb credentials keyed by user id.
        session: Optional requests session.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.credential_store = credential_store
        self.session = session

    def get_user_access_token(self, user_id: str) -> Optional[str]:
        """
        Return a usable access token for the user, refreshing it if expired.

        Returns:
            Optional[str]: The token, or None when the user has no Airbnb connection.

        Raises:
            AuthError: If a refresh was needed and failed.
        """
        try:
            credential = self.credential_store.refresh_if_needed(Platform.AIRBNB, user_id)
        except NotConnected:
            return None
        return credential.access_token

    def has_valid_connection(self, user_id: str) -> bool:
        return self.get_user_access_token(user_id) is not None

    def _require_token(self, user_id: str) -> str:
        token = self.get_user_access_token(user_id)
        if token is None:
            raise NotConnected(f"No valid Airbnb connection found for user {user_id}")
        return token

    @staticmethod
    def _headers(token: str, content_type: Optional[str] = None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {token}",
            "X-Airbnb-OAuth-Token": token,
            "Accept": "application/json",
        }
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def _call(self, user_id: str, method: str, url: str, endpoint: str, **kwargs: Any) -> Any:
        token = self._require_token(user_id)
        headers = self._headers(token, "application/json" if "json" in kwargs else None)
        res = send_request(
            method, url, platform=PLATFORM, endpoint=endpoint, session=self.session,
            headers=headers, **kwargs,
        )
        body = response_body(res)
        if not isinstance(body, dict):
            raise ProtocolError(f"Airbnb {endpoint}: unexpected response body", body=body)
        return body

    def get_listings(self, user_id: str) -> list[dict[str, Any]]:
        return self._call(user_id, "GET", LISTINGS_URL, "listings").get("listings") or []

    def get_listing(self, user_id: str, listing_id: str) -> dict[str, Any]:
        body = self._call(user_id, "GET", f"{LISTINGS_URL}/{listing_id}", "listing")
        return body.get("listing") or {}

    def get_reservations(
        self,
        user_id: str,
        listing_id: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """
        List reservations of one listing, optionally bounded by dates.

        Args:
            user_id: Owner of the Airbnb connection.
            listing_id: Airbnb listing id.
            start_date: Optional YYYY-MM-DD lower bound.
            end_date: Optional YYYY-MM-DD upper bound.
        """
        params = {"listing_ids": listing_id, "_format": "for_unified_dashboard"}
        if start_date:
            params["start_date"] = start_date
        if end_date:
            params["end_date"] = end_date
        body = self._call(user_id, "GET", RESERVATIONS_URL, "reservations", params=params)
        return body.get("reservations") or []

    def get_calendar(
        self, user_id: str, listing_id: str, start_date: str, end_date: str
    ) -> list[dict[str, Any]]:
        url = CALENDAR_URL.format(listing_id=listing_id, start_date=start_date, end_date=end_date)
        body = self._call(user_id, "GET", url, "calendar", params={"_format": "v1"})
        calendar = body.get("calendar")
        if not isinstance(calendar, dict):
            raise ProtocolError("Airbnb calendar response has no calendar", body=body)
        return calendar.get("days") or []

    def update_calendar(
        self,
        user_id: str,
        listing_id: str,
        updates: Iterable[CalendarUpdate],
        currency: Optional[str] = None,
    ) -> int:
        """
        Push availability and prices, one form POST per calendar month.

        The update endpoint is month-scoped, so the updates are grouped by
        ``YYYY-MM`` and each request carries only that month's dates. Months
        are sent sequentially; the first failure aborts the rest.

        Args:
            user_id: Owner of the Airbnb connection.
            listing_id: Airbnb listing id.
            updates: Days to update.
            currency: Listing currency for the minor-unit conversion.

        Returns:
            int: Number of month requests sent.

        Raises:
            NotConnected: If the user has no Airbnb connection.
            RemoteApiError: If Airbnb rejects a month.
        """
        grouped = group_by_month(updates)
        if not grouped:
            return 0

        token = self._require_token(user_id)
        url = CALENDAR_UPDATE_URL.format(listing_id=listing_id)

        for month, month_updates in grouped.items():
            send_request(
                "POST",
                url,
                platform=PLATFORM,
                endpoint="calendar_update",
                session=self.session,
                headers=self._headers(token),
                data=calendar_form(month_updates, currency),
            )
            logger.info(
                "airbnb_calendar_month_updated",
                user_id=user_id,
                listing_id=listing_id,
                month=month,
                days=len(month_updates),
            )

        return len(grouped)

    def create_listing(
        self, user_id: str, listing: LocalListing, defaults: ListingDefaults
    ) -> dict[str, Any]:
        """
        Create a listing from local unit data.

        Returns:
            dict[str, Any]: The created listing, including its Airbnb ``id``.
        """
        body = self._call(
            user_id,
            "POST",
            LISTINGS_URL,
            "listing_create",
            json={"listing": to_airbnb_listing(listing, defaults)},
        )
        created = body.get("listing")
        if not isinstance(created, dict):
            raise ProtocolError("Airbnb listing create response has no listing", body=body)
        logger.info("airbnb_listing_created", user_id=user_id, listing_id=created.get("id"))
        return created

    def update_listing(self, user_id: str, listing_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return self._call(
            user_id, "PUT", f"{LISTINGS_URL}/{listing_id}", "listing_update", json={"listing": data}
        )

    def add_listing_photos(
        self, user_id: str, listing_id: str, photo_urls: Iterable[str]
    ) -> dict[str, Any]:
        """
        Attach photos to a listing, one upload per URL, in the given order.

        Args:
            user_id: Owner of the Airbnb connection.
            listing_id: Airbnb listing id.
            photo_urls: Publicly reachable image URLs.

        Returns:
            dict: ``{"success": True, "photo_ids": [...], "message": ...}``.

        Raises:
            NotConnected: If the user has no Airbnb connection.
            RemoteApiError: On the first rejected upload; earlier photos stay attached.
        """
        self._require_token(user_id)
        photo_ids: list[Any] = []
        for sort_order, url in enumerate(photo_urls, start=1):
            body = self._call(
                user_id,
                "POST",
                LISTING_PHOTOS_URL,
                "listing_photos",
                json={"listing_id": listing_id, "url": url, "sort_order": sort_order},
            )
            photo_ids.append((body.get("listing_photo") or body).get("id"))

        logger.info("airbnb_listing_photos_added", listing_id=listing_id, count=len(photo_ids))
        return {
            "success": True,
            "photo_ids": photo_ids,
            "message": f"{len(photo_ids)} photos added successfully",
        }
