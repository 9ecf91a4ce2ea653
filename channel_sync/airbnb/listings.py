"""
Mapping of a local unit to the Airbnb listing schema.

Occupancy fields (accommodates, bedrooms, bathrooms) are not tracked per
unit locally. They come from ListingDefaults, which the caller supplies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Optional

from channel_sync.airbnb.money import to_minor_units

DEFAULT_PRICE = Decimal("100")


@dataclass(frozen=True)
class ListingDefaults:
    accommodates: int = 2
    bedrooms: int = 1
    bathrooms: int = 1
    currency: Optional[str] = None


@dataclass(frozen=True)
class LocalListing:
    """The subset of a PMS unit that maps onto an Airbnb listing."""

    name: str
    description: str = ""
    price: Optional[Decimal] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: str = ""
    country: Optional[str] = None
    zipcode: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    amenities: list[Any] = field(default_factory=list)

    @classmethod
    def from_unit(cls, unit: Mapping[str, Any]) -> "LocalListing":
        """
        Build a listing from a unit row joined with its property.

        Args:
            unit: Row with name, price_per_night, property_name, address, city, country.
        """
        price = unit.get("price_per_night")
        return cls(
            name=unit["name"],
            description=(
                f"Cozy accommodation in {unit.get('property_name')}. "
                f"Perfect for your stay in {unit.get('city')}, {unit.get('country')}."
            ),
            price=Decimal(str(price)) if price is not None else None,
            address=unit.get("address"),
            city=unit.get("city"),
            country=unit.get("country"),
        )


def to_airbnb_listing(listing: LocalListing, defaults: ListingDefaults) -> dict[str, Any]:
    """
    Produce the ``listing`` body for POST /v2/listings.

    Args:
        listing: Local listing data.
        defaults: Occupancy values and currency supplied by the caller.

    Returns:
        dict[str, Any]: Airbnb listing fields, prices in minor units.
    """
    price = listing.price if listing.price is not None else DEFAULT_PRICE
    return {
        "name": listing.name,
        "description": listing.description,
        "property_type_id": 1,
        "room_type_category": "entire_home",
        "person_capacity": defaults.accommodates,
        "bedroom_count": defaults.bedrooms,
        "bathroom_count": defaults.bathrooms,
        "accommodates": defaults.accommodates,
        "default_price_native": to_minor_units(price, defaults.currency),
        "default_price_native_type": "PER_NIGHT",
        "country": listing.country,
        "state": listing.state,
        "city": listing.city,
        "street": listing.address,
        "zipcode": listing.zipcode,
        "lat": listing.lat,
        "lng": listing.lng,
        "amenities": list(listing.amenities),
        "cancellation_policy": "moderate",
        "interaction_type": "self",
        "home_type": "apartment",
    }


def to_airbnb_update(listing: LocalListing, defaults: ListingDefaults) -> dict[str, Any]:
    """Fields sent when an existing listing is refreshed from its unit."""
    body = {
        "name": listing.name,
        "description": listing.description,
        "person_capacity": defaults.accommodates,
        "bedroom_count": defaults.bedrooms,
        "bathroom_count": defaults.bathrooms,
        "accommodates": defaults.accommodates,
        "street": listing.address,
        "city": listing.city,
        "country": listing.country,
    }
    if listing.price is not None:
        body.update(price_update(listing.price, defaults.currency))
    return body


def price_update(price: Decimal, currency: Optional[str] = None) -> dict[str, Any]:
    return {
        "default_price_native": to_minor_units(price, currency),
        "default_price_native_type": "PER_NIGHT",
    }
