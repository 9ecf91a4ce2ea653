import datetime as dt
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field


class CalendarDay(BaseModel):
    date: dt.date
    available: bool
    price: Optional[Union[float, str]] = Field(None, description="Major units, e.g. 120.50")
    minimum_nights: Optional[int] = Field(None, ge=1)
    maximum_nights: Optional[int] = Field(None, ge=1)


class AirbnbSyncPayload(BaseModel):
    """
    Schema for the Airbnb sync actions.

    ``accommodates``, ``bedrooms`` and ``bathrooms`` are not tracked on units;
    they default to 2, 1 and 1 when omitted.
    """

    user_id: str
    action: Literal["sync_unit_to_airbnb", "sync_price", "sync_availability"]
    pms_unit_id: str
    airbnb_listing_id: Optional[str] = None
    sync_options: Optional[dict[str, Any]] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    accommodates: int = Field(2, ge=1)
    bedrooms: int = Field(1, ge=0)
    bathrooms: int = Field(1, ge=0)
    availability: list[CalendarDay] = Field(default_factory=list)


class AirbnbDisconnectPayload(BaseModel):
    user_id: str


class AirbnbConnectPayload(BaseModel):
    """
    Tokens obtained from the Airbnb OAuth code exchange.
    """

    user_id: str
    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = Field(None, ge=0, description="Access token lifetime in seconds")


class ListingPhotosPayload(BaseModel):
    user_id: str
    photo_urls: list[str] = Field(..., min_length=1, description="Image URLs, in display order")
