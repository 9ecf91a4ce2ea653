import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, Field


class ChannexConnectPayload(BaseModel):
    user_id: str = Field(..., description="PMS user owning the Channex account")
    api_key: str = Field(..., min_length=1, description="Channex user API key")


class ChannexDisconnectPayload(BaseModel):
    user_id: str


class AvailabilityValue(BaseModel):
    """
    One per-day availability value; consecutive equal days are merged before sending.
    """

    property_id: str
    room_type_id: str
    date: dt.date
    availability: int = Field(..., ge=0)


class RestrictionValue(BaseModel):
    property_id: str
    rate_plan_id: str
    date: dt.date
    rate: Optional[str] = Field(None, description="Decimal string, e.g. '120.00'")
    min_stay_arrival: Optional[int] = Field(None, ge=1)
    min_stay_through: Optional[int] = Field(None, ge=1)
    max_stay: Optional[int] = Field(None, ge=1)
    stop_sell: Optional[bool] = None
    closed_to_arrival: Optional[bool] = None
    closed_to_departure: Optional[bool] = None


class AvailabilityPushPayload(BaseModel):
    user_id: str
    values: list[AvailabilityValue] = Field(..., min_length=1)


class RestrictionsPushPayload(BaseModel):
    user_id: str
    values: list[RestrictionValue] = Field(..., min_length=1)


class BookingPayload(BaseModel):
    """
    A Channex booking body. Room and customer objects are forwarded as-is.
    """

    user_id: str
    booking: dict[str, Any]


class ChannexWebhookPayload(BaseModel):
    event_type: Optional[str] = None
    property_id: Optional[str] = None
    payload: Optional[dict[str, Any]] = None


class ScenarioRunPayload(BaseModel):
    """
    Run one Channex certification scenario against the user's test property.

    Ids left empty are looked up by name on the Channex account.
    """

    user_id: str
    test_case: str = Field(..., description="Scenario name, e.g. 'full-sync'")
    start_date: Optional[dt.date] = Field(None, description="First day of the run")
    property_id: Optional[str] = None
    room_type_id: Optional[str] = None
    rate_plan_id: Optional[str] = None
    second_rate_plan_id: Optional[str] = None
