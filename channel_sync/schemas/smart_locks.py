from typing import Literal, Optional

from pydantic import BaseModel, Field


class LockSyncPayload(BaseModel):
    """
    Schema for reconciling a property's Tuya devices into smart locks.
    """

    property_id: str = Field(..., description="Local property id")
    user_id: str = Field(..., description="Owner of the property")
    allow_empty_delete: bool = Field(
        False,
        description="Delete all local locks when Tuya reports no lock devices",
    )


class LockControlPayload(BaseModel):
    """
    Schema for locking, unlocking or refreshing one smart lock.
    """

    lock_id: int = Field(..., description="Local smart lock id")
    property_id: str = Field(..., description="Property the lock must belong to")
    user_id: str = Field(..., description="Owner of the property")
    action: Literal["lock", "unlock", "refresh-status"]


class TuyaActionPayload(BaseModel):
    """
    Schema for the Tuya connection actions of a property.
    """

    action: Literal["set-credentials", "disconnect", "sync-devices"]
    property_id: str = Field(..., description="Local property id")
    user_id: str = Field(..., description="Owner of the property")
    client_id: Optional[str] = Field(None, description="Tuya cloud project access id")
    client_secret: Optional[str] = Field(None, description="Tuya cloud project access secret")
    region: Optional[str] = Field(None, description="Tuya data center: cn, us, eu, in or sg")
