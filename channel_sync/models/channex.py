"""
Local mirror of the Channex catalog.

Rows are keyed by the Channex identifiers and refreshed by
channel_sync.channex.catalog after a successful connect.
"""

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from channel_sync.config import SCHEMA
from channel_sync.models.base import Base


class ChannexProperty(Base):
    __tablename__ = "channex_properties"
    __table_args__ = {"schema": SCHEMA}

    channex_property_id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=True)
    currency_code = Column(String(3), nullable=True)
    timezone = Column(String, nullable=True)
    raw_payload = Column(JSONB, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class ChannexRoomType(Base):
    __tablename__ = "channex_room_types"
    __table_args__ = {"schema": SCHEMA}

    channex_room_type_id = Column(String, primary_key=True)
    channex_property_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=True)
    raw_payload = Column(JSONB, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class ChannexRatePlan(Base):
    __tablename__ = "channex_rate_plans"
    __table_args__ = {"schema": SCHEMA}

    channex_rate_plan_id = Column(String, primary_key=True)
    channex_property_id = Column(String, nullable=False, index=True)
    channex_room_type_id = Column(String, nullable=True, index=True)
    name = Column(String, nullable=True)
    raw_payload = Column(JSONB, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class ChannexPropertyChannel(Base):
    __tablename__ = "channex_property_channels"
    __table_args__ = {"schema": SCHEMA}

    channex_property_channel_id = Column(String, primary_key=True)
    channex_property_id = Column(String, nullable=False, index=True)
    channel_name = Column(String, nullable=True)
    is_enabled = Column(Boolean, nullable=False, default=False)
    raw_payload = Column(JSONB, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
