from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import JSONB

from channel_sync.config import SCHEMA
from channel_sync.models.base import Base


class SyncRecord(Base):
    """
    ORM model tracking one outbound linkage between a PMS unit and an external listing.

    Upserted on (pms_unit_id, platform) after every successful push. Writing
    it is bookkeeping only: a failed write never fails the push itself.
    """

    __tablename__ = "sync_records"
    __table_args__ = (
        UniqueConstraint("pms_unit_id", "platform", name="uq_sync_records_unit_platform"),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    pms_unit_id = Column(String, nullable=False, index=True)
    external_listing_id = Column(String, nullable=True)
    platform = Column(String(16), nullable=False)
    sync_settings = Column(JSONB, nullable=False, server_default=text("'{}'::jsonb"))
    is_sync_enabled = Column(Boolean, nullable=False, server_default=text("TRUE"))
    last_sync_at = Column(DateTime(timezone=True), nullable=True)
