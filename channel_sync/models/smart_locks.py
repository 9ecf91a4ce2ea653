from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from channel_sync.config import SCHEMA
from channel_sync.models.base import Base


class SmartLock(Base):
    """
    ORM model for a smart lock projected from a remote IoT device.

    Rows are created, updated and deleted only by device reconciliation and
    lock control. `device_id` is the vendor's device id and is unique; a unit
    owns at most one lock.
    """

    __tablename__ = "smart_locks"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, autoincrement=True)
    unit_id = Column(
        String,
        ForeignKey(f"{SCHEMA}.units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    device_id = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False)
    status = Column(String(16), nullable=False, server_default="unknown")
    battery_level = Column(Integer, nullable=True)
    last_activity = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
