from sqlalchemy import Column, ForeignKey, Numeric, String

from channel_sync.config import SCHEMA
from channel_sync.models.base import Base


class Property(Base):
    """
    ORM model for a PMS property.

    Owned by the wider PMS; this service only reads it to resolve units and to
    build listing payloads.
    """

    __tablename__ = "properties"
    __table_args__ = {"schema": SCHEMA}

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    country = Column(String, nullable=True)


class Unit(Base):
    """ORM model for a rentable unit inside a property."""

    __tablename__ = "units"
    __table_args__ = {"schema": SCHEMA}

    id = Column(String, primary_key=True)
    property_id = Column(
        String,
        ForeignKey(f"{SCHEMA}.properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String, nullable=False)
    price_per_night = Column(Numeric(12, 2), nullable=True)
