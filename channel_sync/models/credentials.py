"""SQLAlchemy model for per-property / per-user platform credentials."""

from sqlalchemy import (
    TIMESTAMP,
    Boolean,
    Column,
    Integer,
    String,
    UniqueConstraint,
    text,
)

from channel_sync.config import SCHEMA
from channel_sync.models.base import Base


class CredentialRecord(Base):
    """
    ORM model for one platform connection.

    Exactly one row exists per (platform, scope). Scope is a property id for
    Tuya and a user id for Channex and Airbnb. Disconnecting nulls the secret
    and token columns and flips `connected`, the row itself is never deleted.
    """

    __tablename__ = "credentials"
    __table_args__ = (
        UniqueConstraint("platform", "scope", name="uq_credentials_platform_scope"),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    platform = Column(String(16), nullable=False)
    scope = Column(String, nullable=False, index=True)
    client_id = Column(String, nullable=True)
    client_secret = Column(String, nullable=True)
    api_key = Column(String, nullable=True)  # Channex user-api-key
    access_token = Column(String, nullable=True)
    refresh_token = Column(String, nullable=True)
    region = Column(String(8), nullable=True)  # Tuya data-center region
    expires_at = Column(TIMESTAMP(timezone=True), nullable=True)
    connected = Column(Boolean, nullable=False, server_default=text("FALSE"))
    last_sync_at = Column(TIMESTAMP(timezone=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()"))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()"))
