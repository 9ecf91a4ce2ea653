"""Create channel_sync tables

Revision ID: 3f1c9a2b7d40
Revises:
Create Date: 2026-10-19 10:12:31.418207

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "3f1c9a2b7d40"
down_revision = None
branch_labels = None
depends_on = None

SCHEMA = "channel_sync"


def _updated_at() -> sa.Column:
    return sa.Column(
        "updated_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    """Upgrade schema."""
    op.execute(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA}")

    op.create_table(
        "credentials",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("platform", sa.String(length=16), nullable=False),
        sa.Column("scope", sa.String(), nullable=False),
        sa.Column("client_id", sa.String(), nullable=True),
        sa.Column("client_secret", sa.String(), nullable=True),
        sa.Column("api_key", sa.String(), nullable=True),
        sa.Column("access_token", sa.String(), nullable=True),
        sa.Column("refresh_token", sa.String(), nullable=True),
        sa.Column("region", sa.String(length=8), nullable=True),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("connected", sa.Boolean(), server_default=sa.text("FALSE"), nullable=False),
        sa.Column("last_sync_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("platform", "scope", name="uq_credentials_platform_scope"),
        schema=SCHEMA,
    )
    op.create_index(
        op.f("ix_channel_sync_credentials_scope"), "credentials", ["scope"], schema=SCHEMA
    )

    op.create_table(
        "properties",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("country", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        schema=SCHEMA,
    )
    op.create_index(
        op.f("ix_channel_sync_properties_user_id"), "properties", ["user_id"], schema=SCHEMA
    )

    op.create_table(
        "units",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("property_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("price_per_night", sa.Numeric(12, 2), nullable=True),
        sa.ForeignKeyConstraint(
            ["property_id"], [f"{SCHEMA}.properties.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        schema=SCHEMA,
    )
    op.create_index(
        op.f("ix_channel_sync_units_property_id"), "units", ["property_id"], schema=SCHEMA
    )

    op.create_table(
        "smart_locks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("unit_id", sa.String(), nullable=False),
        sa.Column("device_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("status", sa.String(length=16), server_default="unknown", nullable=False),
        sa.Column("battery_level", sa.Integer(), nullable=True),
        sa.Column(
            "last_activity",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["unit_id"], [f"{SCHEMA}.units.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("device_id"),
        schema=SCHEMA,
    )
    op.create_index(
        op.f("ix_channel_sync_smart_locks_unit_id"), "smart_locks", ["unit_id"], schema=SCHEMA
    )

    op.create_table(
        "sync_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("pms_unit_id", sa.String(), nullable=False),
        sa.Column("external_listing_id", sa.String(), nullable=True),
        sa.Column("platform", sa.String(length=16), nullable=False),
        sa.Column(
            "sync_settings",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'{}'::jsonb"),
            nullable=False,
        ),
        sa.Column("is_sync_enabled", sa.Boolean(), server_default=sa.text("TRUE"), nullable=False),
        sa.Column("last_sync_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("pms_unit_id", "platform", name="uq_sync_records_unit_platform"),
        schema=SCHEMA,
    )
    op.create_index(
        op.f("ix_channel_sync_sync_records_pms_unit_id"),
        "sync_records",
        ["pms_unit_id"],
        schema=SCHEMA,
    )

    op.create_table(
        "channex_properties",
        sa.Column("channex_property_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("currency_code", sa.String(length=3), nullable=True),
        sa.Column("timezone", sa.String(), nullable=True),
        sa.Column("raw_payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        _updated_at(),
        sa.PrimaryKeyConstraint("channex_property_id"),
        schema=SCHEMA,
    )
    op.create_index(
        op.f("ix_channel_sync_channex_properties_user_id"),
        "channex_properties",
        ["user_id"],
        schema=SCHEMA,
    )

    op.create_table(
        "channex_room_types",
        sa.Column("channex_room_type_id", sa.String(), nullable=False),
        sa.Column("channex_property_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("raw_payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        _updated_at(),
        sa.PrimaryKeyConstraint("channex_room_type_id"),
        schema=SCHEMA,
    )
    op.create_index(
        op.f("ix_channel_sync_channex_room_types_channex_property_id"),
        "channex_room_types",
        ["channex_property_id"],
        schema=SCHEMA,
    )

    op.create_table(
        "channex_rate_plans",
        sa.Column("channex_rate_plan_id", sa.String(), nullable=False),
        sa.Column("channex_property_id", sa.String(), nullable=False),
        sa.Column("channex_room_type_id", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("raw_payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        _updated_at(),
        sa.PrimaryKeyConstraint("channex_rate_plan_id"),
        schema=SCHEMA,
    )
    op.create_index(
        op.f("ix_channel_sync_channex_rate_plans_channex_property_id"),
        "channex_rate_plans",
        ["channex_property_id"],
        schema=SCHEMA,
    )
    op.create_index(
        op.f("ix_channel_sync_channex_rate_plans_channex_room_type_id"),
        "channex_rate_plans",
        ["channex_room_type_id"],
        schema=SCHEMA,
    )

    op.create_table(
        "channex_property_channels",
        sa.Column("channex_property_channel_id", sa.String(), nullable=False),
        sa.Column("channex_property_id", sa.String(), nullable=False),
        sa.Column("channel_name", sa.String(), nullable=True),
        sa.Column("is_enabled", sa.Boolean(), nullable=False),
        sa.Column("raw_payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        _updated_at(),
        sa.PrimaryKeyConstraint("channex_property_channel_id"),
        schema=SCHEMA,
    )
    op.create_index(
        op.f("ix_channel_sync_channex_property_channels_channex_property_id"),
        "channex_property_channels",
        ["channex_property_id"],
        schema=SCHEMA,
    )


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        "channex_property_channels",
        "channex_rate_plans",
        "channex_room_types",
        "channex_properties",
        "sync_records",
        "smart_locks",
        "units",
        "properties",
        "credentials",
    ):
        op.drop_table(table, schema=SCHEMA)
