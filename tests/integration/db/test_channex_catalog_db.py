"""
Integration tests for the Channex catalog writers.
"""

from __future__ import annotations

from typing import Generator

import pytest
from sqlalchemy import select, text

from channel_sync.db.engine import engine
from channel_sync.db.writers.channex import (
    upsert_channex_properties,
    upsert_channex_room_types,
)
from channel_sync.models.channex import ChannexProperty, ChannexRoomType


@pytest.fixture
def channex_cleanup() -> Generator[None, None, None]:
    yield
    with engine.begin() as conn:
        for table in ("channex_room_types", "channex_properties"):
            conn.execute(
                text(f"DELETE FROM channel_sync.{table} WHERE channex_property_id = 'it-cx-1'")
            )


@pytest.mark.integration
def test_properties_upsert_reads_nested_attributes(channex_cleanup):
    """Test that JSON:API attributes are flattened and updates overwrite the row."""
    item = {"id": "it-cx-1", "attributes": {"title": "Villas", "currency": "EUR"}}
    with engine.begin() as conn:
        upsert_channex_properties(conn, "it-user-1", [item])
        upsert_channex_properties(
            conn, "it-user-1", [{"id": "it-cx-1", "attributes": {"title": "Renamed"}}]
        )

    with engine.connect() as conn:
        row = conn.execute(
            select(ChannexProperty).where(ChannexProperty.channex_property_id == "it-cx-1")
        ).fetchone()

    assert row is not None
    assert row.name == "Renamed"
    assert row.user_id == "it-user-1"


@pytest.mark.integration
def test_room_types_are_linked_to_property(channex_cleanup):
    """Test that room types are stored under their Channex property."""
    with engine.begin() as conn:
        upsert_channex_room_types(conn, "it-cx-1", [{"id": "it-rt-1", "title": "Double"}])

    with engine.connect() as conn:
        rows = conn.execute(
            select(ChannexRoomType).where(ChannexRoomType.channex_property_id == "it-cx-1")
        ).fetchall()

    assert [r.channex_room_type_id for r in rows] == ["it-rt-1"]


@pytest.mark.integration
def test_repeated_id_in_one_batch_keeps_last(channex_cleanup):
    """Test that a page listing the same room type twice stores its last version once."""
    items = [{"id": "it-rt-2", "title": "Twin"}, {"id": "it-rt-2", "title": "Twin Room"}]
    with engine.begin() as conn:
        upsert_channex_room_types(conn, "it-cx-1", items)

    with engine.connect() as conn:
        rows = conn.execute(
            select(ChannexRoomType).where(ChannexRoomType.channex_property_id == "it-cx-1")
        ).fetchall()

    assert [(r.channex_room_type_id, r.name) for r in rows] == [("it-rt-2", "Twin Room")]


@pytest.mark.integration
def test_property_owner_is_kept_when_another_user_pulls_it(channex_cleanup):
    """Test that the first user to mirror a Channex property stays its owner."""
    item = {"id": "it-cx-1", "attributes": {"title": "Villas"}}
    with engine.begin() as conn:
        upsert_channex_properties(conn, "it-user-1", [item])
        upsert_channex_properties(
            conn, "it-user-2", [{"id": "it-cx-1", "attributes": {"title": "Villas 2"}}]
        )

    with engine.connect() as conn:
        row = conn.execute(
            select(ChannexProperty).where(ChannexProperty.channex_property_id == "it-cx-1")
        ).fetchone()

    assert row is not None
    assert row.name == "Villas 2"
    assert row.user_id == "it-user-1"
