"""
Shared fixtures for integration tests against a migrated Postgres database.
"""

from __future__ import annotations

from typing import Generator

import pytest
from sqlalchemy import text

from channel_sync.db.engine import check_engine_health, engine

PROPERTY_ID = "it-prop-1"
USER_ID = "it-user-1"


@pytest.fixture(scope="session", autouse=True)
def require_database() -> None:
    """Skip the integration suite when the database is not reachable."""
    if not check_engine_health():
        pytest.skip("Postgres is not reachable at DATABASE_URL")


@pytest.fixture
def test_property() -> Generator[tuple[str, list[str]], None, None]:
    """
    Create a property owned by USER_ID with two units.

    Returns (property_id, [unit ids]). Cleans up after the test completes.
    """
    unit_ids = ["it-unit-a", "it-unit-b"]
    with engine.begin() as conn:
        conn.execute(
            text(
                """
                INSERT INTO channel_sync.properties (id, user_id, name, city, country)
                VALUES (:id, :user_id, 'Integration Villas', 'Lisbon', 'PT')
                ON CONFLICT (id) DO NOTHING
                """
            ),
            {"id": PROPERTY_ID, "user_id": USER_ID},
        )
        for unit_id, name, price in zip(unit_ids, ["Villa A", "Villa B"], ["120.50", None]):
            conn.execute(
                text(
                    """
                    INSERT INTO channel_sync.units (id, property_id, name, price_per_night)
                    VALUES (:id, :property_id, :name, :price)
                    ON CONFLICT (id) DO NOTHING
                    """
                ),
                {"id": unit_id, "property_id": PROPERTY_ID, "name": name, "price": price},
            )

    yield (PROPERTY_ID, unit_ids)

    # Locks go with their units via ON DELETE CASCADE
    with engine.begin() as conn:
        conn.execute(
            text("DELETE FROM channel_sync.sync_records WHERE pms_unit_id = ANY(:ids)"),
            {"ids": unit_ids},
        )
        conn.execute(
            text("DELETE FROM channel_sync.properties WHERE id = :id"), {"id": PROPERTY_ID}
        )


@pytest.fixture
def clean_credentials() -> Generator[None, None, None]:
    """Remove credential rows written under the integration scopes."""
    yield
    with engine.begin() as conn:
        conn.execute(
            text("DELETE FROM channel_sync.credentials WHERE scope LIKE 'it-%'"),
        )
