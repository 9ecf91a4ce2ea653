"""
Route test fixtures: the app with every dependency replaced.
"""

from __future__ import annotations

from typing import Any, Generator
from unittest.mock import MagicMock, Mock, patch

import pytest
from fastapi.testclient import TestClient

from channel_sync.credentials.store import Credential, Platform
from channel_sync.dependencies import (
    get_airbnb_client,
    get_channex_client_factory,
    get_credential_store,
    get_db_engine,
    get_lock_repository,
    get_lock_status_delay,
    get_tuya_client_factory,
    get_unit_directory,
)
from channel_sync.locks.reconciler import UnitRef
from channel_sync.main import app


class StaticUnits:
    """Unit directory returning the same units for every property."""

    def __init__(self) -> None:
        self.units = [UnitRef("u1", "Villa A"), UnitRef("u2", "Villa B")]

    def list_units(self, property_id: str) -> list[UnitRef]:
        return self.units


@pytest.fixture
def db() -> MagicMock:
    return MagicMock()


@pytest.fixture
def store() -> Mock:
    """Credential store returning a connected Tuya credential for p1."""
    store = Mock()
    store.refresh_if_needed.return_value = Credential(
        platform=Platform.TUYA,
        scope="p1",
        client_id="cid",
        client_secret="secret",
        access_token="tok",
        connected=True,
    )
    return store


@pytest.fixture
def channex_client() -> Mock:
    return Mock()


@pytest.fixture
def airbnb_client() -> Mock:
    return Mock()


@pytest.fixture
def client(
    db: MagicMock,
    store: Mock,
    tuya: Any,
    locks: Any,
    channex_client: Mock,
    airbnb_client: Mock,
) -> Generator[TestClient, None, None]:
    """TestClient with storage, credentials and vendor clients overridden."""
    app.dependency_overrides[get_db_engine] = lambda: db
    app.dependency_overrides[get_credential_store] = lambda: store
    app.dependency_overrides[get_lock_repository] = lambda: locks
    app.dependency_overrides[get_unit_directory] = StaticUnits
    app.dependency_overrides[get_tuya_client_factory] = lambda: (lambda credential: tuya)
    app.dependency_overrides[get_channex_client_factory] = lambda: (lambda api_key: channex_client)
    app.dependency_overrides[get_airbnb_client] = lambda: airbnb_client
    app.dependency_overrides[get_lock_status_delay] = lambda: 0.0

    with patch("channel_sync.routes.smart_locks.property_belongs_to_user", return_value=True):
        yield TestClient(app)

    app.dependency_overrides.clear()
