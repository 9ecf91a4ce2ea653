"""
FastAPI dependency providers.

Routes receive the engine, repositories, the credential store and vendor
client factories through these providers. Tests replace any of them with
app.dependency_overrides.
"""

from __future__ import annotations

from typing import Callable, Generator

from fastapi import Depends
from sqlalchemy.engine import Engine

from channel_sync.airbnb.auth import AirbnbTokenService
from channel_sync.airbnb.client import AirbnbClient
from channel_sync.channex.client import ChannexClient
from channel_sync.config import LOCK_STATUS_DELAY_SECONDS
from channel_sync.credentials.store import Credential, CredentialStore, Platform
from channel_sync.db.engine import engine
from channel_sync.db.repositories import (
    SqlCredentialRepository,
    SqlLockRepository,
    SqlUnitDirectory,
)
from channel_sync.locks.reconciler import LockRepository, UnitDirectory
from channel_sync.tuya.client import TuyaClient, fetch_tuya_token

TuyaClientFactory = Callable[[Credential], TuyaClient]
ChannexClientFactory = Callable[[str], ChannexClient]


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide the database engine.

    Testing Example:
        >>> mock_engine = Mock(spec=Engine)
        >>> app.dependency_overrides[get_db_engine] = lambda: mock_engine
    """
    yield engine


def get_credential_store(db: Engine = Depends(get_db_engine)) -> CredentialStore:
    """CredentialStore with the Tuya and Airbnb token fetchers wired in."""
    return CredentialStore(
        SqlCredentialRepository(db),
        token_fetchers={
            Platform.TUYA: fetch_tuya_token,
            Platform.AIRBNB: AirbnbTokenService(),
        },
    )


def get_lock_repository(db: Engine = Depends(get_db_engine)) -> LockRepository:
    return SqlLockRepository(db)


def get_unit_directory(db: Engine = Depends(get_db_engine)) -> UnitDirectory:
    return SqlUnitDirectory(db)


def get_tuya_client_factory() -> TuyaClientFactory:
    return TuyaClient.from_credential


def get_channex_client_factory() -> ChannexClientFactory:
    return ChannexClient


def get_airbnb_client(
    store: CredentialStore = Depends(get_credential_store),
) -> AirbnbClient:
    return AirbnbClient(store)


def get_lock_status_delay() -> float:
    return LOCK_STATUS_DELAY_SECONDS
