"""
Smart lock routes: Tuya connection management, device sync and lock control.

Every route is scoped to a property; the caller must own it.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.engine import Engine

from channel_sync.config import TUYA_DEFAULT_REGION
from channel_sync.credentials.store import CredentialStore, Platform
from channel_sync.db.readers.units import property_belongs_to_user
from channel_sync.dependencies import (
    TuyaClientFactory,
    get_credential_store,
    get_db_engine,
    get_lock_repository,
    get_lock_status_delay,
    get_tuya_client_factory,
    get_unit_directory,
)
from channel_sync.locks.commands import LockIntent
from channel_sync.locks.control import LockController
from channel_sync.locks.reconciler import DeviceReconciler, LockRepository, UnitDirectory
from channel_sync.routes._errors import raise_http_error
from channel_sync.schemas.smart_locks import (
    LockControlPayload,
    LockSyncPayload,
    TuyaActionPayload,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


def require_property_owner(db: Engine, property_id: str, user_id: str) -> None:
    """
    Raise 403 unless the user owns the property.

    Raises:
        HTTPException: 403 when the property is missing or owned by someone else.
    """
    with db.connect() as conn:
        owned = property_belongs_to_user(conn, property_id, user_id)
    if not owned:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Property not found or unauthorized",
        )


def _reconcile(
    property_id: str,
    store: CredentialStore,
    client_factory: TuyaClientFactory,
    units: UnitDirectory,
    locks: LockRepository,
    allow_empty_delete: bool = False,
) -> dict[str, Any]:
    credential = store.refresh_if_needed(Platform.TUYA, property_id)
    client = client_factory(credential)
    result = DeviceReconciler(client, units, locks).reconcile(
        property_id, credential.access_token or "", allow_empty_delete=allow_empty_delete
    )
    return {
        "success": True,
        "device_count": result.synced,
        "created": result.created,
        "updated": result.updated,
        "skipped": result.skipped,
        "deleted": result.deleted,
        "failed": result.failed,
        "deletion_skipped": result.deletion_skipped,
        "message": f"Successfully synced {result.synced} devices",
    }


@router.post("/smart-locks/sync", status_code=status.HTTP_200_OK)
def sync_smart_locks(
    payload: LockSyncPayload,
    db: Engine = Depends(get_db_engine),
    store: CredentialStore = Depends(get_credential_store),
    client_factory: TuyaClientFactory = Depends(get_tuya_client_factory),
    units: UnitDirectory = Depends(get_unit_directory),
    locks: LockRepository = Depends(get_lock_repository),
) -> dict[str, Any]:
    """
    Reconcile the property's Tuya devices into local smart locks.

    Returns:
        dict: Counts per outcome and whether deletion was skipped.
    """
    try:
        require_property_owner(db, payload.property_id, payload.user_id)
        return _reconcile(
            payload.property_id,
            store,
            client_factory,
            units,
            locks,
            allow_empty_delete=payload.allow_empty_delete,
        )
    except Exception as e:
        raise_http_error(e, "smart_lock_sync_failed", property_id=payload.property_id)


@router.post("/smart-locks/control", status_code=status.HTTP_200_OK)
def control_smart_lock(
    payload: LockControlPayload,
    db: Engine = Depends(get_db_engine),
    store: CredentialStore = Depends(get_credential_store),
    client_factory: TuyaClientFactory = Depends(get_tuya_client_factory),
    locks: LockRepository = Depends(get_lock_repository),
    delay_seconds: float = Depends(get_lock_status_delay),
) -> dict[str, Any]:
    """
    Lock, unlock or refresh the status of one smart lock.

    Returns:
        dict: Status and battery level read back from the device.
    """
    try:
        require_property_owner(db, payload.property_id, payload.user_id)

        lock = locks.get_lock(payload.lock_id)
        if lock is None:
            raise HTTPException(status_code=404, detail="Smart lock not found")
        if lock.property_id != payload.property_id:
            raise HTTPException(status_code=403, detail="Unauthorized to control this device")

        credential = store.refresh_if_needed(Platform.TUYA, payload.property_id)
        controller = LockController(
            client_factory(credential), locks, delay_seconds=delay_seconds
        )
        token = credential.access_token or ""

        if payload.action == "refresh-status":
            state = controller.refresh_status(lock, token)
            message = "Status refreshed successfully"
        else:
            intent = LockIntent(payload.action)
            state = controller.execute(lock, intent, token)
            message = f"Successfully {intent.value}ed device"

        logger.info(
            "smart_lock_controlled",
            lock_id=lock.id,
            device_id=lock.device_id,
            action=payload.action,
            status=state.status.value,
        )
        return {
            "success": True,
            "status": state.status.value,
            "battery_level": state.battery_level,
            "command": state.command.as_payload() if state.command else None,
            "message": message,
        }
    except Exception as e:
        raise_http_error(e, "smart_lock_control_failed", lock_id=payload.lock_id)


@router.get("/smart-locks/tuya", status_code=status.HTTP_200_OK)
def tuya_status(
    property_id: str = Query(...),
    user_id: str = Query(...),
    action: str = Query("get-credentials"),
    db: Engine = Depends(get_db_engine),
    store: CredentialStore = Depends(get_credential_store),
    client_factory: TuyaClientFactory = Depends(get_tuya_client_factory),
) -> dict[str, Any]:
    """
    Read-only Tuya actions for a property.

    Actions:
        get-credentials: Connection state without secrets.
        test-connection: Fetch a token and list a first page of devices.
    """
    try:
        require_property_owner(db, property_id, user_id)

        if action == "get-credentials":
            credential = store.find(Platform.TUYA, property_id)
            return {
                "connected": bool(credential and credential.connected and credential.access_token),
                "has_credentials": bool(
                    credential and credential.client_id and credential.client_secret
                ),
                "region": credential.region if credential else None,
            }

        if action == "test-connection":
            credential = store.refresh_if_needed(Platform.TUYA, property_id)
            devices = client_factory(credential).get_devices(
                credential.access_token or "", page=1, page_size=5
            )
            return {"success": True, "device_count": len(devices)}

        raise HTTPException(status_code=400, detail="Invalid action")
    except Exception as e:
        raise_http_error(e, "tuya_status_failed", property_id=property_id, action=action)


@router.post("/smart-locks/tuya", status_code=status.HTTP_200_OK)
def tuya_action(
    payload: TuyaActionPayload,
    db: Engine = Depends(get_db_engine),
    store: CredentialStore = Depends(get_credential_store),
    client_factory: TuyaClientFactory = Depends(get_tuya_client_factory),
    units: UnitDirectory = Depends(get_unit_directory),
    locks: LockRepository = Depends(get_lock_repository),
) -> dict[str, Any]:
    """
    Mutating Tuya actions for a property.

    Actions:
        set-credentials: Validate client id/secret by fetching a token, then store them.
        disconnect: Null secrets and tokens; the row is kept.
        sync-devices: Same as POST /smart-locks/sync.
    """
    try:
        require_property_owner(db, payload.property_id, payload.user_id)

        if payload.action == "set-credentials":
            if not payload.client_id or not payload.client_secret:
                raise HTTPException(
                    status_code=400, detail="Client ID and Client Secret are required"
                )
            store.connect(
                Platform.TUYA,
                payload.property_id,
                client_id=payload.client_id,
                client_secret=payload.client_secret,
                region=(payload.region or TUYA_DEFAULT_REGION).lower(),
            )
            logger.info("tuya_connected", property_id=payload.property_id)
            return {"success": True}

        if payload.action == "disconnect":
            store.clear(Platform.TUYA, payload.property_id)
            return {"success": True}

        return _reconcile(payload.property_id, store, client_factory, units, locks)
    except Exception as e:
        raise_http_error(e, "tuya_action_failed", property_id=payload.property_id)
