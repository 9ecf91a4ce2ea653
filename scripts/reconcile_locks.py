import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse

import structlog

from channel_sync.config import DRY_RUN
from channel_sync.credentials.store import Platform
from channel_sync.db.engine import engine
from channel_sync.db.repositories import SqlLockRepository, SqlUnitDirectory
from channel_sync.dependencies import get_credential_store
from channel_sync.locks.matching import SubstringUnitMatcher
from channel_sync.locks.reconciler import DeviceReconciler, is_lock_like
from channel_sync.logging_config import setup_logging
from channel_sync.tuya.client import TuyaClient

setup_logging()
logger = structlog.get_logger(__name__)


def preview(client: TuyaClient, units: SqlUnitDirectory, property_id: str, token: str) -> None:
    """Print which unit each lock-like device would be assigned to, without writing."""
    candidates = {unit.name: unit.id for unit in units.list_units(property_id)}
    matcher = SubstringUnitMatcher()

    for device in client.get_all_devices(token):
        if not is_lock_like(device):
            continue
        unit_id = matcher.match(device.name, candidates)
        print(f"{device.id}\t{device.name!r}\t-> {unit_id or 'no match'}")


def main() -> None:
    """
    Reconcile the Tuya locks of one property from the command line.

    With --dry-run (or DRY_RUN=true) the device-to-unit assignment is printed
    and nothing is written.
    """
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument("property_id")
    parser.add_argument("--dry-run", action="store_true", default=DRY_RUN)
    parser.add_argument("--allow-empty-delete", action="store_true")
    args = parser.parse_args()

    store = get_credential_store(engine)
    credential = store.refresh_if_needed(Platform.TUYA, args.property_id)
    client = TuyaClient.from_credential(credential)
    units = SqlUnitDirectory(engine)
    token = credential.access_token or ""

    if args.dry_run:
        preview(client, units, args.property_id, token)
        return

    logger.info("lock_reconcile_cli_started", property_id=args.property_id)
    try:
        result = DeviceReconciler(client, units, SqlLockRepository(engine)).reconcile(
            args.property_id, token, allow_empty_delete=args.allow_empty_delete
        )
    except Exception:
        logger.exception("lock_reconcile_cli_failed", property_id=args.property_id)
        raise

    logger.info(
        "lock_reconcile_cli_completed",
        property_id=args.property_id,
        created=result.created,
        updated=result.updated,
        skipped=result.skipped,
        deleted=result.deleted,
        failed=result.failed,
        deletion_skipped=result.deletion_skipped,
    )


if __name__ == "__main__":
    main()
