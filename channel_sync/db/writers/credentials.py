from typing import Any

import structlog
from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.engine import Connection

from channel_sync.models.credentials import CredentialRecord
from channel_sync.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

WRITABLE_FIELDS = (
    "client_id",
    "client_secret",
    "api_key",
    "access_token",
    "refresh_token",
    "region",
    "expires_at",
    "connected",
    "last_sync_at",
)

SECRET_FIELDS = (
    "client_id",
    "client_secret",
    "api_key",
    "access_token",
    "refresh_token",
    "expires_at",
)


def upsert_credential(conn: Connection, platform: str, scope: str, fields: dict[str, Any]) -> None:
    """
    Insert the credential row or update only the given fields.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        platform (str): Platform name.
        scope (str): Property id or user id.
        fields (dict[str, Any]): Partial set of credential columns.

    Raises:
        ValueError: If fields contains an unknown column.
    """
    unknown = set(fields) - set(WRITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown credential fields: {sorted(unknown)}")

    now = utc_now()
    values = {
        "platform": platform,
        "scope": scope,
        **fields,
        "created_at": now,
        "updated_at": now,
    }

    stmt = insert(CredentialRecord).values([values])
    set_dict = {col: getattr(stmt.excluded, col) for col in fields}
    set_dict["updated_at"] = stmt.excluded.updated_at

    stmt = stmt.on_conflict_do_update(
        index_elements=["platform", "scope"],
        set_=set_dict,
    )
    conn.execute(stmt)

    logger.debug("credential_upserted", platform=platform, scope=scope, fields=sorted(fields))


def clear_credential(conn: Connection, platform: str, scope: str) -> None:
    """
    Null secrets and tokens and mark the connection inactive. The row is kept.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        platform (str): Platform name.
        scope (str): Property id or user id.
    """
    stmt = (
        update(CredentialRecord)
        .where(CredentialRecord.platform == platform, CredentialRecord.scope == scope)
        .values(
            **{field: None for field in SECRET_FIELDS},
            connected=False,
            updated_at=utc_now(),
        )
    )
    conn.execute(stmt)
