from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection


def get_credential_row(conn: Connection, platform: str, scope: str) -> Optional[dict[str, Any]]:
    """
    Fetch the credential row for one (platform, scope) pair.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        platform (str): "tuya", "channex" or "airbnb".
        scope (str): Property id for Tuya, user id for Channex and Airbnb.

    Returns:
        Optional[dict[str, Any]]: Row as a dict, or None if never connected.
    """
    result = conn.execute(
        text(
            """
            SELECT platform, scope, client_id, client_secret, api_key,
                   access_token, refresh_token, region, expires_at,
                   connected, last_sync_at
            FROM channel_sync.credentials
            WHERE platform = :platform AND scope = :scope
        """
        ),
        {"platform": platform, "scope": scope},
    )
    row = result.mappings().fetchone()
    return dict(row) if row else None
