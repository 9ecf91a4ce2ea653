"""
Per-scope platform credentials with expiry-driven token refresh.

The store is the only place that decides whether an access token is still
usable. Clients receive it explicitly; nothing looks credentials up from
ambient state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Protocol

import structlog

from channel_sync.errors import AuthError, NotConfigured
from channel_sync.metrics import token_refreshes
from channel_sync.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

DEFAULT_TOKEN_TTL_SECONDS = 3599


class Platform(str, Enum):
    TUYA = "tuya"
    CHANNEX = "channex"
    AIRBNB = "airbnb"


@dataclass(frozen=True)
class Credential:
    """One platform connection for a property (Tuya) or a user (Channex, Airbnb)."""

    platform: Platform
    scope: str
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    api_key: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    region: Optional[str] = None
    expires_at: Optional[datetime] = None
    connected: bool = False
    last_sync_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Credential":
        return cls(
            platform=Platform(row["platform"]),
            scope=row["scope"],
            client_id=row.get("client_id"),
            client_secret=row.get("client_secret"),
            api_key=row.get("api_key"),
            access_token=row.get("access_token"),
            refresh_token=row.get("refresh_token"),
            region=row.get("region"),
            expires_at=row.get("expires_at"),
            connected=bool(row.get("connected")),
            last_sync_at=row.get("last_sync_at"),
        )


@dataclass(frozen=True)
class TokenGrant:
    """What a platform token endpoint hands back."""

    access_token: str
    refresh_token: Optional[str] = None
    ttl_seconds: Optional[int] = None
    extra: dict[str, Any] = field(default_factory=dict)


TokenFetcher = Callable[[Credential], TokenGrant]


class CredentialRepository(Protocol):
    def load(self, platform: str, scope: str) -> Optional[Credential]: ...

    def save(self, platform: str, scope: str, fields: dict[str, Any]) -> None: ...

    def clear(self, platform: str, scope: str) -> None: ...


REQUIRED_FIELDS: dict[Platform, tuple[tuple[str, ...], ...]] = {
    # Each inner tuple is one acceptable combination; any satisfied combination passes.
    Platform.TUYA: (("client_id", "client_secret"),),
    Platform.CHANNEX: (("api_key",),),
    Platform.AIRBNB: (("refresh_token",), ("access_token",)),
}


def has_required_fields(credential: Credential) -> bool:
    """
    Check a credential against its platform's required field combinations.

    Args:
        credential (Credential): Credential to check.

    Returns:
        bool: True if at least one combination is fully populated.
    """
    return any(
        all(getattr(credential, name) for name in combination)
        for combination in REQUIRED_FIELDS[credential.platform]
    )


class CredentialStore:
    """
    Read, refresh and mutate platform credentials.

    Concurrent refreshes for the same scope are not deduplicated. Two callers
    that both see an expired token will each fetch and persist a new one; the
    last write wins and both tokens are usable.

    Args:
        repository: Persistence for credential rows.
        token_fetchers: Maps a platform to the callable that obtains a new
            access token. Platforms without an entry (Channex) are never refreshed.
        clock: Returns the current timezone-aware time.
    """

    def __init__(
        self,
        repository: CredentialRepository,
        token_fetchers: Optional[Mapping[Platform, TokenFetcher]] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.repository = repository
        self.token_fetchers = dict(token_fetchers or {})
        self.clock = clock

    def get(self, platform: Platform, scope: str) -> Credential:
        """
        Load a credential that has the fields its platform needs.

        Raises:
            NotConfigured: If the row is missing or incomplete.
        """
        credential = self.repository.load(platform.value, scope)
        if credential is None or not has_required_fields(credential):
            raise NotConfigured(f"{platform.value} is not configured for {scope}")
        return credential

    def find(self, platform: Platform, scope: str) -> Optional[Credential]:
        """Load a credential row as-is, or None."""
        return self.repository.load(platform.value, scope)

    @staticmethod
    def is_expired(credential: Credential, now: datetime) -> bool:
        """
        Whether the access token must be refreshed before use.

        A token without a recorded expiry is treated as valid.
        """
        if not credential.access_token:
            return True
        if credential.expires_at is None:
            return False
        return credential.expires_at <= now

    def _fetch_token(self, fetcher: TokenFetcher, credential: Credential) -> TokenGrant:
        platform = credential.platform.value
        try:
            grant = fetcher(credential)
        except AuthError:
            token_refreshes.labels(platform=platform, status="failure").inc()
            raise
        except Exception as e:
            token_refreshes.labels(platform=platform, status="failure").inc()
            logger.warning(
                "token_fetch_failed", platform=platform, scope=credential.scope, error=str(e)
            )
            raise AuthError(f"{platform} token request failed for {credential.scope}: {e}") from e
        token_refreshes.labels(platform=platform, status="success").inc()
        return grant

    def _token_fields(self, grant: TokenGrant, now: datetime) -> dict[str, Any]:
        ttl = grant.ttl_seconds or DEFAULT_TOKEN_TTL_SECONDS
        fields: dict[str, Any] = {
            "access_token": grant.access_token,
            "expires_at": now + timedelta(seconds=ttl),
            "connected": True,
        }
        # Vendors that rotate refresh tokens return a new one; keep the old one otherwise.
        if grant.refresh_token:
            fields["refresh_token"] = grant.refresh_token
        return fields

    def refresh_if_needed(self, platform: Platform, scope: str) -> Credential:
        """
        Return a credential whose access token is usable now.

        When the stored token is missing or expired, the platform's token
        fetcher is called once and the result is persisted with a single write.

        Raises:
            NotConfigured: If the credential is missing or incomplete.
            AuthError: If the token endpoint rejects the credential.
        """
        credential = self.get(platform, scope)
        fetcher = self.token_fetchers.get(platform)
        now = self.clock()

        if fetcher is None or not self.is_expired(credential, now):
            return credential

        logger.info("token_refresh_started", platform=platform.value, scope=scope)
        fields = self._token_fields(self._fetch_token(fetcher, credential), now)
        self.repository.save(platform.value, scope, fields)
        logger.info("token_refreshed", platform=platform.value, scope=scope)

        return replace(credential, **fields)

    def connect(self, platform: Platform, scope: str, **fields: Any) -> Credential:
        """
        Store new connection details after proving they work.

        For platforms with a token fetcher the details are exchanged for a
        token first, and secrets and token are persisted together in one
        write. Nothing is stored when the exchange fails.

        Raises:
            NotConfigured: If the details lack the platform's required fields.
            AuthError: If the token endpoint rejects them.
        """
        candidate = Credential(platform=platform, scope=scope, **fields)
        if not has_required_fields(candidate):
            raise NotConfigured(f"{platform.value} connection details are incomplete")

        fetcher = self.token_fetchers.get(platform)
        now = self.clock()
        if fetcher is not None and self.is_expired(candidate, now):
            grant = self._fetch_token(fetcher, candidate)
            fields = {**fields, **self._token_fields(grant, now)}
        else:
            fields = {**fields, "connected": True}

        self.repository.save(platform.value, scope, fields)
        logger.info("credential_connected", platform=platform.value, scope=scope)
        return replace(candidate, **fields)

    def set(self, platform: Platform, scope: str, **fields: Any) -> None:
        """Partially update (or create) the credential row."""
        self.repository.save(platform.value, scope, fields)
        logger.info(
            "credential_updated", platform=platform.value, scope=scope, fields=sorted(fields)
        )

    def clear(self, platform: Platform, scope: str) -> None:
        """Disconnect: null tokens and secrets, keep the row."""
        self.repository.clear(platform.value, scope)
        logger.info("credential_cleared", platform=platform.value, scope=scope)
