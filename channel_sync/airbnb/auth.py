"""OAuth refresh-token grant for Airbnb user tokens."""

from __future__ import annotations

from typing import Optional

import requests
import structlog

from channel_sync.config import AIRBNB_CLIENT_ID, AIRBNB_CLIENT_SECRET
from channel_sync.credentials.store import Credential, TokenGrant
from channel_sync.errors import AuthError, NotConfigured, RemoteApiError
from channel_sync.network.client import response_body, send_request

logger = structlog.get_logger(__name__)

TOKEN_URL = "https://api.airbnb.com/oauth/v1/access_token"


class AirbnbTokenService:
    """
    Exchange a user's refresh token for a new access token.

    Used as the CredentialStore fetcher for the airbnb platform.
    """

    def __init__(
        self,
        client_id: Optional[str] = AIRBNB_CLIENT_ID,
        client_secret: Optional[str] = AIRBNB_CLIENT_SECRET,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.session = session

    def __call__(self, credential: Credential) -> TokenGrant:
        return self.refresh(credential)

    def refresh(self, credential: Credential) -> TokenGrant:
        """
        Run the refresh_token grant.

        Args:
            credential (Credential): Airbnb credential holding the refresh token.

        Returns:
            TokenGrant: New access token, the rotated refresh token if Airbnb
            returned one, and ``expires_in`` as TTL.

        Raises:
            NotConfigured: If the app client id or secret is not set.
            AuthError: If there is no refresh token or Airbnb rejects it.
        """
        if not self.client_id or not self.client_secret:
            raise NotConfigured("AIRBNB_CLIENT_ID and AIRBNB_CLIENT_SECRET must be set")
        if not credential.refresh_token:
            raise AuthError(f"Airbnb token expired and no refresh token for {credential.scope}")

        try:
            res = send_request(
                "POST",
                TOKEN_URL,
                platform="airbnb",
                endpoint="oauth_token",
                session=self.session,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                data={
                    "grant_type": "refresh_token",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "refresh_token": credential.refresh_token,
                },
            )
        except RemoteApiError as e:
            logger.warning(
                "airbnb_token_refresh_rejected", user_id=credential.scope, status=e.status
            )
            raise AuthError(f"Airbnb token refresh rejected: {e.status}") from e

        data = response_body(res)
        if not isinstance(data, dict) or not data.get("access_token"):
            raise AuthError("Airbnb token response has no access_token")

        return TokenGrant(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            ttl_seconds=data.get("expires_in"),
        )
