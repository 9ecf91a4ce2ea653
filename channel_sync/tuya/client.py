"""
Signed-request client for the Tuya IoT OpenAPI.

Covers token issuance and the device endpoints used for smart locks: list,
details, status, commands and specifications.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests
import structlog

from channel_sync.credentials.store import Credential, TokenGrant
from channel_sync.errors import AuthError, NotConfigured, ProtocolError, RemoteApiError
from channel_sync.network.client import response_body, send_request
from channel_sync.tuya.signing import base_url_for_region, signed_headers
from channel_sync.utils.datetime import epoch_millis

logger = structlog.get_logger(__name__)

PLATFORM = "tuya"
TOKEN_PATH = "/v1.0/token?grant_type=1"
DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True)
class RemoteDevice:
    """A Tuya device as listed by the cloud. Never stored as-is."""

    id: str
    name: str
    category: str = ""
    status: tuple[tuple[str, Any], ...] = ()
    capabilities: Optional[dict[str, Any]] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RemoteDevice":
        return cls(
            id=str(payload["id"]),
            name=payload.get("name") or "",
            category=payload.get("category") or "",
            status=status_pairs(payload.get("status")),
            capabilities={"functions": payload["functions"]} if payload.get("functions") else None,
        )


def status_pairs(items: Optional[list[dict[str, Any]]]) -> tuple[tuple[str, Any], ...]:
    """Turn Tuya's ``[{"code", "value"}]`` list into (code, value) pairs."""
    return tuple((item["code"], item.get("value")) for item in items or [] if "code" in item)


class TuyaClient:
    """
    Client for one Tuya cloud project.

    Args:
        client_id: Access id of the cloud project.
        client_secret: Access secret, also the HMAC key.
        region: Data-center code (cn, us, eu, in, sg).
        session: Optional requests session.
        clock: Returns the millisecond timestamp string for the ``t`` header.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        region: Optional[str] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], str] = epoch_millis,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url_for_region(region)
        self.session = session
        self.clock = clock

    @classmethod
    def from_credential(
        cls, credential: Credential, session: Optional[requests.Session] = None
    ) -> "TuyaClient":
        if not credential.client_id or not credential.client_secret:
            raise NotConfigured(f"Tuya is not configured for {credential.scope}")
        return cls(credential.client_id, credential.client_secret, credential.region, session)

    def _request(
        self,
        method: str,
        path: str,
        endpoint: str,
        access_token: str = "",
        params: Optional[dict[str, Any]] = None,
        payload: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Send a signed request and unwrap Tuya's ``{"success", "result"}`` envelope.

        Raises:
            RemoteApiError: On non-2xx.
            ProtocolError: On ``success: false`` or a non-JSON body.
        """
        timestamp = self.clock()
        # Serialized once so the hashed body and the sent body are identical.
        body = json.dumps(payload, separators=(",", ":")) if payload is not None else None
        headers = signed_headers(
            self.client_id,
            self.client_secret,
            method,
            timestamp,
            params=params,
            body=body,
            access_token=access_token,
        )

        res = send_request(
            method,
            f"{self.base_url}{path}",
            platform=PLATFORM,
            endpoint=endpoint,
            session=self.session,
            headers=headers,
            params=params,
            data=body,
        )
        data = response_body(res)
        if not isinstance(data, dict):
            raise ProtocolError(f"Tuya {endpoint}: unexpected response body", body=data)
        if not data.get("success"):
            raise ProtocolError(
                f"Tuya {endpoint} failed: {data.get('code')} {data.get('msg')}", body=data
            )
        return data.get("result")

    def fetch_token(self) -> TokenGrant:
        """
        Obtain a new project access token.

        The token call is signed with the client-only string: no access token
        and no query parameters.

        Returns:
            TokenGrant: Access token, refresh token and TTL in seconds.

        Raises:
            AuthError: On any non-2xx or ``success: false`` answer.
        """
        try:
            result = self._request("GET", TOKEN_PATH, endpoint="token")
        except (RemoteApiError, ProtocolError) as e:
            logger.warning("tuya_token_rejected", client_id=self.client_id, error=str(e))
            raise AuthError(f"Tuya token request rejected: {e}") from e

        if not isinstance(result, dict) or not result.get("access_token"):
            raise AuthError("Tuya token response has no access_token")

        return TokenGrant(
            access_token=result["access_token"],
            refresh_token=result.get("refresh_token"),
            ttl_seconds=result.get("expire_time"),
        )

    def get_access_token(self) -> str:
        return self.fetch_token().access_token

    def _get_device_page(
        self, access_token: str, page: int, page_size: int
    ) -> tuple[list[RemoteDevice], Optional[int]]:
        params = {"page_no": str(page), "page_size": str(page_size)}
        result = self._request(
            "GET", "/v1.0/devices", endpoint="devices", access_token=access_token, params=params
        )
        if not isinstance(result, dict):
            raise ProtocolError("Tuya devices: result is not an object", body=result)
        devices = [RemoteDevice.from_payload(item) for item in result.get("devices") or []]
        return devices, result.get("total")

    def get_devices(
        self, access_token: str, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
    ) -> list[RemoteDevice]:
        """
        List one page of devices visible to the cloud project.

        Args:
            access_token: Valid project token.
            page: 1-based page number.
            page_size: Devices per page.

        Returns:
            list[RemoteDevice]: Devices on that page.
        """
        devices, _ = self._get_device_page(access_token, page, page_size)
        return devices

    def get_all_devices(
        self, access_token: str, page_size: int = DEFAULT_PAGE_SIZE
    ) -> list[RemoteDevice]:
        """
        Walk every page of the device list sequentially.

        Stops on a short page, or once ``total`` devices have been collected
        when Tuya reports it.
        """
        devices: list[RemoteDevice] = []
        page = 1
        while True:
            batch, total = self._get_device_page(access_token, page, page_size)
            devices.extend(batch)
            if len(batch) < page_size or (total is not None and len(devices) >= total):
                break
            page += 1

        logger.debug("tuya_devices_listed", count=len(devices), pages=page)
        return devices

    def get_device_details(self, device_id: str, access_token: str) -> RemoteDevice:
        result = self._request(
            "GET", f"/v1.0/devices/{device_id}", endpoint="device", access_token=access_token
        )
        if not isinstance(result, dict):
            raise ProtocolError("Tuya device: result is not an object", body=result)
        return RemoteDevice.from_payload(result)

    def get_device_status(self, device_id: str, access_token: str) -> tuple[tuple[str, Any], ...]:
        """
        Read the current data points of a device.

        Returns:
            tuple[tuple[str, Any], ...]: (code, value) pairs in vendor order.
        """
        result = self._request(
            "GET",
            f"/v1.0/devices/{device_id}/status",
            endpoint="device_status",
            access_token=access_token,
        )
        return status_pairs(result)

    def send_command(
        self, device_id: str, commands: list[dict[str, Any]], access_token: str
    ) -> bool:
        """
        Send data-point commands to a device.

        Args:
            device_id: Tuya device id.
            commands: ``[{"code": ..., "value": ...}]``.
            access_token: Valid project token.

        Returns:
            bool: True when Tuya accepted the command.

        Raises:
            ProtocolError: If Tuya answers ``success: false``.
        """
        self._request(
            "POST",
            f"/v1.0/devices/{device_id}/commands",
            endpoint="device_commands",
            access_token=access_token,
            payload={"commands": commands},
        )
        return True

    def get_device_specification(self, device_id: str, access_token: str) -> dict[str, Any]:
        """
        Fetch the declared functions and status ranges of a device.

        Returns:
            dict[str, Any]: Tuya's ``{"category", "functions", "status"}`` object.
        """
        result = self._request(
            "GET",
            f"/v1.0/devices/{device_id}/specifications",
            endpoint="device_specification",
            access_token=access_token,
        )
        if not isinstance(result, dict):
            raise ProtocolError("Tuya specification: result is not an object", body=result)
        return result


def fetch_tuya_token(credential: Credential) -> TokenGrant:
    """CredentialStore token fetcher for the Tuya platform."""
    return TuyaClient.from_credential(credential).fetch_token()
