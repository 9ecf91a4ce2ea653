"""
Tuya OpenAPI request signing.

The canonical string is a plain concatenation with no separators:

    GET   client_id + t + sorted_params
    POST  client_id + access_token + t + "POST" + sha256_hex(body) + sorted_params

where sorted_params joins ``key + value`` for every query parameter in key
order. The string is HMAC-SHA256'd with the client secret and hex-encoded in
upper case.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Any, Mapping, Optional

SIGN_METHOD = "HMAC-SHA256"

REGION_ENDPOINTS: dict[str, str] = {
    "cn": "https://openapi.tuyacn.com",
    "us": "https://openapi.tuyaus.com",
    "eu": "https://openapi.tuyaeu.com",
    "in": "https://openapi.tuyain.com",
    "sg": "https://openapi-sg.iotbing.com",
}
DEFAULT_REGION = "us"


def base_url_for_region(region: Optional[str]) -> str:
    """Map a region code to its data-center host. Unknown or empty codes map to us."""
    return REGION_ENDPOINTS.get((region or "").lower(), REGION_ENDPOINTS[DEFAULT_REGION])


def sorted_params(params: Optional[Mapping[str, Any]]) -> str:
    if not params:
        return ""
    return "".join(f"{key}{params[key]}" for key in sorted(params))


def body_hash(body: Optional[str]) -> str:
    # An absent body contributes nothing, not the hash of "".
    if not body:
        return ""
    return hashlib.sha256(body.encode("utf-8")).hexdigest()


def string_to_sign(
    method: str,
    client_id: str,
    timestamp: str,
    params: Optional[Mapping[str, Any]] = None,
    body: Optional[str] = None,
    access_token: Optional[str] = None,
) -> str:
    """
    Build the canonical string for one request.

    Args:
        method: "GET" or "POST".
        client_id: Tuya cloud project access id.
        timestamp: Milliseconds since epoch, as sent in the ``t`` header.
        params: Query parameters.
        body: Exact request body bytes as text (POST only).
        access_token: Token included in POST signatures.

    Returns:
        str: The string to HMAC.

    Raises:
        ValueError: For methods other than GET and POST.
    """
    method = method.upper()
    if method == "GET":
        return f"{client_id}{timestamp}{sorted_params(params)}"
    if method == "POST":
        return (
            f"{client_id}{access_token or ''}{timestamp}POST"
            f"{body_hash(body)}{sorted_params(params)}"
        )
    raise ValueError(f"Unsupported Tuya method: {method}")


def sign(client_secret: str, message: str) -> str:
    """HMAC-SHA256 of message keyed by the client secret, upper-case hex."""
    digest = hmac.new(client_secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256)
    return digest.hexdigest().upper()


def signed_headers(
    client_id: str,
    client_secret: str,
    method: str,
    timestamp: str,
    params: Optional[Mapping[str, Any]] = None,
    body: Optional[str] = None,
    access_token: str = "",
) -> dict[str, str]:
    """
    Produce the full Tuya header set for a request.

    The ``access_token`` header is sent empty on the token fetch itself.
    """
    signature = sign(
        client_secret,
        string_to_sign(method, client_id, timestamp, params, body, access_token),
    )
    headers = {
        "client_id": client_id,
        "sign": signature,
        "sign_method": SIGN_METHOD,
        "t": timestamp,
        "access_token": access_token,
        "lang": "en",
    }
    if body is not None:
        headers["Content-Type"] = "application/json"
    return headers
