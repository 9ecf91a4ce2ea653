"""
Unit tests for Tuya request signing.
"""

from __future__ import annotations

import hashlib
import hmac

import pytest

from channel_sync.tuya.signing import (
    REGION_ENDPOINTS,
    base_url_for_region,
    body_hash,
    sign,
    signed_headers,
    sorted_params,
    string_to_sign,
)

CLIENT_ID = "abc123"
SECRET = "s3cr3t"
TIMESTAMP = "1700000000000"


@pytest.mark.unit
def test_sorted_params_concatenates_key_value_in_key_order() -> None:
    """Test that params are joined as key+value sorted by key, with no separators."""
    assert sorted_params({"page_size": "5", "page_no": "1"}) == "page_no1page_size5"
    assert sorted_params(None) == ""
    assert sorted_params({}) == ""


@pytest.mark.unit
def test_get_string_to_sign_is_client_timestamp_params() -> None:
    """Test the GET canonical string: client_id + t + sorted params."""
    result = string_to_sign("GET", CLIENT_ID, TIMESTAMP, {"b": "2", "a": "1"})

    assert result == f"{CLIENT_ID}{TIMESTAMP}a1b2"


@pytest.mark.unit
def test_get_string_to_sign_ignores_access_token() -> None:
    """Test that GET signatures never include the access token."""
    with_token = string_to_sign("GET", CLIENT_ID, TIMESTAMP, access_token="tok")
    without_token = string_to_sign("GET", CLIENT_ID, TIMESTAMP)

    assert with_token == without_token == f"{CLIENT_ID}{TIMESTAMP}"


@pytest.mark.unit
def test_post_string_to_sign_includes_token_method_and_body_hash() -> None:
    """Test the POST canonical string layout."""
    body = '{"commands":[{"code":"switch","value":false}]}'
    expected_hash = hashlib.sha256(body.encode("utf-8")).hexdigest()

    result = string_to_sign("POST", CLIENT_ID, TIMESTAMP, body=body, access_token="tok")

    assert result == f"{CLIENT_ID}tok{TIMESTAMP}POST{expected_hash}"


@pytest.mark.unit
def test_body_hash_is_empty_for_missing_body() -> None:
    """Test that an absent body contributes an empty string, not sha256('')."""
    assert body_hash(None) == ""
    assert body_hash("") == ""


@pytest.mark.unit
def test_string_to_sign_rejects_other_methods() -> None:
    """Test that only GET and POST can be signed."""
    with pytest.raises(ValueError):
        string_to_sign("DELETE", CLIENT_ID, TIMESTAMP)


@pytest.mark.unit
def test_sign_is_uppercase_hmac_sha256() -> None:
    """Test that sign() matches HMAC-SHA256 keyed by the secret, upper-cased."""
    message = f"{CLIENT_ID}{TIMESTAMP}"
    expected = hmac.new(SECRET.encode(), message.encode(), hashlib.sha256).hexdigest().upper()

    assert sign(SECRET, message) == expected
    assert sign(SECRET, message) == sign(SECRET, message)


@pytest.mark.unit
def test_signature_changes_when_any_param_changes() -> None:
    """Test that changing a single query parameter changes the signature."""
    first = sign(SECRET, string_to_sign("GET", CLIENT_ID, TIMESTAMP, {"page_no": "1"}))
    second = sign(SECRET, string_to_sign("GET", CLIENT_ID, TIMESTAMP, {"page_no": "2"}))

    assert first != second


@pytest.mark.unit
def test_signed_headers_for_token_fetch() -> None:
    """Test the header set of an unauthenticated GET: empty access_token, no content type."""
    headers = signed_headers(CLIENT_ID, SECRET, "GET", TIMESTAMP)

    assert headers["client_id"] == CLIENT_ID
    assert headers["sign_method"] == "HMAC-SHA256"
    assert headers["t"] == TIMESTAMP
    assert headers["access_token"] == ""
    assert headers["lang"] == "en"
    assert headers["sign"] == sign(SECRET, f"{CLIENT_ID}{TIMESTAMP}")
    assert "Content-Type" not in headers


@pytest.mark.unit
def test_signed_headers_for_post_sets_content_type() -> None:
    """Test that POST headers carry a JSON content type and the token."""
    headers = signed_headers(CLIENT_ID, SECRET, "POST", TIMESTAMP, body="{}", access_token="tok")

    assert headers["Content-Type"] == "application/json"
    assert headers["access_token"] == "tok"


@pytest.mark.unit
@pytest.mark.parametrize(
    "region,expected",
    [
        ("cn", "https://openapi.tuyacn.com"),
        ("EU", "https://openapi.tuyaeu.com"),
        ("sg", "https://openapi-sg.iotbing.com"),
        ("mars", "https://openapi.tuyaus.com"),
        (None, "https://openapi.tuyaus.com"),
    ],
)
def test_base_url_for_region(region: str | None, expected: str) -> None:
    """Test the region table and the us fallback for unknown codes."""
    assert base_url_for_region(region) == expected


@pytest.mark.unit
def test_region_table_has_five_hosts() -> None:
    """Test that exactly the five Tuya data centers are known."""
    assert set(REGION_ENDPOINTS) == {"cn", "us", "eu", "in", "sg"}
