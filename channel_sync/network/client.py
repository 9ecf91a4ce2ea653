"""
Shared outbound HTTP send used by the Tuya, Channex and Airbnb clients.

Every call carries the configured timeout and is recorded in the API
metrics. A non-2xx answer raises RemoteApiError with the decoded body; no
call is retried here.
"""

import time
from typing import Any, Optional

import requests
import structlog

from channel_sync.config import HTTP_TIMEOUT_SECONDS
from channel_sync.errors import RemoteApiError
from channel_sync.metrics import api_latency, api_requests

logger = structlog.get_logger(__name__)


def response_body(res: requests.Response) -> Any:
    """
    Decode a response body as JSON, falling back to text.

    Args:
        res (requests.Response): Vendor response.

    Returns:
        Any: Parsed JSON, or the raw text when the body is not JSON.
    """
    try:
        return res.json()
    except ValueError:
        return res.text


def send_request(
    method: str,
    url: str,
    platform: str,
    endpoint: str,
    session: Optional[requests.Session] = None,
    **kwargs: Any,
) -> requests.Response:
    """
    Issue one HTTP request with timeout, metrics and status checking.

    Args:
        method (str): HTTP verb.
        url (str): Absolute URL.
        platform (str): Metric label, one of tuya, channex or airbnb.
        endpoint (str): Logical endpoint name for metrics and logs.
        session (Optional[requests.Session]): Session to send through; the
            requests module is used when None.
        **kwargs: Passed to requests (headers, params, json, data).

    Returns:
        requests.Response: The 2xx response.

    Raises:
        RemoteApiError: On any non-2xx status.
        requests.RequestException: On connection errors and timeouts.
    """
    kwargs.setdefault("timeout", HTTP_TIMEOUT_SECONDS)
    sender = session if session is not None else requests

    start_time = time.time()
    try:
        res = sender.request(method, url, **kwargs)
    except requests.RequestException as e:
        api_requests.labels(platform=platform, endpoint=endpoint, status_code="error").inc()
        logger.warning("api_request_failed", platform=platform, endpoint=endpoint, error=str(e))
        raise
    latency = time.time() - start_time

    api_requests.labels(
        platform=platform, endpoint=endpoint, status_code=str(res.status_code)
    ).inc()
    api_latency.labels(platform=platform, endpoint=endpoint).observe(latency)

    if not 200 <= res.status_code < 300:
        body = response_body(res)
        logger.warning(
            "api_request_rejected",
            platform=platform,
            endpoint=endpoint,
            status_code=res.status_code,
            body=body,
        )
        raise RemoteApiError(res.status_code, body)

    logger.debug(
        "api_request_completed",
        platform=platform,
        endpoint=endpoint,
        status_code=res.status_code,
        latency=round(latency, 3),
    )
    return res
