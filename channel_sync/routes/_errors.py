"""
Translation of channel_sync errors into HTTP responses.

Vendor failures propagate unchanged from the clients up to the route, which
calls ``raise_http_error`` from its ``except Exception`` branch.
"""

from __future__ import annotations

from typing import Any, NoReturn

import requests
import structlog
from fastapi import HTTPException, status

from channel_sync.errors import (
    AuthError,
    InvalidRequest,
    NotConnected,
    NotFound,
    ProtocolError,
    RemoteApiError,
)

logger = structlog.get_logger(__name__)


def raise_http_error(error: Exception, event: str, **context: Any) -> NoReturn:
    """
    Log an error and raise the matching HTTPException.

    Args:
        error: The exception caught by the route.
        event: Log event name.
        **context: Extra structured log fields.

    Raises:
        HTTPException: Always.
    """
    if isinstance(error, HTTPException):
        raise error

    if isinstance(error, AuthError):
        logger.warning(event, error=str(error), **context)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(error))

    if isinstance(error, InvalidRequest):
        logger.info(event, error=str(error), **context)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))

    if isinstance(error, (NotConnected, NotFound)):
        logger.info(event, error=str(error), **context)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))

    if isinstance(error, RemoteApiError):
        logger.warning(event, status=error.status, body=error.body, **context)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": str(error), "status": error.status, "body": error.body},
        )

    if isinstance(error, ProtocolError):
        logger.warning(event, error=str(error), body=error.body, **context)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": str(error), "body": error.body},
        )

    if isinstance(error, requests.RequestException):
        logger.warning(event, error=str(error), **context)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Upstream request failed: {error}"
        )

    logger.exception(event, error=str(error), **context)
    raise HTTPException(status_code=500, detail="Internal server error")
