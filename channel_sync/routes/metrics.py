"""Prometheus scrape endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """
    Expose all registered metrics in Prometheus text format.

    Example Response:
        # HELP channel_sync_api_requests_total Total outbound vendor API requests made
        # TYPE channel_sync_api_requests_total counter
        channel_sync_api_requests_total{endpoint="devices",platform="tuya",status_code="200"} 3.0
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
