"""
Prometheus metrics for outbound vendor calls, token refreshes, device
reconciliation and lock commands.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Example:
    >>> from channel_sync.metrics import reconcile_total
    >>> reconcile_total.labels(outcome="created").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# API Metrics
# =============================================================================

api_requests = Counter(
    "channel_sync_api_requests_total",
    "Total outbound vendor API requests made",
    ["platform", "endpoint", "status_code"],
)
"""
Counter for outbound requests.

Labels:
    platform: tuya, channex or airbnb
    endpoint: Logical endpoint name (e.g., "devices", "availability")
    status_code: HTTP status code (e.g., "200", "401", "422")
"""

api_latency = Histogram(
    "channel_sync_api_latency_seconds",
    "Outbound vendor API request latency in seconds",
    ["platform", "endpoint"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, float("inf")),
)

# =============================================================================
# Credential Metrics
# =============================================================================

token_refreshes = Counter(
    "channel_sync_token_refreshes_total",
    "Total number of access token refresh operations",
    ["platform", "status"],
)

# =============================================================================
# Sync Metrics
# =============================================================================

reconcile_total = Counter(
    "channel_sync_lock_reconcile_total",
    "Smart lock rows touched by device reconciliation",
    ["outcome"],
)
"""
Counter for reconciliation outcomes.

Labels:
    outcome: created, updated, skipped, deleted or failed
"""

lock_commands = Counter(
    "channel_sync_lock_commands_total",
    "Lock commands sent to devices",
    ["intent", "code", "status"],
)

sync_records_failed = Counter(
    "channel_sync_sync_record_failures_total",
    "Best-effort sync record writes that failed",
    ["platform"],
)
