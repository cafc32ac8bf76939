from __future__ import annotations

from prometheus_client import Counter, Histogram, Gauge


CONTENT_API_REQUESTS = Counter(
    "contentful_api_requests_total",
    "Total requests to the Contentful Management API",
    labelnames=("action", "result"),
)

CONTENT_API_LATENCY = Histogram(
    "contentful_api_request_latency_seconds",
    "Latency for Contentful Management API requests",
    labelnames=("action",),
    buckets=(0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0),
)

CONTENT_API_RETRIES = Counter(
    "contentful_api_retries_total",
    "Retries scheduled after retryable Contentful failures",
    labelnames=("kind",),
)

TOOL_CALLS = Counter(
    "mcp_tool_calls_total",
    "Tool invocations handled by server instances",
    labelnames=("tool", "result"),
)

ATTACHED_TRANSPORTS = Gauge(
    "mcp_attached_transports",
    "Transports currently attached to server instances",
)
