from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest


http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests.",
    ["method", "path", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds.",
    ["method", "path"],
)

subscription_requests_total = Counter(
    "subscription_requests_total",
    "Subscription request ledger transitions.",
    ["status"],
)

storage_conflicts_total = Counter(
    "storage_conflicts_total",
    "Conditional saves rejected because the stored revision moved.",
    ["backend"],
)


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST
