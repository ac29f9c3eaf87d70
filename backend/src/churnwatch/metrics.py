"""Prometheus metrics for analytics API traffic and dashboard refreshes."""
from prometheus_client import Counter, Gauge, Histogram

# Analytics API request metrics
api_requests_total = Counter(
    "churn_api_requests_total",
    "Total requests issued against the churn analytics API",
    labelnames=["endpoint", "status"],  # status: HTTP code or "error"
)

api_request_duration_seconds = Histogram(
    "churn_api_request_duration_seconds",
    "Churn analytics API request duration in seconds",
    labelnames=["endpoint"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Dataset metrics
static_dataset_failures_total = Counter(
    "churn_static_dataset_failures_total",
    "Static datasets that degraded to their empty default",
    labelnames=["dataset"],
)

queue_records_loaded = Gauge(
    "churn_queue_records_loaded",
    "Customer records held by the dashboard after the last committed queue fetch",
)

stale_cycles_discarded_total = Counter(
    "churn_stale_cycles_discarded_total",
    "Fetch cycles whose results were dropped because a newer cycle had started",
    labelnames=["kind"],  # static, queue
)
