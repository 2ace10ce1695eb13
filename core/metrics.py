"""
Prometheus metrics for the license service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# License metrics
licenses_generated_total = Counter(
    "licenses_generated_total",
    "Total licenses generated",
    ["is_free_trial"],
)

license_activations_total = Counter(
    "license_activations_total",
    "Total activation attempts",
    ["result"],
)

license_validations_total = Counter(
    "license_validations_total",
    "Total license validations by evaluated status",
    ["status"],
)

seat_operations_total = Counter(
    "seat_operations_total",
    "Total seat ledger operations",
    ["operation", "result"],
)

payments_recorded_total = Counter(
    "payments_recorded_total",
    "Total payments recorded",
    ["payment_type"],
)

# Background job metrics
expiry_sweep_runs_total = Counter(
    "expiry_sweep_runs_total",
    "Total expiry sweep runs",
    ["result"],
)

licenses_expired_total = Counter(
    "licenses_expired_total",
    "Total licenses moved to expired by the sweep",
)

# Admission control metrics
rate_limit_rejections_total = Counter(
    "rate_limit_rejections_total",
    "Total requests rejected by the rate limiter",
    ["tier"],
)

# Cache metrics
cache_hits_total = Counter(
    "cache_hits_total",
    "Total cache hits",
    ["cache_key"],
)

cache_misses_total = Counter(
    "cache_misses_total",
    "Total cache misses",
    ["cache_key"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
