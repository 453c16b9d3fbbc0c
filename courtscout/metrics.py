"""Prometheus metrics definitions for courtscout.

Exposes metrics for:
1. HTTP API metrics (requests, latency, errors)
2. Nearby API client metrics (calls, latency, errors, skipped records)
3. Discovery session metrics (fetch outcomes, superseded fetches)
4. Pipeline metrics (ranked and rendered set sizes)
"""
from prometheus_client import Counter, Histogram, Gauge

# =============================================================================
# HTTP API METRICS
# =============================================================================

# Request counter with method, endpoint, and status labels
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
)

# Request latency histogram
HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Active requests gauge
HTTP_REQUESTS_IN_PROGRESS = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests currently being processed",
    ["method", "endpoint"],
)

# Response size histogram
HTTP_RESPONSE_SIZE_BYTES = Histogram(
    "http_response_size_bytes",
    "HTTP response body size in bytes",
    ["method", "endpoint"],
    buckets=(100, 500, 1000, 5000, 10000, 50000, 100000, 500000),
)

# =============================================================================
# NEARBY API CLIENT METRICS
# =============================================================================

# API call counter
NEARBY_API_CALLS_TOTAL = Counter(
    "nearby_api_calls_total",
    "Total number of nearby-venues API calls",
    ["status"],  # status: success, error
)

# API call latency
NEARBY_API_CALL_DURATION_SECONDS = Histogram(
    "nearby_api_call_duration_seconds",
    "Nearby-venues API call latency in seconds",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# API error counter by error type
NEARBY_API_ERRORS_TOTAL = Counter(
    "nearby_api_errors_total",
    "Total number of nearby-venues API errors",
    ["error_type"],  # error_type: http_error, timeout, connection_error, invalid_response, not_ok
)

# Venue records dropped because they failed validation
NEARBY_API_RECORDS_SKIPPED_TOTAL = Counter(
    "nearby_api_records_skipped_total",
    "Total number of venue records skipped as malformed",
)

# =============================================================================
# DISCOVERY SESSION METRICS
# =============================================================================

# Fetch outcomes as seen by sessions
SESSION_FETCH_RESULTS_TOTAL = Counter(
    "session_fetch_results_total",
    "Results of session fetches",
    ["result"],  # result: committed, error, superseded
)

# Venues committed per successful fetch
SESSION_FETCHED_VENUES = Histogram(
    "session_fetched_venues",
    "Number of venues committed per fetch",
    buckets=(0, 10, 25, 50, 100, 250, 500, 1000, 2500),
)

# =============================================================================
# PIPELINE METRICS
# =============================================================================

# Ranked venues after filtering
PIPELINE_RANKED_VENUES = Histogram(
    "pipeline_ranked_venues",
    "Number of venues surviving filters",
    buckets=(0, 10, 25, 50, 100, 250, 500, 1000, 2500),
)

# Render sets truncated by the zoom cap
PIPELINE_RENDER_TRUNCATIONS_TOTAL = Counter(
    "pipeline_render_truncations_total",
    "Number of render sets truncated by the zoom-dependent cap",
    ["zoom_bucket"],  # zoom_bucket: wide, close, none
)
