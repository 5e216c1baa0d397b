"""
Prometheus metrics for the Brightcove provider.

Use prometheus_client for metrics with labeled counters, gauges, and
histograms. ``endpoint`` labels are client method names, never concrete
paths, to keep label cardinality bounded.
"""

from prometheus_client import Counter, Gauge, Histogram

BRIGHTCOVE_API_REQUESTS_TOTAL = Counter(
    'brightcove_api_requests_total',
    'Total Brightcove API requests by endpoint and response status',
    ['endpoint', 'status']
)

BRIGHTCOVE_API_REQUESTS_IN_FLIGHT = Gauge(
    'brightcove_api_requests_in_flight',
    'Brightcove API requests currently awaiting a response'
)

BRIGHTCOVE_API_REQUESTS_QUEUED = Gauge(
    'brightcove_api_requests_queued',
    'Brightcove API requests waiting for a concurrency slot'
)

BRIGHTCOVE_API_REQUEST_DURATION = Histogram(
    'brightcove_api_request_duration_seconds',
    'Brightcove API request duration in seconds',
    ['endpoint'],
    buckets=[0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30]
)

PROVIDER_NOT_FOUND_TOTAL = Counter(
    'brightcove_provider_not_found_total',
    'Catalog lookups that resolved to an absent upstream resource',
    ['code']
)
