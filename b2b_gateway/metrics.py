"""
Prometheus metrics for the B2B gateway
"""

from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST

BUILD_INFO = Gauge(
    'b2b_build_info',
    'Build information',
    ['version']
)

REQUESTS_TOTAL = Counter(
    'b2b_http_requests_total',
    'Total number of HTTP requests',
    ['status_class', 'path_group']
)

REQUEST_LATENCY = Histogram(
    'b2b_http_request_duration_seconds',
    'HTTP request latency',
    ['path_group'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

GATEWAY_CALLS_TOTAL = Counter(
    'b2b_gateway_calls_total',
    'Gateway calls by endpoint and result code',
    ['endpoint', 'code']
)

CREDITS_CHARGED_TOTAL = Counter(
    'b2b_credits_charged_total',
    'Credits debited from client balances',
    ['endpoint']
)

LEADS_SOLD_TOTAL = Counter(
    'b2b_leads_sold_total',
    'Leads sold through purchase-lead'
)

USAGE_LOG_FAILURES_TOTAL = Counter(
    'b2b_usage_log_failures_total',
    'Usage records that could not be written'
)


def path_group(path: str) -> str:
    """Collapse a request path into a low-cardinality label"""
    parts = [p for p in (path or "").split("/") if p]
    if len(parts) >= 2 and parts[1] == "b2b-api":
        return "gateway"
    if len(parts) >= 2 and parts[1] == "admin":
        return "admin"
    if len(parts) >= 2:
        return parts[1]
    return "root"


def observe_request(path: str, status: int, latency_ms: float) -> None:
    group = path_group(path)
    REQUESTS_TOTAL.labels(status_class=f"{status // 100}xx", path_group=group).inc()
    REQUEST_LATENCY.labels(path_group=group).observe(latency_ms / 1000.0)


def record_gateway_call(endpoint: str, code: str, credits: int = 0) -> None:
    GATEWAY_CALLS_TOTAL.labels(endpoint=endpoint, code=code).inc()
    if credits > 0:
        CREDITS_CHARGED_TOTAL.labels(endpoint=endpoint).inc(credits)


def render_latest():
    """Return (payload, content_type) for the scrape endpoint"""
    return generate_latest(), CONTENT_TYPE_LATEST
