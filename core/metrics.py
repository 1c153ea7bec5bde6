"""
Core metrics collection for the storefront using Prometheus
"""
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, Info, generate_latest

from core.config import settings

# Application registry, kept apart from the default one so tests can import freely
REGISTRY = CollectorRegistry()

app_info = Info("storefront_app", "Storefront application information", registry=REGISTRY)
app_info.info({"version": settings.app_version, "environment": settings.environment})

# Request metrics
request_count = Counter(
    "storefront_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

request_duration = Histogram(
    "storefront_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=REGISTRY,
)

# Checkout and payment metrics
checkouts_total = Counter(
    "storefront_checkouts_total",
    "Checkout attempts by outcome",
    ["status"],
    registry=REGISTRY,
)

payment_notifications_total = Counter(
    "storefront_payment_notifications_total",
    "Payment gateway notifications by outcome",
    ["outcome"],
    registry=REGISTRY,
)

orders_paid_total = Counter(
    "storefront_orders_paid_total",
    "Orders transitioned from pending to paid",
    registry=REGISTRY,
)

gateway_duration = Histogram(
    "storefront_gateway_request_duration_seconds",
    "Time spent creating hosted payment sessions",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
    registry=REGISTRY,
)


class MetricsCollector:
    """Thin facade over the module-level collectors"""

    def track_request(self, method: str, endpoint: str, status: int, duration: float) -> None:
        request_count.labels(method=method, endpoint=endpoint, status=str(status)).inc()
        request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def track_checkout(self, status: str) -> None:
        checkouts_total.labels(status=status).inc()

    def track_notification(self, outcome: str) -> None:
        payment_notifications_total.labels(outcome=outcome).inc()

    def track_order_paid(self) -> None:
        orders_paid_total.inc()

    def track_gateway_call(self, duration: float) -> None:
        gateway_duration.observe(duration)


metrics = MetricsCollector()


def get_metrics_response() -> tuple:
    """Metrics payload and content type for the /metrics endpoint"""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
