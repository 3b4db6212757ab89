"""
Prometheus metrics.

HTTP request metrics come from before/after request hooks; checkout and
order backend metrics are recorded by the cart blueprint and the order
client. /metrics is unauthenticated: keep it on the internal network.
"""
import os
import time

from flask import Blueprint, Response, request, g
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CollectorRegistry, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess, REGISTRY

metrics_bp = Blueprint('metrics', __name__)

# Gunicorn workers each hold their own counters; aggregate through the multiproc dir
MULTIPROCESS_MODE = 'PROMETHEUS_MULTIPROC_DIR' in os.environ

if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
    _metric_registry = None
else:
    registry = REGISTRY
    _metric_registry = REGISTRY

SKIPPED_ENDPOINTS = {'metrics.metrics', 'static'}

http_requests_total = Counter(
    'http_requests_total',
    'HTTP requests by endpoint and status',
    ['method', 'endpoint', 'http_status'],
    registry=_metric_registry
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint'],
    registry=_metric_registry,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_requests_in_flight = Gauge(
    'http_requests_in_flight',
    'HTTP requests being processed',
    registry=_metric_registry,
    multiprocess_mode='livesum'
)

orders_placed_total = Counter(
    'orders_placed_total',
    'Checkouts accepted by the order backend',
    registry=_metric_registry
)

order_failures_total = Counter(
    'order_failures_total',
    'Checkouts rejected or unanswered by the order backend',
    registry=_metric_registry
)

stock_decrement_failures_total = Counter(
    'stock_decrement_failures_total',
    'Placed orders whose stock decrement failed',
    registry=_metric_registry
)

order_backend_request_seconds = Histogram(
    'order_backend_request_seconds',
    'Latency of calls to the order backend',
    ['method', 'path', 'outcome'],
    registry=_metric_registry,
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)


def setup_metrics_instrumentation(app):
    """Register the request timing hooks on the app."""

    @app.before_request
    def start_request_timer():
        if request.endpoint in SKIPPED_ENDPOINTS:
            return
        g._metrics_started_at = time.perf_counter()
        http_requests_in_flight.inc()

    @app.after_request
    def record_request_metrics(response):
        started_at = g.pop('_metrics_started_at', None)
        if started_at is None:
            return response
        try:
            endpoint = request.endpoint or 'unknown'
            http_request_duration_seconds.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(time.perf_counter() - started_at)
            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                http_status=response.status_code
            ).inc()
            http_requests_in_flight.dec()
        except Exception as e:
            app.logger.warning(f"Failed to record metrics: {e}")
        return response


@metrics_bp.route('/metrics')
def metrics():
    """Prometheus scrape endpoint."""
    return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)
