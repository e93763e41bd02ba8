"""Prometheus metrics for concert session coordination.

Metrics are exposed via HTTP on METRICS_PORT when METRICS_ENABLED is set.

Metrics exported:
- concert_rooms_created_total: Counter of rooms created
- concert_rooms_destroyed_total: Counter of rooms removed, by reason
- concert_audience_joins_total: Counter of join attempts by result
- concert_operation_errors_total: Counter of failed API operations by error type

Usage:
    from resource_server.services.metrics import start_metrics_server, audience_joins

    start_metrics_server(port=8001)
    audience_joins.labels(result='joined').inc()
"""

from prometheus_client import Counter, start_http_server
import logging

logger = logging.getLogger(__name__)

rooms_created = Counter(
    'concert_rooms_created_total',
    'Total concert rooms created'
)

rooms_destroyed = Counter(
    'concert_rooms_destroyed_total',
    'Total concert rooms removed',
    labelnames=['reason']  # reason: destroy, expire_all, stale
)

audience_joins = Counter(
    'concert_audience_joins_total',
    'Concert join attempts',
    labelnames=['result']  # result: joined, rejoined, closed, full
)

operation_errors = Counter(
    'concert_operation_errors_total',
    'Failed concert API operations',
    labelnames=['operation', 'error']
)


def start_metrics_server(port: int = 8001):
    """Start Prometheus metrics HTTP server."""
    try:
        start_http_server(port)
        logger.info(f"✅ Metrics server started on port {port}")
    except Exception as e:
        logger.error(f"❌ Failed to start metrics server: {e}")
