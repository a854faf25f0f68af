"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking operations',
    ['operation', 'result']  # create/update, ok/not_eligible/no_vacancy/...
)

reservation_latency = Histogram(
    'booking_reservation_latency_seconds',
    'Time spent in the capacity check and write for one reservation',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Room lock metrics
room_lock_wait = Histogram(
    'room_lock_wait_seconds',
    'Time spent waiting for a per-room lock',
    ['strategy'],
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

room_lock_timeouts = Counter(
    'room_lock_timeouts_total',
    'Room lock acquisitions that gave up waiting',
    ['strategy']
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(operation: str, result: str):
    """Record a booking operation outcome. Operation: create, update"""
    booking_attempts.labels(operation=operation, result=result).inc()


def record_lock_wait(strategy: str, seconds: float):
    room_lock_wait.labels(strategy=strategy).observe(seconds)


def record_lock_timeout(strategy: str):
    room_lock_timeouts.labels(strategy=strategy).inc()
