"""Prometheus metrics for monitoring"""
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest
import time
from functools import wraps
from typing import Callable

registry = CollectorRegistry()

request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

service_operations = Counter(
    'designquote_operations_total',
    'Service layer operations by outcome',
    ['operation', 'entity', 'outcome'],
    registry=registry
)

service_operation_duration = Histogram(
    'designquote_operation_duration_seconds',
    'Service layer operation duration in seconds',
    ['operation', 'entity'],
    registry=registry
)

# Bucket bounds follow the quote size bands used by the metrics report.
quote_value = Histogram(
    'designquote_quote_value',
    'Total price of newly created quotes',
    buckets=(5500.0, 10500.0, 25500.0, float('inf')),
    registry=registry
)

line_item_writes = Counter(
    'designquote_line_item_writes_total',
    'Quote line item writes',
    ['kind', 'pricing_mode'],
    registry=registry
)

quote_recalculations = Counter(
    'designquote_quote_recalculations_total',
    'Quote total_price recomputations',
    ['trigger'],
    registry=registry
)

rate_limit_exceeded = Counter(
    'rate_limit_exceeded_total',
    'Requests rejected by the per-user rate limit',
    ['scope'],
    registry=registry
)

audit_logs_created = Counter(
    'audit_logs_created_total',
    'Audit rows staged',
    ['action'],
    registry=registry
)

redis_connected = Gauge(
    'redis_connected',
    'Redis connection status (1=connected, 0=disconnected)',
    registry=registry
)

db_connected = Gauge(
    'db_connected',
    'Database connection status (1=connected, 0=disconnected)',
    registry=registry
)


def track_operation(operation: str, entity: str):
    """Count and time an async service call, split by success or error."""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            started = time.perf_counter()
            outcome = 'error'
            try:
                result = await func(*args, **kwargs)
                outcome = 'success'
                return result
            finally:
                service_operations.labels(operation=operation, entity=entity, outcome=outcome).inc()
                service_operation_duration.labels(operation=operation, entity=entity).observe(
                    time.perf_counter() - started
                )
        return wrapper
    return decorator


def get_metrics_text() -> str:
    return generate_latest(registry).decode('utf-8')
