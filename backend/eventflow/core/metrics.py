"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Approval token metrics
token_verifications = Counter(
    'approval_token_verifications_total',
    'Approval token verification attempts',
    ['result']  # ok, invalid_format, invalid_action, invalid_event_id, expired, bad_signature, replayed
)

# Moderation metrics
moderation_actions = Counter(
    'moderation_actions_total',
    'Moderation actions applied to events',
    ['action', 'result']  # approve/reject x success/not_found/error
)

# Notification metrics
notification_sends = Counter(
    'notification_sends_total',
    'Outbound notification send attempts',
    ['kind', 'result']  # kind: subscriber, organizer, moderation
)

notification_send_latency = Histogram(
    'notification_send_latency_seconds',
    'Latency of a single outbound notification send',
    ['kind'],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Retention metrics
retention_outcomes = Counter(
    'retention_accounts_total',
    'Accounts processed by the retention job',
    ['outcome']  # warned, deleted, error
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_token_verification(result: str):
    token_verifications.labels(result=result).inc()


def record_moderation_action(action: str, result: str):
    """Record moderation action. Result: success, not_found, error"""
    moderation_actions.labels(action=action, result=result).inc()


def record_notification_send(kind: str, delivered: bool, duration: float):
    result = "delivered" if delivered else "failed"
    notification_sends.labels(kind=kind, result=result).inc()
    notification_send_latency.labels(kind=kind).observe(duration)


def record_retention_outcome(outcome: str, count: int = 1):
    """Record retention outcome. Outcome: warned, deleted, error"""
    if count:
        retention_outcomes.labels(outcome=outcome).inc(count)
