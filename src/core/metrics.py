"""Prometheus metrics for the IPM Gateway service.

Metrics are organized into two categories:

Business Metrics (for Product/Compliance):
- ipm_proposal_transitions_total: Workflow transitions by event type
- ipm_proposals_finalized_total: Proposals reaching a terminal status

Technical Metrics (for Engineering/SRE):
- ipm_event_publish_latency_seconds: Channel write latency
- ipm_event_publish_failures_total: Channel write failures by topic
- ipm_consumer_messages_total: Consumed messages by group and outcome
- ipm_consumer_retry_total: Handler retries by group
- ipm_consumer_dead_letter_total: Dead-lettered messages by group
- ipm_outbox_pending: Outbox rows waiting for relay
- ipm_http_requests_total: HTTP requests by endpoint/status
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram, Gauge, REGISTRY, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST


# =============================================================================
# Business Metrics
# =============================================================================

proposal_transitions_total = Counter(
    "ipm_proposal_transitions_total",
    "Total number of proposal workflow transitions",
    ["event_type"],
)

proposals_finalized_total = Counter(
    "ipm_proposals_finalized_total",
    "Total number of proposals reaching a terminal status",
    ["status"],  # APPROVED, REJECTED
)


# =============================================================================
# Technical Metrics
# =============================================================================

event_publish_latency = Histogram(
    "ipm_event_publish_latency_seconds",
    "Event publish latency in seconds (both channel writes)",
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

event_publish_failures = Counter(
    "ipm_event_publish_failures_total",
    "Total number of failed channel writes",
    ["topic"],
)

consumer_messages_total = Counter(
    "ipm_consumer_messages_total",
    "Total consumed messages by consumer group and terminal outcome",
    ["group", "outcome"],  # acknowledged, dead_lettered
)

consumer_handler_latency = Histogram(
    "ipm_consumer_handler_latency_seconds",
    "Handler latency per attempt",
    ["group"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

consumer_retries = Counter(
    "ipm_consumer_retry_total",
    "Total number of handler retries",
    ["group"],
)

consumer_dead_letters = Counter(
    "ipm_consumer_dead_letter_total",
    "Total number of messages redirected to a dead-letter topic",
    ["group", "topic"],
)

outbox_pending_gauge = Gauge(
    "ipm_outbox_pending",
    "Outbox rows seen as pending on the last relay pass",
)

http_requests_total = Counter(
    "ipm_http_requests_total",
    "Total HTTP requests by endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_latency = Histogram(
    "ipm_http_request_latency_seconds",
    "HTTP request latency by endpoint",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_transition(event_type: str, final_status: str | None = None) -> None:
    """Record a workflow transition, and the terminal status if one was reached."""
    proposal_transitions_total.labels(event_type=event_type).inc()
    if final_status is not None:
        proposals_finalized_total.labels(status=final_status).inc()


@contextmanager
def track_publish_latency() -> Generator[None, None, None]:
    """Context manager to track event publish latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        event_publish_latency.observe(duration)


@contextmanager
def track_handler_latency(group: str) -> Generator[None, None, None]:
    """Context manager to track a single handler attempt."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        consumer_handler_latency.labels(group=group).observe(duration)


def record_publish_failure(topic: str) -> None:
    """Record a failed channel write."""
    event_publish_failures.labels(topic=topic).inc()


def record_message_acknowledged(group: str) -> None:
    consumer_messages_total.labels(group=group, outcome="acknowledged").inc()


def record_message_retry(group: str) -> None:
    consumer_retries.labels(group=group).inc()


def record_message_dead_lettered(group: str, topic: str) -> None:
    """Record a message redirected to the dead-letter topic."""
    consumer_messages_total.labels(group=group, outcome="dead_lettered").inc()
    consumer_dead_letters.labels(group=group, topic=topic).inc()


def record_outbox_pending(count: int) -> None:
    outbox_pending_gauge.set(count)


def record_http_request(method: str, endpoint: str, status: int, duration: float) -> None:
    """Record an HTTP request."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    http_request_latency.labels(method=method, endpoint=endpoint).observe(duration)


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST
