"""Prometheus metrics for the Odysseus ledger service.

Business Metrics:
- odysseus_transactions_total: Transactions by kind and outcome
- odysseus_transaction_amount_cents_total: Posted volume by kind
- odysseus_idempotent_replays_total: Requests satisfied by replay
- odysseus_accounts_opened_total: Accounts opened by kind

Technical Metrics:
- odysseus_transaction_latency_seconds: Posting latency
- odysseus_ledger_consistency_failures_total: Post-commit log failures
- odysseus_http_requests_total: HTTP requests by endpoint/status
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram, REGISTRY, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST


# =============================================================================
# Business Metrics
# =============================================================================

transactions_total = Counter(
    "odysseus_transactions_total",
    "Total number of transaction requests by outcome",
    ["kind", "outcome"],  # applied, replayed, insufficient_funds, failed
)

transaction_amount_total = Counter(
    "odysseus_transaction_amount_cents_total",
    "Total amount posted in cents",
    ["kind"],
)

idempotent_replays = Counter(
    "odysseus_idempotent_replays_total",
    "Requests answered from an existing idempotency key",
    ["path"],  # lookup, race
)

accounts_opened = Counter(
    "odysseus_accounts_opened_total",
    "Total number of accounts opened",
    ["kind"],
)


# =============================================================================
# Technical Metrics
# =============================================================================

transaction_latency = Histogram(
    "odysseus_transaction_latency_seconds",
    "Transaction posting latency in seconds",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

ledger_consistency_failures = Counter(
    "odysseus_ledger_consistency_failures_total",
    "Balance mutations whose log append failed",
)

http_requests_total = Counter(
    "odysseus_http_requests_total",
    "Total HTTP requests by endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_latency = Histogram(
    "odysseus_http_request_latency_seconds",
    "HTTP request latency by endpoint",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_transaction(kind: str, outcome: str, amount_cents: int = 0) -> None:
    """Record a transaction outcome."""
    transactions_total.labels(kind=kind, outcome=outcome).inc()
    if outcome == "applied" and amount_cents > 0:
        transaction_amount_total.labels(kind=kind).inc(amount_cents)


def record_idempotent_replay(path: str) -> None:
    """Record a request satisfied by an existing transaction."""
    idempotent_replays.labels(path=path).inc()


def record_account_opened(kind: str) -> None:
    """Record an opened account."""
    accounts_opened.labels(kind=kind).inc()


def record_ledger_consistency_failure() -> None:
    """Record a balance mutation that could not be logged."""
    ledger_consistency_failures.inc()


@contextmanager
def track_transaction_latency() -> Generator[None, None, None]:
    """Context manager to track transaction posting latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        transaction_latency.observe(duration)


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
