"""Prometheus metrics for request authentication."""

import os

from prometheus_client import (
    CollectorRegistry,
    Counter,
    generate_latest,
    multiprocess,
)
from starlette.requests import Request
from starlette.responses import Response

# === Counters ===

VERIFICATIONS_TOTAL = Counter(
    "aksk_verifications_total",
    "Total AKSK request verifications",
    ["outcome", "reason"],  # outcome: accepted, rejected
)

SIGNED_REQUESTS_TOTAL = Counter(
    "aksk_signed_requests_total",
    "Total outbound requests signed",
    ["method"],
)


# === Helper Functions ===


def record_verification(outcome: str, reason: str = "") -> None:
    """Record a verification outcome."""
    VERIFICATIONS_TOTAL.labels(outcome=outcome, reason=reason).inc()


def record_signed_request(method: str) -> None:
    """Record an outbound signed request."""
    SIGNED_REQUESTS_TOTAL.labels(method=method.upper()).inc()


# === HTTP Endpoint ===


async def metrics_endpoint(_request: Request) -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    multiproc_dir = os.environ.get("PROMETHEUS_MULTIPROC_DIR")
    if multiproc_dir:
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)  # type: ignore[no-untyped-call]
        return Response(
            generate_latest(registry),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    return Response(
        generate_latest(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
