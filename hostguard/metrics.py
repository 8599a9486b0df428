"""Prometheus metrics for hostguard.

The /metrics endpoint serves these in Prometheus exposition format.
"""
from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
)

admission_reviews = Counter(
    "hostguard_admission_reviews_total",
    "Admission reviews by resource kind, operation and verdict",
    ["kind", "operation", "result"],
)

lookup_duration = Histogram(
    "hostguard_lookup_seconds",
    "Duration of record store lookups",
    ["operation", "status"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2, 5, float("inf")),
)


def get_metrics() -> tuple[bytes, str]:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
