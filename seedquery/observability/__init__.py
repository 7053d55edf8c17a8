"""Observability module for metrics."""

from seedquery.observability.metrics import (
    get_metrics,
    track_batch,
    track_operation,
    track_query,
    track_query_error,
    write_metrics,
)

__all__ = [
    "get_metrics",
    "track_batch",
    "track_operation",
    "track_query",
    "track_query_error",
    "write_metrics",
]
