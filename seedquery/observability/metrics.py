"""Prometheus metrics for the seed-and-query workflow.

Provides metrics instrumentation for:
- Remote operation latency and outcome (delete, create, batch, query)
- Batch object outcomes
- Query result counts and query-level errors

There is no scrape endpoint; the CLI writes the registry to a textfile
for the node exporter textfile collector.
"""

from pathlib import Path

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
    write_to_textfile,
)

from seedquery.logging_config import get_logger

logger = get_logger(__name__)

OPERATION_DURATION = Histogram(
    "seedquery_operation_duration_seconds",
    "Remote operation duration in seconds",
    ["operation", "status"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

OPERATION_TOTAL = Counter(
    "seedquery_operations_total",
    "Total remote operations",
    ["operation", "status"],
)

BATCH_OBJECTS_TOTAL = Counter(
    "seedquery_batch_objects_total",
    "Objects submitted in batch inserts",
    ["status"],  # "status" label values: inserted, failed
)

QUERY_RESULTS_RETURNED = Histogram(
    "seedquery_query_results_returned",
    "Number of records returned per query",
    buckets=[0, 1, 2, 3, 5, 10, 20, 50, 100],
)

QUERY_ERRORS_TOTAL = Counter(
    "seedquery_query_errors_total",
    "Queries that failed",
    ["kind"],  # "kind" label values: envelope, payload, decode, transport
)


def track_operation(operation: str, duration: float, success: bool = True) -> None:
    """Track a remote operation.

    Args:
        operation: Operation name (delete_collection, create_collection, ...).
        duration: Duration in seconds.
        success: Whether the operation succeeded.
    """
    status = "success" if success else "error"

    OPERATION_DURATION.labels(operation=operation, status=status).observe(duration)
    OPERATION_TOTAL.labels(operation=operation, status=status).inc()


def track_batch(inserted: int, failed: int) -> None:
    """Track batch object outcomes.

    Args:
        inserted: Objects accepted by the service.
        failed: Objects rejected by the service.
    """
    BATCH_OBJECTS_TOTAL.labels(status="inserted").inc(inserted)
    BATCH_OBJECTS_TOTAL.labels(status="failed").inc(failed)


def track_query(results_returned: int) -> None:
    """Track a successful query."""
    QUERY_RESULTS_RETURNED.observe(results_returned)


def track_query_error(kind: str) -> None:
    """Track a failed query."""
    QUERY_ERRORS_TOTAL.labels(kind=kind).inc()


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def write_metrics(path: Path) -> None:
    """Write the default registry to a textfile.

    Args:
        path: Destination file; written atomically by prometheus_client.
    """
    write_to_textfile(str(path), REGISTRY)
    logger.info(f"Metrics written to {path}")
