#!/usr/bin/env python
"""Seed a collection and run one filtered semantic search.

Usage:
    python -m scripts.seed_and_query --host localhost:8080 --concept Hello

Connection and configuration failures exit with status 1. Other failures
are logged and the run continues; with --strict they exit with status 2.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from seedquery import __version__
from seedquery.config import Scheme, Settings, get_settings
from seedquery.defaults import DEFAULT_CONCEPTS, SearchRequest
from seedquery.exceptions import ConfigurationError, ServiceConnectionError
from seedquery.logging_config import get_logger, setup_logging
from seedquery.observability.metrics import write_metrics
from seedquery.workflow import EXIT_FATAL, SeedQueryWorkflow, WorkflowReport

logger = get_logger(__name__)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Layer command-line flags over environment settings."""
    weaviate_updates = {}
    if args.host is not None:
        weaviate_updates["host"] = args.host
    if args.scheme is not None:
        weaviate_updates["scheme"] = Scheme(args.scheme)

    collection_updates = {}
    if args.class_name is not None:
        collection_updates["class_name"] = args.class_name

    updates: dict[str, object] = {
        "weaviate": settings.weaviate.model_copy(update=weaviate_updates),
        "collection": settings.collection.model_copy(update=collection_updates),
    }
    if args.strict:
        updates["strict"] = True
    if args.metrics_file is not None:
        updates["metrics_file"] = args.metrics_file
    if args.log_level is not None:
        updates["log_level"] = args.log_level

    return settings.model_copy(update=updates)


def print_report(report: WorkflowReport) -> None:
    """Print the search results and a step summary."""
    print("\n" + "=" * 60)
    print("SEARCH RESULTS")
    print("=" * 60)
    if not report.records:
        print("(no results)")
    for book in report.records:
        distance = book.additional.distance
        distance_text = f"{distance:.4f}" if distance is not None else "n/a"
        print(f"{book.title} [{book.type or '-'}] id={book.additional.id} distance={distance_text}")

    print("\nSteps:")
    for name, outcome in report.steps.items():
        line = f"  {name}: {outcome.status.value}"
        if outcome.error_code:
            line += f" ({outcome.error_code}: {outcome.message})"
        print(line)
    if report.batch is not None:
        print(f"\nInserted {report.batch.inserted}/{report.batch.submitted} records")
    print("=" * 60)


async def run(settings: Settings, concepts: list[str]) -> int:
    """Run the workflow and return the process exit code."""
    setup_logging(level=settings.log_level)

    try:
        workflow = SeedQueryWorkflow(
            settings=settings,
            search=SearchRequest(concepts=concepts),
        )
        report = await workflow.run()
    except (ConfigurationError, ServiceConnectionError) as e:
        logger.critical(f"Aborting: {e.message}", extra=e.to_dict())
        return EXIT_FATAL
    finally:
        if settings.metrics_file is not None:
            write_metrics(settings.metrics_file)

    print_report(report)
    return report.exit_code


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed a collection and run a filtered semantic search",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Service address as host[:port] (default from WEAVIATE_HOST)",
    )
    parser.add_argument(
        "--scheme",
        choices=[scheme.value for scheme in Scheme],
        default=None,
        help="Transport scheme (default from WEAVIATE_SCHEME)",
    )
    parser.add_argument(
        "--class-name",
        default=None,
        help="Collection name (default from COLLECTION_CLASS_NAME)",
    )
    parser.add_argument(
        "--concept",
        action="append",
        dest="concepts",
        default=None,
        help=f"Search phrase, repeatable (default {DEFAULT_CONCEPTS})",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 if any step fails",
    )
    parser.add_argument(
        "--metrics-file",
        type=Path,
        default=None,
        help="Write Prometheus metrics to this file",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default from LOG_LEVEL)",
    )

    args = parser.parse_args()
    settings = apply_overrides(get_settings(), args)

    exit_code = asyncio.run(run(settings, args.concepts or list(DEFAULT_CONCEPTS)))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
