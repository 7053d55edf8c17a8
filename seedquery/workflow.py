"""Connect, seed and query in strict order.

Connection failure is fatal and propagates. Every later step handles its
own failure: the error is logged, recorded in the report, and the run
moves on to the next step.
"""

from collections.abc import Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from seedquery.config import Settings, get_settings
from seedquery.connection.manager import ConnectionManager
from seedquery.defaults import DEFAULT_RECORDS, SearchRequest, build_descriptor
from seedquery.exceptions import ConfigurationError, ErrorCode, QueryError, SeedQueryError
from seedquery.logging_config import get_logger
from seedquery.query.models import Book
from seedquery.query.runner import QueryRunner
from seedquery.schema.models import BatchResult, CollectionDescriptor
from seedquery.schema.seeder import SchemaSeeder

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_STEP_FAILED = 2


class StepStatus(str, Enum):
    """Outcome of a workflow step."""

    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


class StepOutcome(BaseModel):
    """Outcome of one step with the error that ended it, if any."""

    status: StepStatus = StepStatus.SKIPPED
    error_code: str | None = None
    message: str | None = None


class WorkflowReport(BaseModel):
    """Everything a run produced.

    Attributes:
        strict: Whether step failures map to a non-zero exit code.
        steps: Outcome per step name.
        batch: Batch insert result, if the insert was submitted.
        records: Decoded search results.
    """

    strict: bool = False
    steps: dict[str, StepOutcome] = Field(default_factory=dict)
    batch: BatchResult | None = None
    records: list[Book] = Field(default_factory=list)

    @property
    def failed_steps(self) -> list[str]:
        """Names of steps that failed, in run order."""
        return [
            name for name, outcome in self.steps.items() if outcome.status == StepStatus.FAILED
        ]

    @property
    def exit_code(self) -> int:
        """Process exit code for this run."""
        if self.strict and self.failed_steps:
            return EXIT_STEP_FAILED
        return EXIT_OK

    def record(self, step: str, error: SeedQueryError | None = None) -> None:
        """Record a step outcome."""
        if error is None:
            self.steps[step] = StepOutcome(status=StepStatus.OK)
        else:
            self.steps[step] = StepOutcome(
                status=StepStatus.FAILED,
                error_code=error.code.value,
                message=error.message,
            )


class SeedQueryWorkflow:
    """Seeds a collection and runs one search against it."""

    def __init__(
        self,
        settings: Settings | None = None,
        connection: ConnectionManager | None = None,
        records: Sequence[dict[str, Any]] | None = None,
        search: SearchRequest | None = None,
    ) -> None:
        """Initialize the workflow.

        Args:
            settings: Application settings.
            connection: Connection manager (built from settings if omitted).
            records: Records to seed (demo records if omitted).
            search: Search to run (demo search if omitted).

        Raises:
            ConfigurationError: If the collection configuration is invalid.
        """
        self._settings = settings or get_settings()
        self._connection = connection or ConnectionManager(self._settings.weaviate)
        self._records = list(records) if records is not None else list(DEFAULT_RECORDS)
        self._search = search or SearchRequest()

        try:
            self._descriptor: CollectionDescriptor = build_descriptor(
                self._settings.collection
            )
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Invalid collection configuration: {e.error_count()} error(s)",
                details={"errors": [error["msg"] for error in e.errors()]},
            ) from e

    async def run(self) -> WorkflowReport:
        """Run connect, seed and query.

        Returns:
            Report of every step.

        Raises:
            ConfigurationError: If the client cannot be constructed.
            ServiceConnectionError: If the service cannot be reached.
        """
        report = WorkflowReport(strict=self._settings.strict)
        timeout = self._settings.weaviate.request_timeout

        async with self._connection as client:
            seeder = SchemaSeeder(client, request_timeout=timeout)
            runner = QueryRunner(client, self._descriptor.name, request_timeout=timeout)

            await self._reset(seeder, report)
            await self._create(seeder, report)
            await self._load(seeder, report)
            await self._query(runner, report)

        return report

    async def _reset(self, seeder: SchemaSeeder, report: WorkflowReport) -> None:
        try:
            await seeder.reset_collection(self._descriptor.name)
        except SeedQueryError as e:
            logger.warning(f"Reset failed, continuing: {e.message}", extra=e.to_dict())
            report.record("reset", e)
            return
        report.record("reset")

    async def _create(self, seeder: SchemaSeeder, report: WorkflowReport) -> None:
        try:
            await seeder.create_collection(self._descriptor)
        except SeedQueryError as e:
            logger.error(f"Create failed: {e.message}", extra=e.to_dict())
            report.record("create", e)
            return
        report.record("create")

    async def _load(self, seeder: SchemaSeeder, report: WorkflowReport) -> None:
        try:
            batch = await seeder.load_records(
                self._descriptor.name,
                self._records,
                self._settings.collection.consistency_level,
            )
        except SeedQueryError as e:
            logger.error(f"Batch insert failed: {e.message}", extra=e.to_dict())
            report.record("load", e)
            return

        report.batch = batch
        if batch.has_errors:
            # Rejected records are logged by the seeder and not retried
            report.steps["load"] = StepOutcome(
                status=StepStatus.FAILED,
                error_code=ErrorCode.BATCH_PARTIAL_FAILURE.value,
                message=f"{len(batch.errors)} of {batch.submitted} records rejected",
            )
            return
        report.record("load")

    async def _query(self, runner: QueryRunner, report: WorkflowReport) -> None:
        search = self._search
        try:
            report.records = await runner.search_by_concept(
                search.concepts,
                move_to=search.move_to,
                move_force=search.move_force,
                where=search.where,
                limit=search.limit,
            )
        except QueryError as e:
            for detail in e.errors:
                logger.error(f"Query error: {detail.message}")
            if not e.errors:
                logger.error(f"Query failed: {e.message}", extra=e.to_dict())
            report.record("query", e)
            return
        except SeedQueryError as e:
            logger.error(f"Query failed: {e.message}", extra=e.to_dict())
            report.record("query", e)
            return
        report.record("query")
