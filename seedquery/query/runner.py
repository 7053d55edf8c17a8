"""Semantic search with a structural filter."""

from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from weaviate import WeaviateAsyncClient

from seedquery.connection.deadline import call_with_deadline
from seedquery.exceptions import DecodeError, ErrorCode, QueryError, ValidationError
from seedquery.logging_config import get_logger
from seedquery.observability.metrics import track_query, track_query_error
from seedquery.query.graphql import build_get_query, check_name, fields_from_model
from seedquery.query.models import (
    Book,
    MoveParameters,
    NearTextQuery,
    QueryErrorDetail,
    QueryField,
    WhereFilter,
)

logger = get_logger(__name__)

R = TypeVar("R", bound=BaseModel)


def parse_errors(errors: Any) -> list[QueryErrorDetail]:
    """Normalize the error list of a GraphQL response envelope."""
    if not errors:
        return []
    if isinstance(errors, dict):
        errors = [errors]

    details = []
    for error in errors:
        if isinstance(error, dict):
            details.append(
                QueryErrorDetail(
                    message=str(error.get("message", error)),
                    path=error.get("path"),
                    locations=error.get("locations"),
                )
            )
        else:
            details.append(QueryErrorDetail(message=str(error)))
    return details


def extract_rows(data: Any, class_name: str) -> list[Any]:
    """Pull the result rows for one collection out of ``Get`` data.

    Raises:
        DecodeError: If the payload is missing or not a list of rows.
    """
    if not isinstance(data, dict):
        raise DecodeError(
            "Response carries no Get data",
            code=ErrorCode.INVALID_PAYLOAD,
            details={"collection": class_name},
        )

    rows = data.get(class_name)
    if rows is None:
        raise DecodeError(
            f"Response has no results for {class_name}",
            code=ErrorCode.INVALID_PAYLOAD,
            details={"collection": class_name, "keys": sorted(data)},
        )
    if not isinstance(rows, list):
        raise DecodeError(
            f"Results for {class_name} are not a list",
            code=ErrorCode.INVALID_PAYLOAD,
            details={"collection": class_name, "type": type(rows).__name__},
        )
    return rows


def decode_records(rows: list[Any], record_type: type[R]) -> list[R]:
    """Convert raw rows into typed records.

    Required fields are never defaulted; a row missing one fails the
    whole conversion.

    Raises:
        DecodeError: If any row does not fit ``record_type``.
    """
    try:
        return TypeAdapter(list[record_type]).validate_python(rows)  # type: ignore[valid-type]
    except PydanticValidationError as e:
        problems = [
            {"loc": list(error["loc"]), "msg": error["msg"]} for error in e.errors()
        ]
        raise DecodeError(
            f"Failed to decode {len(problems)} field(s) into {record_type.__name__}",
            code=ErrorCode.DECODE_FAILED,
            details={"record_type": record_type.__name__, "errors": problems},
        ) from e


class QueryRunner:
    """Runs near-text searches against one collection."""

    def __init__(
        self,
        client: WeaviateAsyncClient,
        class_name: str,
        request_timeout: float = 30.0,
    ) -> None:
        """Initialize the query runner.

        Args:
            client: Connected client handle.
            class_name: Collection to search.
            request_timeout: Deadline for each query in seconds.
        """
        self._client = client
        self._class_name = check_name(class_name, "class name")
        self._timeout = request_timeout

    async def search_by_concept(
        self,
        concepts: Sequence[str],
        move_to: Sequence[str] | None = None,
        move_force: float = 0.5,
        where: WhereFilter | None = None,
        fields: Sequence[QueryField] | None = None,
        limit: int | None = None,
        move_away_from: Sequence[str] | None = None,
        record_type: type[R] = Book,  # type: ignore[assignment]
    ) -> list[R]:
        """Search by concept and decode the ranked results.

        Args:
            concepts: Phrases defining the search target.
            move_to: Phrases to bias the target toward.
            move_force: Bias strength in [0, 1].
            where: Structural filter applied to stored values.
            fields: Selection set; derived from ``record_type`` if omitted.
            limit: Maximum number of results.
            move_away_from: Phrases to bias the target away from.
            record_type: Model each result row is decoded into.

        Returns:
            Records in the order ranked by the service.

        Raises:
            ValidationError: If the search arguments are invalid.
            QueryError: If the service reports query errors or the call fails.
            DecodeError: If the payload cannot be decoded.
        """
        near_text = self._near_text(concepts, move_to, move_away_from, move_force)
        if fields is None:
            fields = fields_from_model(record_type)

        query = build_get_query(
            self._class_name,
            fields,
            near_text=near_text,
            where=where,
            limit=limit,
        )
        logger.debug("Running query", extra={"query": query})

        try:
            response = await call_with_deadline(
                "query",
                self._client.graphql_raw_query(query),
                self._timeout,
            )
        except TimeoutError as e:
            track_query_error("transport")
            raise QueryError(
                f"Query against {self._class_name} timed out",
                code=ErrorCode.REQUEST_TIMEOUT,
                details={"collection": self._class_name, "timeout": self._timeout},
            ) from e
        except Exception as e:
            track_query_error("transport")
            raise QueryError(
                f"Failed to run query: {e}",
                details={"collection": self._class_name, "error": str(e)},
            ) from e

        errors = parse_errors(response.errors)
        if errors:
            track_query_error("envelope")
            raise QueryError(
                "; ".join(error.message for error in errors),
                details={"collection": self._class_name, "error_count": len(errors)},
                errors=errors,
            )

        try:
            rows = extract_rows(response.get, self._class_name)
        except DecodeError:
            track_query_error("payload")
            raise

        try:
            records = decode_records(rows, record_type)
        except DecodeError:
            track_query_error("decode")
            raise

        track_query(len(records))
        logger.info(
            f"Query returned {len(records)} records",
            extra={"collection": self._class_name, "concepts": list(concepts)},
        )
        return records

    @staticmethod
    def _near_text(
        concepts: Sequence[str],
        move_to: Sequence[str] | None,
        move_away_from: Sequence[str] | None,
        move_force: float,
    ) -> NearTextQuery:
        try:
            return NearTextQuery(
                concepts=list(concepts),
                move_to=(
                    MoveParameters(concepts=list(move_to), force=move_force)
                    if move_to
                    else None
                ),
                move_away_from=(
                    MoveParameters(concepts=list(move_away_from), force=move_force)
                    if move_away_from
                    else None
                ),
            )
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid search arguments: {e.error_count()} error(s)",
                details={"errors": [error["msg"] for error in e.errors()]},
            ) from e
