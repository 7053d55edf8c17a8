"""Collection reset, creation and batch loading."""

from collections.abc import Sequence
from typing import Any

from weaviate import WeaviateAsyncClient
from weaviate.classes.config import ConsistencyLevel as ServiceConsistencyLevel
from weaviate.exceptions import UnexpectedStatusCodeError, WeaviateInsertManyAllFailedError

from seedquery.config import ConsistencyLevel
from seedquery.connection.deadline import call_with_deadline
from seedquery.exceptions import BatchError, ErrorCode, SchemaError
from seedquery.logging_config import get_logger
from seedquery.observability.metrics import track_batch
from seedquery.schema.models import BatchObjectError, BatchResult, CollectionDescriptor

logger = get_logger(__name__)


class SchemaSeeder:
    """Resets a collection to a known schema and loads records into it."""

    def __init__(
        self,
        client: WeaviateAsyncClient,
        request_timeout: float = 30.0,
    ) -> None:
        """Initialize the seeder.

        Args:
            client: Connected client handle.
            request_timeout: Deadline for each remote call in seconds.
        """
        self._client = client
        self._timeout = request_timeout

    async def reset_collection(self, name: str) -> None:
        """Delete a collection if it exists.

        A missing collection is not an error.

        Args:
            name: Collection name.

        Raises:
            SchemaError: If the service refuses the deletion.
        """
        try:
            await call_with_deadline(
                "delete_collection",
                self._client.collections.delete(name),
                self._timeout,
            )
        except UnexpectedStatusCodeError as e:
            if e.status_code == 404:
                logger.debug(f"Collection {name} did not exist")
                return
            raise SchemaError(
                f"Failed to delete collection: {e}",
                code=ErrorCode.COLLECTION_DELETE_FAILED,
                details={"collection": name, "status_code": e.status_code},
            ) from e
        except TimeoutError as e:
            raise SchemaError(
                f"Deleting collection {name} timed out",
                code=ErrorCode.REQUEST_TIMEOUT,
                details={"collection": name, "timeout": self._timeout},
            ) from e
        except Exception as e:
            raise SchemaError(
                f"Failed to delete collection: {e}",
                code=ErrorCode.COLLECTION_DELETE_FAILED,
                details={"collection": name, "error": str(e)},
            ) from e

        logger.info(f"Deleted collection: {name}")

    async def create_collection(self, descriptor: CollectionDescriptor) -> None:
        """Create a collection from its descriptor.

        Args:
            descriptor: Collection definition.

        Raises:
            SchemaError: If the service rejects the definition.
        """
        schema = descriptor.to_schema()

        try:
            await call_with_deadline(
                "create_collection",
                self._client.collections.create_from_dict(schema),
                self._timeout,
            )
        except TimeoutError as e:
            raise SchemaError(
                f"Creating collection {descriptor.name} timed out",
                code=ErrorCode.REQUEST_TIMEOUT,
                details={"collection": descriptor.name, "timeout": self._timeout},
            ) from e
        except Exception as e:
            raise SchemaError(
                f"Failed to create collection: {e}",
                code=ErrorCode.COLLECTION_CREATE_FAILED,
                details={"collection": descriptor.name, "error": str(e)},
            ) from e

        logger.info(
            f"Created collection: {descriptor.name}",
            extra={
                "vectorizer": descriptor.vectorizer,
                "properties": [prop.name for prop in descriptor.properties],
            },
        )

    async def load_records(
        self,
        name: str,
        records: Sequence[dict[str, Any]],
        consistency_level: ConsistencyLevel = ConsistencyLevel.ALL,
    ) -> BatchResult:
        """Insert records in one batch.

        Records rejected by the service are reported in the result rather
        than raised, since the rest of the batch may have been stored.

        Args:
            name: Collection name.
            records: Property mappings to insert.
            consistency_level: Replication acknowledgment to request.

        Returns:
            Aggregate result with per-record failures.

        Raises:
            BatchError: If the batch as a whole could not be submitted.
        """
        if not records:
            return BatchResult()

        collection = self._client.collections.get(name).with_consistency_level(
            ServiceConsistencyLevel(consistency_level.value)
        )

        try:
            response = await call_with_deadline(
                "batch_insert",
                collection.data.insert_many([dict(record) for record in records]),
                self._timeout,
            )
            failures = {index: error.message for index, error in response.errors.items()}
        except TimeoutError as e:
            raise BatchError(
                f"Batch insert into {name} timed out",
                code=ErrorCode.REQUEST_TIMEOUT,
                details={"collection": name, "timeout": self._timeout},
            ) from e
        except WeaviateInsertManyAllFailedError as e:
            # Every object was rejected; the service reports one reason for all.
            failures = dict.fromkeys(range(len(records)), str(e))
        except Exception as e:
            raise BatchError(
                f"Failed to insert batch: {e}",
                code=ErrorCode.BATCH_FAILED,
                details={"collection": name, "records": len(records), "error": str(e)},
            ) from e

        errors = [
            BatchObjectError(
                index=index,
                properties=dict(records[index]),
                message=message,
            )
            for index, message in sorted(failures.items())
        ]
        result = BatchResult(
            submitted=len(records),
            inserted=len(records) - len(errors),
            errors=errors,
        )
        track_batch(inserted=result.inserted, failed=len(errors))

        for error in errors:
            logger.warning(
                f"Record {error.index} rejected: {error.message}",
                extra={"collection": name, "record": error.properties},
            )

        logger.info(
            f"Inserted {result.inserted}/{result.submitted} records",
            extra={"collection": name, "consistency_level": consistency_level.value},
        )
        return result

    async def seed(
        self,
        descriptor: CollectionDescriptor,
        records: Sequence[dict[str, Any]],
        consistency_level: ConsistencyLevel = ConsistencyLevel.ALL,
    ) -> BatchResult:
        """Reset, create and load a collection in one go.

        Args:
            descriptor: Collection definition.
            records: Records to insert.
            consistency_level: Replication acknowledgment to request.

        Returns:
            Aggregate result of the batch insert.

        Raises:
            SchemaError: If the reset or creation fails.
            BatchError: If the batch could not be submitted.
        """
        await self.reset_collection(descriptor.name)
        await self.create_collection(descriptor)
        return await self.load_records(descriptor.name, records, consistency_level)
