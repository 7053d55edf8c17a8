"""Tests for schema seeding module."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from pydantic import ValidationError as PydanticValidationError
from prometheus_client import REGISTRY
from weaviate.exceptions import UnexpectedStatusCodeError, WeaviateInsertManyAllFailedError

from seedquery.config import ConsistencyLevel
from seedquery.exceptions import BatchError, ErrorCode, SchemaError
from seedquery.schema.models import CollectionDescriptor, PropertyDefinition
from seedquery.schema.seeder import SchemaSeeder
from tests.conftest import FakeWeaviate


def status_error(status_code: int) -> UnexpectedStatusCodeError:
    """Build the client's status error for a given code."""
    request = httpx.Request("DELETE", "http://localhost:8080/v1/schema/Book")
    response = httpx.Response(status_code, json={"error": []}, request=request)
    return UnexpectedStatusCodeError("Delete collection", response)


def book_descriptor() -> CollectionDescriptor:
    return CollectionDescriptor(
        name="Book",
        description="all books I have",
        vectorizer="text2vec-transformers",
        properties=[
            PropertyDefinition(name="title"),
            PropertyDefinition(name="type"),
        ],
    )


class TestCollectionDescriptor:
    """Tests for CollectionDescriptor model."""

    def test_to_schema(self) -> None:
        """Descriptor converts to a class definition."""
        schema = book_descriptor().to_schema()

        assert schema["class"] == "Book"
        assert schema["description"] == "all books I have"
        assert schema["vectorizer"] == "text2vec-transformers"
        assert schema["moduleConfig"] == {"text2vec-transformers": {}}
        assert schema["properties"] == [
            {"name": "title", "dataType": ["text"]},
            {"name": "type", "dataType": ["text"]},
        ]

    def test_module_config_nested_under_module(self) -> None:
        """Module options are keyed by module name."""
        descriptor = CollectionDescriptor(
            name="Book",
            vectorizer="text2vec-openai",
            module_config={"model": "ada"},
        )

        assert descriptor.to_schema()["moduleConfig"] == {"text2vec-openai": {"model": "ada"}}

    def test_invalid_class_name(self) -> None:
        """Class names must be capitalised GraphQL names."""
        with pytest.raises(PydanticValidationError):
            CollectionDescriptor(name="book")
        with pytest.raises(PydanticValidationError):
            CollectionDescriptor(name="Bad Name")

    def test_invalid_property_name(self) -> None:
        """Property names must be GraphQL names."""
        with pytest.raises(PydanticValidationError):
            PropertyDefinition(name="my-title")


class TestResetCollection:
    """Tests for SchemaSeeder.reset_collection."""

    @pytest.mark.asyncio
    async def test_deletes_collection(self, mock_client: MagicMock) -> None:
        """Reset deletes the named collection."""
        await SchemaSeeder(mock_client).reset_collection("Book")

        mock_client.collections.delete.assert_awaited_once_with("Book")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["Book", "Missing", "Article"])
    async def test_missing_collection_is_not_error(self, name: str) -> None:
        """Resetting a collection that does not exist succeeds."""
        await SchemaSeeder(FakeWeaviate()).reset_collection(name)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_not_found_status_is_not_error(self, mock_client: MagicMock) -> None:
        """A 404 from the service counts as already deleted."""
        mock_client.collections.delete = AsyncMock(side_effect=status_error(404))

        await SchemaSeeder(mock_client).reset_collection("Book")

    @pytest.mark.asyncio
    async def test_other_status_raises(self, mock_client: MagicMock) -> None:
        """Other status codes are reported."""
        mock_client.collections.delete = AsyncMock(side_effect=status_error(500))

        with pytest.raises(SchemaError) as exc_info:
            await SchemaSeeder(mock_client).reset_collection("Book")

        assert exc_info.value.code == ErrorCode.COLLECTION_DELETE_FAILED
        assert exc_info.value.details["status_code"] == 500

    @pytest.mark.asyncio
    async def test_timeout(self, mock_client: MagicMock) -> None:
        """Exceeding the deadline is reported as a timeout."""

        async def slow(name: str) -> None:
            await asyncio.sleep(10)

        mock_client.collections.delete = slow

        with pytest.raises(SchemaError) as exc_info:
            await SchemaSeeder(mock_client, request_timeout=0.01).reset_collection("Book")

        assert exc_info.value.code == ErrorCode.REQUEST_TIMEOUT


class TestCreateCollection:
    """Tests for SchemaSeeder.create_collection."""

    @pytest.mark.asyncio
    async def test_creates_from_schema(self, mock_client: MagicMock) -> None:
        """Collection is created from the descriptor's class definition."""
        descriptor = book_descriptor()

        await SchemaSeeder(mock_client).create_collection(descriptor)

        mock_client.collections.create_from_dict.assert_awaited_once_with(
            descriptor.to_schema()
        )

    @pytest.mark.asyncio
    async def test_rejection_raises(self, mock_client: MagicMock) -> None:
        """Service rejection is reported as a create failure."""
        mock_client.collections.create_from_dict = AsyncMock(
            side_effect=RuntimeError("class name Book already exists")
        )

        with pytest.raises(SchemaError) as exc_info:
            await SchemaSeeder(mock_client).create_collection(book_descriptor())

        assert exc_info.value.code == ErrorCode.COLLECTION_CREATE_FAILED
        assert "already exists" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_timeout(self, mock_client: MagicMock) -> None:
        """Exceeding the deadline is reported as a timeout."""

        async def slow(schema: dict) -> None:
            await asyncio.sleep(10)

        mock_client.collections.create_from_dict = slow

        with pytest.raises(SchemaError) as exc_info:
            await SchemaSeeder(mock_client, request_timeout=0.01).create_collection(
                book_descriptor()
            )

        assert exc_info.value.code == ErrorCode.REQUEST_TIMEOUT


class TestLoadRecords:
    """Tests for SchemaSeeder.load_records."""

    @pytest.mark.asyncio
    async def test_inserts_records(self, mock_client: MagicMock) -> None:
        """Records are inserted in one batch."""
        records = [{"title": "A", "type": "program"}, {"title": "B", "type": "science"}]

        result = await SchemaSeeder(mock_client).load_records("Book", records)

        collection = mock_client.collections.get.return_value
        mock_client.collections.get.assert_called_once_with("Book")
        collection.data.insert_many.assert_awaited_once_with(records)
        assert result.submitted == 2
        assert result.inserted == 2
        assert not result.has_errors

    @pytest.mark.asyncio
    async def test_requests_consistency_level(self, mock_client: MagicMock) -> None:
        """Requested consistency level is applied to the batch."""
        await SchemaSeeder(mock_client).load_records(
            "Book",
            [{"title": "A"}],
            ConsistencyLevel.QUORUM,
        )

        collection = mock_client.collections.get.return_value
        level = collection.with_consistency_level.call_args.args[0]
        assert level.value == "QUORUM"

    @pytest.mark.asyncio
    async def test_empty_batch(self, mock_client: MagicMock) -> None:
        """Empty batch returns without calling the service."""
        result = await SchemaSeeder(mock_client).load_records("Book", [])

        assert result.submitted == 0
        mock_client.collections.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_partial_failure_reported(self, mock_client: MagicMock) -> None:
        """Per-record errors are returned with the rejected record."""
        collection = mock_client.collections.get.return_value
        collection.data.insert_many = AsyncMock(
            return_value=SimpleNamespace(
                errors={1: SimpleNamespace(message="invalid text property 'title'")}
            )
        )
        records = [{"title": "A"}, {"title": 42}, {"title": "C"}]

        result = await SchemaSeeder(mock_client).load_records("Book", records)

        assert result.has_errors
        assert result.inserted == 2
        assert len(result.errors) == 1
        assert result.errors[0].index == 1
        assert result.errors[0].properties == {"title": 42}
        assert "title" in result.errors[0].message

    @pytest.mark.asyncio
    async def test_transport_failure_raises(self, mock_client: MagicMock) -> None:
        """Failure of the batch call itself raises BatchError."""
        collection = mock_client.collections.get.return_value
        collection.data.insert_many = AsyncMock(side_effect=RuntimeError("unavailable"))

        with pytest.raises(BatchError) as exc_info:
            await SchemaSeeder(mock_client).load_records("Book", [{"title": "A"}])

        assert exc_info.value.code == ErrorCode.BATCH_FAILED
        assert exc_info.value.details["records"] == 1

    @pytest.mark.asyncio
    async def test_all_rejected_reported_per_record(self, mock_client: MagicMock) -> None:
        """A batch where every record fails still reports each record."""
        collection = mock_client.collections.get.return_value
        collection.data.insert_many = AsyncMock(
            side_effect=WeaviateInsertManyAllFailedError("class Book not found")
        )
        records = [{"title": "A"}, {"title": "B"}]
        labels = {"status": "failed"}
        failed_before = REGISTRY.get_sample_value("seedquery_batch_objects_total", labels) or 0.0

        result = await SchemaSeeder(mock_client).load_records("Book", records)

        assert result.submitted == 2
        assert result.inserted == 0
        assert [error.index for error in result.errors] == [0, 1]
        assert result.errors[1].properties == {"title": "B"}
        assert "class Book not found" in result.errors[0].message
        failed_after = REGISTRY.get_sample_value("seedquery_batch_objects_total", labels)
        assert failed_after == failed_before + 2

    @pytest.mark.asyncio
    async def test_timeout(self, mock_client: MagicMock) -> None:
        """Exceeding the deadline is reported as a timeout."""

        async def slow(objects: list) -> None:
            await asyncio.sleep(10)

        mock_client.collections.get.return_value.data.insert_many = slow

        with pytest.raises(BatchError) as exc_info:
            await SchemaSeeder(mock_client, request_timeout=0.01).load_records(
                "Book", [{"title": "A"}]
            )

        assert exc_info.value.code == ErrorCode.REQUEST_TIMEOUT


class TestSeed:
    """Tests for the full reset, create and load sequence."""

    @pytest.mark.asyncio
    async def test_seed_into_fresh_service(self, fake_weaviate: FakeWeaviate) -> None:
        """Seeding creates the collection and stores every record."""
        records = [{"title": "A", "type": "program"}, {"title": "B", "type": "science"}]

        result = await SchemaSeeder(fake_weaviate).seed(  # type: ignore[arg-type]
            book_descriptor(), records
        )

        assert result.inserted == 2
        assert "Book" in fake_weaviate.classes
        assert len(fake_weaviate.objects["Book"]) == 2

    @pytest.mark.asyncio
    async def test_seed_twice_starts_clean(self, fake_weaviate: FakeWeaviate) -> None:
        """A second run replaces rather than appends."""
        seeder = SchemaSeeder(fake_weaviate)  # type: ignore[arg-type]
        records = [{"title": "A", "type": "program"}]

        await seeder.seed(book_descriptor(), records)
        await seeder.seed(book_descriptor(), records)

        assert len(fake_weaviate.objects["Book"]) == 1
