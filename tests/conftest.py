"""Pytest configuration and shared fixtures."""

import re
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from seedquery.config import CollectionSettings, Settings, WeaviateSettings

WHERE_PATTERN = re.compile(
    r'where: \{path: \["(?P<prop>\w+)"\], operator: Equal, valueText: "(?P<value>[^"]*)"\}'
)
CLASS_PATTERN = re.compile(r"\{ Get \{ (?P<cls>\w+)")


def raw_response(get: Any = None, errors: Any = None) -> SimpleNamespace:
    """Shape of the client's raw GraphQL return value."""
    return SimpleNamespace(get=get if get is not None else {}, errors=errors)


@dataclass
class FakeWeaviate:
    """In-memory stand-in for the async client.

    Supports the calls the seeder and query runner make. Filters handle
    a single ``Equal`` on a text property; results are ranked by title.
    """

    classes: dict[str, dict[str, Any]] = field(default_factory=dict)
    objects: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    consistency_levels: list[Any] = field(default_factory=list)
    queries: list[str] = field(default_factory=list)
    drop_field: str | None = None
    connected: bool = False

    def __post_init__(self) -> None:
        self.collections = self

    async def connect(self) -> None:
        self.connected = True

    async def close(self) -> None:
        self.connected = False

    async def delete(self, name: str) -> None:
        self.classes.pop(name, None)
        self.objects.pop(name, None)

    async def create_from_dict(self, schema: dict[str, Any]) -> None:
        name = schema["class"]
        if name in self.classes:
            raise RuntimeError(f"class name {name} already exists")
        self.classes[name] = schema
        self.objects[name] = []

    def get(self, name: str) -> "FakeCollection":
        return FakeCollection(self, name)

    async def graphql_raw_query(self, query: str) -> SimpleNamespace:
        self.queries.append(query)
        class_name = CLASS_PATTERN.search(query).group("cls")  # type: ignore[union-attr]
        if class_name not in self.classes:
            return raw_response(
                errors=[{"message": f"Cannot query field \"{class_name}\" on type \"GetObjectsObj\"."}]
            )

        rows = list(self.objects[class_name])
        match = WHERE_PATTERN.search(query)
        if match:
            prop = match.group("prop")
            declared = {p["name"] for p in self.classes[class_name]["properties"]}
            if prop not in declared:
                return raw_response(
                    get={class_name: None},
                    errors=[
                        {
                            "message": f"no such prop with name '{prop}' found in class "
                            f"'{class_name}' in the schema",
                            "path": ["Get", class_name],
                            "locations": [{"line": 1, "column": 9}],
                        }
                    ],
                )
            rows = [row for row in rows if row["properties"].get(prop) == match.group("value")]

        rows.sort(key=lambda row: row["properties"].get("title", ""))
        result = []
        for rank, row in enumerate(rows):
            item = dict(row["properties"])
            item["_additional"] = {"id": row["id"], "distance": round(0.1 + rank * 0.05, 4)}
            if self.drop_field:
                item.pop(self.drop_field, None)
            result.append(item)
        return raw_response(get={class_name: result})


class FakeCollection:
    """Collection handle returned by ``FakeWeaviate.get``."""

    def __init__(self, service: FakeWeaviate, name: str) -> None:
        self._service = service
        self._name = name
        self.data = self

    def with_consistency_level(self, level: Any) -> "FakeCollection":
        self._service.consistency_levels.append(level)
        return self

    async def insert_many(self, objects: list[dict[str, Any]]) -> SimpleNamespace:
        if self._name not in self._service.classes:
            raise RuntimeError(f"class {self._name} not found")

        errors = {}
        for index, properties in enumerate(objects):
            if not isinstance(properties.get("title"), str):
                errors[index] = SimpleNamespace(message="invalid text property 'title'")
                continue
            self._service.objects[self._name].append(
                {"id": str(uuid4()), "properties": dict(properties)}
            )
        return SimpleNamespace(errors=errors)


@pytest.fixture
def fake_weaviate() -> FakeWeaviate:
    """In-memory service with no collections."""
    return FakeWeaviate()


@pytest.fixture
def mock_client() -> MagicMock:
    """Mock async client with successful defaults."""
    client = MagicMock()
    client.connect = AsyncMock()
    client.close = AsyncMock()
    client.collections.delete = AsyncMock()
    client.collections.create_from_dict = AsyncMock()

    collection = MagicMock()
    collection.with_consistency_level.return_value = collection
    collection.data.insert_many = AsyncMock(return_value=SimpleNamespace(errors={}))
    client.collections.get.return_value = collection

    client.graphql_raw_query = AsyncMock(return_value=raw_response(get={"Book": []}))
    return client


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the environment."""
    return Settings(
        weaviate=WeaviateSettings(host="localhost:8080", request_timeout=5.0),
        collection=CollectionSettings(),
    )
