"""Demo collection, records and search used when nothing else is supplied."""

from typing import Any

from pydantic import BaseModel, Field

from seedquery.config import CollectionSettings
from seedquery.query.models import FilterOperator, WhereFilter
from seedquery.schema.models import CollectionDescriptor, PropertyDefinition

DEFAULT_RECORDS: list[dict[str, Any]] = [
    {"title": "Hello World Blue", "type": "program"},
    {"title": "Hello World Red", "type": "program"},
    {"title": "Hello World Yellow", "type": "science"},
]

DEFAULT_CONCEPTS = ["Hello"]


class SearchRequest(BaseModel):
    """Arguments for one near-text search.

    Attributes:
        concepts: Phrases defining the search target.
        move_to: Phrases to bias the target toward.
        move_force: Bias strength in [0, 1].
        where: Structural filter.
        limit: Maximum number of results.
    """

    concepts: list[str] = Field(default_factory=lambda: list(DEFAULT_CONCEPTS))
    move_to: list[str] = Field(default_factory=lambda: ["Yellow"])
    move_force: float = Field(default=0.5, ge=0.0, le=1.0)
    where: WhereFilter | None = Field(
        default_factory=lambda: WhereFilter.where("type", FilterOperator.EQUAL, "program")
    )
    limit: int | None = None


def build_descriptor(settings: CollectionSettings) -> CollectionDescriptor:
    """Build the collection descriptor from configuration."""
    return CollectionDescriptor(
        name=settings.class_name,
        description=settings.description,
        vectorizer=settings.vectorizer_module,
        module_config=settings.vectorizer_options,
        properties=[
            PropertyDefinition(name="title", data_type=["text"]),
            PropertyDefinition(name="type", data_type=["text"]),
        ],
    )
