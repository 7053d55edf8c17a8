"""Schema and batch data models."""

import re
from typing import Any

from pydantic import BaseModel, Field, field_validator

# GraphQL type names; the service additionally requires a capital first letter.
CLASS_NAME_PATTERN = re.compile(r"^[A-Z][_0-9A-Za-z]*$")
PROPERTY_NAME_PATTERN = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")


class PropertyDefinition(BaseModel):
    """A property declared on a collection.

    Attributes:
        name: Property name.
        data_type: Declared type names, e.g. ``["text"]``.
        description: Optional property description.
    """

    name: str = Field(description="Property name")
    data_type: list[str] = Field(
        default_factory=lambda: ["text"],
        min_length=1,
        description="Declared data types",
    )
    description: str | None = Field(default=None, description="Property description")

    @field_validator("name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        if not PROPERTY_NAME_PATTERN.match(value):
            raise ValueError(f"invalid property name: {value!r}")
        return value

    def to_schema(self) -> dict[str, Any]:
        """Convert to the service's property definition."""
        schema: dict[str, Any] = {"name": self.name, "dataType": list(self.data_type)}
        if self.description:
            schema["description"] = self.description
        return schema


class CollectionDescriptor(BaseModel):
    """Everything needed to create a collection.

    Attributes:
        name: Collection (class) name.
        description: Collection description.
        vectorizer: Vectorization module name.
        module_config: Options for the vectorization module.
        properties: Ordered property definitions.
    """

    name: str = Field(description="Collection name")
    description: str = Field(default="", description="Collection description")
    vectorizer: str = Field(
        default="text2vec-transformers",
        description="Vectorization module",
    )
    module_config: dict[str, Any] = Field(
        default_factory=dict,
        description="Vectorization module options",
    )
    properties: list[PropertyDefinition] = Field(
        default_factory=list,
        description="Property definitions",
    )

    @field_validator("name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        if not CLASS_NAME_PATTERN.match(value):
            raise ValueError(f"invalid collection name: {value!r}")
        return value

    def to_schema(self) -> dict[str, Any]:
        """Convert to the service's class definition.

        Module options are nested under the module name.
        """
        return {
            "class": self.name,
            "description": self.description,
            "vectorizer": self.vectorizer,
            "moduleConfig": {self.vectorizer: dict(self.module_config)},
            "properties": [prop.to_schema() for prop in self.properties],
        }


class BatchObjectError(BaseModel):
    """A record the service rejected during a batch insert.

    Attributes:
        index: Position of the record in the submitted batch.
        properties: The rejected record.
        message: Error reported by the service.
    """

    index: int = Field(description="Position in the batch")
    properties: dict[str, Any] = Field(
        default_factory=dict,
        description="Rejected record",
    )
    message: str = Field(description="Service error message")


class BatchResult(BaseModel):
    """Aggregate outcome of a batch insert.

    Attributes:
        submitted: Number of records submitted.
        inserted: Number of records accepted.
        errors: Per-record failures.
    """

    submitted: int = Field(default=0, description="Records submitted")
    inserted: int = Field(default=0, description="Records accepted")
    errors: list[BatchObjectError] = Field(
        default_factory=list,
        description="Per-record failures",
    )

    @property
    def has_errors(self) -> bool:
        """True if any record was rejected."""
        return bool(self.errors)
