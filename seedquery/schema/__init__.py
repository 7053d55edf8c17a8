"""Schema seeding module."""

from seedquery.schema.models import (
    BatchObjectError,
    BatchResult,
    CollectionDescriptor,
    PropertyDefinition,
)
from seedquery.schema.seeder import SchemaSeeder

__all__ = [
    "BatchObjectError",
    "BatchResult",
    "CollectionDescriptor",
    "PropertyDefinition",
    "SchemaSeeder",
]
