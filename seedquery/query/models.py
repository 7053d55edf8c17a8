"""Query data models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FilterOperator(str, Enum):
    """Operators accepted in a ``where`` filter."""

    EQUAL = "Equal"
    NOT_EQUAL = "NotEqual"
    GREATER_THAN = "GreaterThan"
    GREATER_THAN_EQUAL = "GreaterThanEqual"
    LESS_THAN = "LessThan"
    LESS_THAN_EQUAL = "LessThanEqual"
    LIKE = "Like"
    IS_NULL = "IsNull"
    CONTAINS_ANY = "ContainsAny"
    CONTAINS_ALL = "ContainsAll"
    AND = "And"
    OR = "Or"


COMPOUND_OPERATORS = frozenset({FilterOperator.AND, FilterOperator.OR})

FilterValue = bool | int | float | str | datetime | list[str] | list[int] | list[float]


class MoveParameters(BaseModel):
    """Bias applied to the search target.

    Attributes:
        concepts: Phrases to move toward (or away from).
        force: Strength of the bias, 0 (none) to 1 (maximal).
    """

    concepts: list[str] = Field(min_length=1, description="Bias phrases")
    force: float = Field(ge=0.0, le=1.0, description="Bias strength")


class WhereFilter(BaseModel):
    """Structural predicate over stored property values.

    A leaf compares the property at ``path`` with ``value``; a compound
    (``And``/``Or``) combines ``operands``.
    """

    operator: FilterOperator = Field(description="Filter operator")
    path: list[str] | None = Field(default=None, description="Property path")
    value: FilterValue | None = Field(default=None, description="Literal value")
    operands: list["WhereFilter"] = Field(
        default_factory=list,
        description="Nested filters for And/Or",
    )

    @model_validator(mode="after")
    def _check_shape(self) -> "WhereFilter":
        if self.operator in COMPOUND_OPERATORS:
            if not self.operands:
                raise ValueError(f"{self.operator.value} filter requires operands")
            if self.path is not None or self.value is not None:
                raise ValueError(f"{self.operator.value} filter takes no path or value")
        else:
            if not self.path:
                raise ValueError(f"{self.operator.value} filter requires a path")
            if self.value is None:
                raise ValueError(f"{self.operator.value} filter requires a value")
            if self.operands:
                raise ValueError(f"{self.operator.value} filter takes no operands")
        return self

    @classmethod
    def where(
        cls,
        path: str | list[str],
        operator: FilterOperator,
        value: FilterValue,
    ) -> "WhereFilter":
        """Build a leaf filter."""
        if isinstance(path, str):
            path = [path]
        return cls(operator=operator, path=path, value=value)

    @classmethod
    def all_of(cls, *operands: "WhereFilter") -> "WhereFilter":
        """Combine filters with And."""
        return cls(operator=FilterOperator.AND, operands=list(operands))

    @classmethod
    def any_of(cls, *operands: "WhereFilter") -> "WhereFilter":
        """Combine filters with Or."""
        return cls(operator=FilterOperator.OR, operands=list(operands))


class QueryField(BaseModel):
    """A projected field, optionally with nested fields."""

    name: str
    fields: list["QueryField"] = Field(default_factory=list)


class NearTextQuery(BaseModel):
    """Semantic search target.

    Attributes:
        concepts: Phrases defining the search target.
        move_to: Optional bias toward auxiliary concepts.
        move_away_from: Optional bias away from auxiliary concepts.
        distance: Optional maximum distance for a result.
    """

    concepts: list[str] = Field(min_length=1, description="Search phrases")
    move_to: MoveParameters | None = Field(default=None, description="Move toward")
    move_away_from: MoveParameters | None = Field(
        default=None,
        description="Move away from",
    )
    distance: float | None = Field(default=None, ge=0.0, description="Max distance")


class Additional(BaseModel):
    """Metadata computed by the service for a result row."""

    id: str
    distance: float | None = None


class Book(BaseModel):
    """A book returned by a search."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    type: str | None = None
    additional: Additional = Field(alias="_additional")


class QueryErrorDetail(BaseModel):
    """A query-level error from the response envelope."""

    message: str
    path: list[Any] | None = None
    locations: list[Any] | None = None
