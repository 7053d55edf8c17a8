"""GraphQL ``Get`` query construction.

String literals are JSON-encoded, which is valid GraphQL string syntax.
Names are checked against the GraphQL name grammar so that no caller
input can change the shape of the query.
"""

import json
import re
import types
import typing
from collections.abc import Sequence
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel

from seedquery.exceptions import ValidationError
from seedquery.query.models import MoveParameters, NearTextQuery, QueryField, WhereFilter

NAME_PATTERN = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")


def check_name(name: str, kind: str = "name") -> str:
    """Validate a GraphQL name.

    Raises:
        ValidationError: If the name is not a valid GraphQL name.
    """
    if not NAME_PATTERN.match(name):
        raise ValidationError(
            f"Invalid {kind}: {name!r}",
            details={"kind": kind, "name": name},
        )
    return name


def render_value(value: Any) -> str:
    """Render a Python value as a GraphQL input literal."""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return json.dumps(value.isoformat())
    if isinstance(value, bool | int | float | str):
        return json.dumps(value)
    if isinstance(value, Sequence):
        return "[" + ", ".join(render_value(item) for item in value) + "]"
    if isinstance(value, dict):
        items = ", ".join(
            f"{check_name(key, 'argument')}: {render_value(item)}"
            for key, item in value.items()
        )
        return "{" + items + "}"
    raise ValidationError(
        f"Cannot render value of type {type(value).__name__}",
        details={"value": repr(value)},
    )


def _value_key(value: Any) -> str:
    """Pick the typed value key for a filter literal."""
    sample = value[0] if isinstance(value, list) and value else value
    if isinstance(sample, bool):
        return "valueBoolean"
    if isinstance(sample, int):
        return "valueInt"
    if isinstance(sample, float):
        return "valueNumber"
    if isinstance(sample, datetime):
        return "valueDate"
    return "valueText"


def _move_arguments(move: MoveParameters) -> dict[str, Any]:
    return {"concepts": list(move.concepts), "force": move.force}


def near_text_arguments(near_text: NearTextQuery) -> dict[str, Any]:
    """Convert a near-text query into GraphQL arguments."""
    arguments: dict[str, Any] = {"concepts": list(near_text.concepts)}
    if near_text.distance is not None:
        arguments["distance"] = near_text.distance
    if near_text.move_to is not None:
        arguments["moveTo"] = _move_arguments(near_text.move_to)
    if near_text.move_away_from is not None:
        arguments["moveAwayFrom"] = _move_arguments(near_text.move_away_from)
    return arguments


def where_arguments(where: WhereFilter) -> dict[str, Any]:
    """Convert a filter into GraphQL arguments."""
    if where.operands:
        return {
            "operator": where.operator,
            "operands": [where_arguments(operand) for operand in where.operands],
        }

    path = [check_name(part, "filter path") for part in where.path or []]
    return {
        "path": path,
        "operator": where.operator,
        _value_key(where.value): where.value,
    }


def render_fields(fields: Sequence[QueryField]) -> str:
    """Render a field selection set body."""
    rendered = []
    for field in fields:
        name = check_name(field.name, "field")
        if field.fields:
            rendered.append(f"{name} {{ {render_fields(field.fields)} }}")
        else:
            rendered.append(name)
    return " ".join(rendered)


def _nested_model(annotation: Any) -> type[BaseModel] | None:
    origin = typing.get_origin(annotation)
    if origin is None and isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    if origin in (typing.Union, types.UnionType):
        for arg in typing.get_args(annotation):
            nested = _nested_model(arg)
            if nested is not None:
                return nested
    return None


def fields_from_model(model: type[BaseModel]) -> list[QueryField]:
    """Derive the selection set from a typed record.

    Aliases are used as field names and nested models become nested
    selections, so ``Book`` yields ``title type _additional { id distance }``.
    """
    fields = []
    for name, info in model.model_fields.items():
        nested = _nested_model(info.annotation)
        fields.append(
            QueryField(
                name=info.alias or name,
                fields=fields_from_model(nested) if nested else [],
            )
        )
    return fields


def build_get_query(
    class_name: str,
    fields: Sequence[QueryField],
    near_text: NearTextQuery | None = None,
    where: WhereFilter | None = None,
    limit: int | None = None,
) -> str:
    """Build a ``Get`` query for one collection.

    Args:
        class_name: Collection to query.
        fields: Selection set.
        near_text: Optional semantic search target.
        where: Optional structural filter.
        limit: Optional maximum number of results.

    Returns:
        GraphQL query text.

    Raises:
        ValidationError: If a name is invalid or no fields are selected.
    """
    check_name(class_name, "class name")
    if not fields:
        raise ValidationError("At least one field must be selected")

    arguments: dict[str, Any] = {}
    if near_text is not None:
        arguments["nearText"] = near_text_arguments(near_text)
    if where is not None:
        arguments["where"] = where_arguments(where)
    if limit is not None:
        if limit < 1:
            raise ValidationError("Limit must be positive", details={"limit": limit})
        arguments["limit"] = limit

    argument_text = ""
    if arguments:
        argument_text = render_value(arguments)[1:-1]
        argument_text = f"({argument_text})"

    return f"{{ Get {{ {class_name}{argument_text} {{ {render_fields(fields)} }} }} }}"
