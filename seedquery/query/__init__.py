"""Query module."""

from seedquery.query.models import (
    Additional,
    Book,
    FilterOperator,
    MoveParameters,
    NearTextQuery,
    QueryErrorDetail,
    QueryField,
    WhereFilter,
)
from seedquery.query.runner import QueryRunner

__all__ = [
    "Additional",
    "Book",
    "FilterOperator",
    "MoveParameters",
    "NearTextQuery",
    "QueryErrorDetail",
    "QueryField",
    "QueryRunner",
    "WhereFilter",
]
