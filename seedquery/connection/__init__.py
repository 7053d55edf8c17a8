"""Connection module."""

from seedquery.connection.deadline import call_with_deadline
from seedquery.connection.manager import ConnectionManager, parse_host

__all__ = [
    "ConnectionManager",
    "call_with_deadline",
    "parse_host",
]
