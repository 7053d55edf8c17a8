"""Per-call deadline for remote operations."""

import asyncio
import time
from collections.abc import Awaitable
from typing import TypeVar

from seedquery.observability.metrics import track_operation

T = TypeVar("T")


async def call_with_deadline(
    operation: str,
    awaitable: Awaitable[T],
    timeout: float,
) -> T:
    """Await a remote call, cancelling it once the deadline passes.

    The operation duration and outcome are recorded either way.

    Args:
        operation: Operation name used as the metrics label.
        awaitable: The in-flight remote call.
        timeout: Deadline in seconds.

    Returns:
        Whatever the remote call returned.

    Raises:
        TimeoutError: If the deadline passed before a response arrived.
    """
    start = time.perf_counter()
    success = False
    try:
        result = await asyncio.wait_for(awaitable, timeout=timeout)
        success = True
        return result
    finally:
        track_operation(operation, time.perf_counter() - start, success=success)
