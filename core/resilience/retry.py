"""
OPS Core Resilience — Conflict Retry
=======================================
Bounded retry-with-backoff for optimistic writes.

Only ConcurrentModificationError is retried. StorageUnavailableError
and every other exception propagate on the first occurrence.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from core.storage.errors import ConcurrentModificationError

logger = logging.getLogger("ops.resilience")

T = TypeVar("T")


def retry_on_conflict(
    operation: Callable[[], T],
    *,
    attempts: int,
    backoff_seconds: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run operation until it stops raising ConcurrentModificationError.

    operation must re-read whatever state it compares against on every
    call. The delay doubles after each conflict. The last conflict is
    re-raised once attempts are exhausted.
    """
    if not isinstance(attempts, int) or attempts < 1:
        raise ValueError("attempts must be int >= 1.")

    delay = backoff_seconds
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except ConcurrentModificationError as exc:
            if attempt == attempts:
                logger.warning(
                    f"Giving up after {attempts} conflicting attempts: {exc}"
                )
                raise
            logger.info(f"Conflict on attempt {attempt}/{attempts}: {exc}")
            if delay > 0:
                sleep(delay)
                delay *= 2
    raise AssertionError("unreachable")  # pragma: no cover
