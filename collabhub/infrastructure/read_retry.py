"""Read Retry — bounded exponential backoff for idempotent store reads.

Invariants:
    - Only read paths use this (get, list, aggregations); writes are never retried
    - Transient driver errors (OperationalError, DBAPIError with connection_invalidated)
      are retried at most `attempts - 1` times, then mapped to DatabaseError
    - Any other exception propagates on the first occurrence
    - The session is rolled back before each retry so it is usable again

Design Decisions:
    - ±25% jitter on backoff: concurrent readers do not retry in lockstep
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.core.errors import DatabaseError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_transient(error: Exception) -> bool:
    if isinstance(error, OperationalError):
        return True
    return isinstance(error, DBAPIError) and error.connection_invalidated


class ReadRetryPolicy:
    """Retry budget applied to a single read operation."""

    def __init__(
        self, attempts: int = 3, base_delay_ms: int = 100, max_delay_ms: int = 2_000,
    ):
        self.attempts = max(1, attempts)
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def run(
        self, db: AsyncSession, operation: Callable[[], Awaitable[T]], name: str,
    ) -> T:
        for attempt in range(self.attempts):
            try:
                return await operation()
            except DBAPIError as e:
                if not _is_transient(e):
                    raise
                await db.rollback()
                if attempt + 1 >= self.attempts:
                    logger.error(
                        f"Read '{name}' failed after {self.attempts} attempts: {e}",
                        extra={"attempt": attempt + 1},
                    )
                    raise DatabaseError("Store unavailable", name)
                delay = self._backoff(attempt)
                logger.warning(
                    f"Transient error on read '{name}', retry after {delay}ms: {e}",
                    extra={"attempt": attempt + 1},
                )
                await asyncio.sleep(delay / 1000)
        raise DatabaseError("Store unavailable", name)  # pragma: no cover

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311
