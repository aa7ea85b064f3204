"""
Query helpers used by the repositories.

Each helper runs one statement, either on a connection the caller already
holds (inside ``db_pool.transaction()``) or on one borrowed for the call,
and turns psycopg failures into ``DatabaseError``.
"""

import asyncio
import functools
from typing import Any

import psycopg

from wink.db.pool import get_db_connection
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

Row = dict[str, Any]


class DatabaseError(Exception):
    """A query failed; ``recoverable`` says whether retrying can help."""

    def __init__(self, message: str, operation: str = "unknown", recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


async def _run(operation: str, query: str, params: tuple, connection, consume):
    try:
        if connection is not None:
            return await consume(connection, query, params)
        async with await get_db_connection() as conn:
            return await consume(conn, query, params)
    except psycopg.Error as e:
        logger.error(
            "Query failed", operation=operation, query=" ".join(query.split())[:120], error=str(e)
        )
        raise DatabaseError(
            f"Query failed: {e}",
            operation=operation,
            recoverable=isinstance(e, psycopg.OperationalError),
        ) from e


async def _one(conn, query, params) -> Row | None:
    async with conn.cursor() as cur:
        await cur.execute(query, params)
        return await cur.fetchone()


async def _all(conn, query, params) -> list[Row]:
    async with conn.cursor() as cur:
        await cur.execute(query, params)
        return await cur.fetchall()


async def _rowcount(conn, query, params) -> int:
    cursor = await conn.execute(query, params)
    return cursor.rowcount


async def fetch_one(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> Row | None:
    """First row of ``query`` as a dict, or None."""
    return await _run("fetch_one", query, params, connection, _one)


async def fetch_all(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> list[Row]:
    return await _run("fetch_all", query, params, connection, _all)


async def execute_query(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> int:
    """Run a write and return the affected row count."""
    return await _run("execute", query, params, connection, _rowcount)


def with_db_retry(max_retries: int = 3, base_delay: float = 0.1):
    """
    Retry an idempotent coroutine on recoverable ``DatabaseError``.

    Waits ``base_delay * 2**attempt`` between attempts. Non-recoverable
    errors and the last failure propagate unchanged.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except DatabaseError as e:
                    if not e.recoverable or attempt >= max_retries:
                        raise
                    delay = base_delay * (2**attempt)
                    attempt += 1
                    logger.warning(
                        "Retrying database operation",
                        operation=func.__name__,
                        attempt=attempt,
                        max_retries=max_retries,
                        delay=delay,
                        error=str(e),
                    )
                    await asyncio.sleep(delay)

        return wrapper

    return decorator
