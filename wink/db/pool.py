"""
Async Postgres pool shared by every repository.

One pool per process, opened and closed by the FastAPI lifespan. Every
connection runs in UTC so calendar timestamps compare the same way the
availability pipeline does.
"""

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from wink.config import settings
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

CLOSE_TIMEOUT_SECONDS = 30.0
# Readiness degrades once this share of connections is checked out
BUSY_POOL_RATIO = 0.9


class DatabasePool:
    def __init__(self, conninfo: str | None = None):
        self._conninfo = conninfo
        self.pool: AsyncConnectionPool | None = None
        self._state = "new"

    @property
    def initialized(self) -> bool:
        return self._state == "open"

    async def initialize(self) -> None:
        if self._state == "open":
            logger.warning("Database pool already open")
            return
        if self._state == "closed":
            raise RuntimeError("Database pool was closed and cannot be reopened")

        options = settings.get_db_pool_config()
        pool = AsyncConnectionPool(
            conninfo=self._conninfo or settings.SUPABASE_DB_URL,
            open=False,
            check=AsyncConnectionPool.check_connection,
            configure=self._prepare_connection,
            **options,
        )
        try:
            await pool.open(wait=True)
            await self._ping(pool)
        except Exception as e:
            logger.error("Database pool failed to open", error=str(e))
            await pool.close()
            raise RuntimeError(f"Database pool initialization failed: {e}") from e

        self.pool = pool
        self._state = "open"
        logger.info(
            "Database pool open",
            min_size=options["min_size"],
            max_size=options["max_size"],
            timeout=options["timeout"],
        )

    async def close(self) -> None:
        if self._state != "open":
            return
        self._state = "closed"
        try:
            await asyncio.wait_for(self.pool.close(), timeout=CLOSE_TIMEOUT_SECONDS)
            logger.info("Database pool closed")
        except TimeoutError:
            logger.warning("Database pool close timed out", timeout=CLOSE_TIMEOUT_SECONDS)

    @staticmethod
    async def _prepare_connection(conn: psycopg.AsyncConnection) -> None:
        conn.row_factory = dict_row
        await conn.set_autocommit(True)
        await conn.execute(
            sql.SQL("SET application_name = {}").format(
                sql.Literal(f"wink-{settings.environment}")
            )
        )
        await conn.execute("SET timezone = 'UTC'")
        await conn.execute("SET statement_timeout = '30s'")

    @staticmethod
    async def _ping(pool: AsyncConnectionPool) -> float:
        """Round-trip ``SELECT 1`` and return the latency in milliseconds."""
        started = time.perf_counter()
        async with pool.connection() as conn:
            cursor = await conn.execute("SELECT 1 AS ok")
            row = await cursor.fetchone()
        if not row or row["ok"] != 1:
            raise RuntimeError("Database ping returned an unexpected row")
        return (time.perf_counter() - started) * 1000

    def _require_open(self) -> AsyncConnectionPool:
        if self._state != "open":
            raise RuntimeError(f"Database pool is {self._state}, not open")
        return self.pool

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[psycopg.AsyncConnection]:
        """Borrow an autocommit connection."""
        pool = self._require_open()
        async with pool.connection() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[psycopg.AsyncConnection]:
        """
        Borrow a connection inside one transaction.

        Commits when the block exits normally and rolls back when it raises,
        so row locks taken with ``FOR UPDATE`` last until the block ends.
        """
        async with self.connection() as conn:
            async with conn.transaction():
                yield conn

    async def health_check(self) -> dict[str, Any]:
        if self._state != "open":
            return {"healthy": False, "error": f"Pool is {self._state}"}

        stats = self.pool.get_stats()
        size = stats.get("pool_size", 0)
        available = stats.get("pool_available", 0)
        waiting = stats.get("requests_waiting", 0)
        try:
            latency_ms = await self._ping(self.pool)
        except (psycopg.Error, RuntimeError) as e:
            logger.error("Database ping failed", error=str(e))
            return {"healthy": False, "error": f"{type(e).__name__}: {e}"}

        in_use = (size - available) / size if size else 0.0
        return {
            "healthy": in_use < BUSY_POOL_RATIO,
            "latency_ms": round(latency_ms, 2),
            "pool_stats": {
                "pool_size": size,
                "pool_available": available,
                "requests_waiting": waiting,
            },
        }


db_pool = DatabasePool()


async def get_db_connection():
    return db_pool.connection()


async def db_health_check() -> dict[str, Any]:
    return await db_pool.health_check()
