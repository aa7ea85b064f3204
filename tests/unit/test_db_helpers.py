"""
Tests for the query helpers and the retry decorator.
"""

from unittest.mock import AsyncMock, MagicMock

import psycopg
import pytest

from wink.db.helpers import DatabaseError, execute_query, fetch_all, fetch_one, with_db_retry


def _connection(rows=None, error=None):
    cursor = MagicMock()
    cursor.execute = AsyncMock(side_effect=error)
    cursor.fetchone = AsyncMock(return_value=(rows or [None])[0])
    cursor.fetchall = AsyncMock(return_value=rows or [])
    cursor.__aenter__ = AsyncMock(return_value=cursor)
    cursor.__aexit__ = AsyncMock(return_value=False)

    conn = MagicMock()
    conn.cursor.return_value = cursor
    conn.execute = AsyncMock(side_effect=error, return_value=MagicMock(rowcount=2))
    return conn, cursor


class TestQueryHelpers:
    @pytest.mark.asyncio
    async def test_fetch_one_uses_given_connection(self):
        conn, cursor = _connection(rows=[{"id": "a"}])

        row = await fetch_one("SELECT 1 WHERE id = %s", ("a",), connection=conn)

        assert row == {"id": "a"}
        cursor.execute.assert_awaited_once_with("SELECT 1 WHERE id = %s", ("a",))

    @pytest.mark.asyncio
    async def test_fetch_all_returns_rows(self):
        conn, _ = _connection(rows=[{"id": "a"}, {"id": "b"}])

        rows = await fetch_all("SELECT id FROM profiles", connection=conn)

        assert [row["id"] for row in rows] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_execute_query_returns_rowcount(self):
        conn, _ = _connection()

        assert await execute_query("UPDATE activity_swipes SET x = 1", connection=conn) == 2

    @pytest.mark.asyncio
    async def test_psycopg_errors_become_database_errors(self):
        conn, _ = _connection(error=psycopg.OperationalError("server closed the connection"))

        with pytest.raises(DatabaseError) as exc:
            await fetch_all("SELECT 1", connection=conn)

        assert exc.value.operation == "fetch_all"


class TestRetry:
    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self, monkeypatch):
        monkeypatch.setattr("wink.db.helpers.asyncio.sleep", AsyncMock())
        calls = AsyncMock(side_effect=[DatabaseError("timeout"), ["ok"]])

        @with_db_retry(max_retries=2, base_delay=0.1)
        async def load():
            return await calls()

        assert await load() == ["ok"]
        assert calls.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, monkeypatch):
        sleep = AsyncMock()
        monkeypatch.setattr("wink.db.helpers.asyncio.sleep", sleep)
        calls = AsyncMock(side_effect=DatabaseError("timeout"))

        @with_db_retry(max_retries=2, base_delay=0.1)
        async def load():
            return await calls()

        with pytest.raises(DatabaseError):
            await load()
        assert calls.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [0.1, 0.2]

    @pytest.mark.asyncio
    async def test_unrecoverable_errors_are_not_retried(self, monkeypatch):
        monkeypatch.setattr("wink.db.helpers.asyncio.sleep", AsyncMock())
        calls = AsyncMock(side_effect=DatabaseError("bad sql", recoverable=False))

        @with_db_retry(max_retries=2, base_delay=0.1)
        async def load():
            return await calls()

        with pytest.raises(DatabaseError):
            await load()
        assert calls.await_count == 1
