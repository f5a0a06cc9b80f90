"""
Tests for the executor adapters and the database manager.
"""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import asyncpg
import pytest

from userdao.config import DatabaseConfig
from userdao.exceptions import StoreError, UserDaoError
from userdao.shared.database import (
    ConnectionExecutor,
    DatabaseManager,
    PoolExecutor,
    create_pool,
)
from userdao.users.dao import UserDao


def _make_pool(connection: AsyncMock) -> MagicMock:
    pool = MagicMock(name="pool")
    pool.acquire.return_value.__aenter__.return_value = connection
    pool.acquire.return_value.__aexit__.return_value = False
    pool.close = AsyncMock()
    return pool


class TestConnectionExecutor:
    @pytest.mark.asyncio
    async def test_delegates_fetch(self) -> None:
        connection = AsyncMock()
        connection.fetch.return_value = [{"id": 1}]
        executor = ConnectionExecutor(connection)

        rows = await executor.fetch("SELECT * FROM users WHERE id = $1;", 1)

        assert rows == [{"id": 1}]
        connection.fetch.assert_awaited_once_with("SELECT * FROM users WHERE id = $1;", 1)

    @pytest.mark.asyncio
    async def test_wraps_driver_error(self) -> None:
        connection = AsyncMock()
        connection.fetch.side_effect = asyncpg.InterfaceError("connection is closed")
        executor = ConnectionExecutor(connection)

        with pytest.raises(StoreError) as exc_info:
            await executor.fetch("SELECT 1;")

        assert exc_info.value.query == "SELECT 1;"
        assert isinstance(exc_info.value.__cause__, asyncpg.InterfaceError)
        assert isinstance(exc_info.value, UserDaoError)

    @pytest.mark.asyncio
    async def test_wraps_network_error(self) -> None:
        connection = AsyncMock()
        connection.fetch.side_effect = ConnectionResetError("reset by peer")

        with pytest.raises(StoreError):
            await ConnectionExecutor(connection).fetch("SELECT 1;")


class TestPoolExecutor:
    @pytest.mark.asyncio
    async def test_acquires_connection_per_call(self) -> None:
        connection = AsyncMock()
        connection.fetch.return_value = []
        pool = _make_pool(connection)
        executor = PoolExecutor(pool)

        await executor.fetch("SELECT * FROM users ORDER BY id;")
        await executor.fetch("SELECT * FROM users ORDER BY id;")

        assert pool.acquire.call_count == 2
        assert connection.fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_wraps_driver_error(self) -> None:
        connection = AsyncMock()
        connection.fetch.side_effect = OSError("no route to host")
        executor = PoolExecutor(_make_pool(connection))

        with pytest.raises(StoreError) as exc_info:
            await executor.fetch("SELECT 1;")

        assert isinstance(exc_info.value.__cause__, OSError)

    @pytest.mark.asyncio
    async def test_wraps_acquire_timeout(self) -> None:
        pool = MagicMock(name="pool")
        pool.acquire.return_value.__aenter__.side_effect = asyncio.TimeoutError()
        executor = PoolExecutor(pool)

        with pytest.raises(StoreError) as exc_info:
            await executor.fetch("SELECT 1;")

        assert exc_info.value.query == "SELECT 1;"
        assert isinstance(exc_info.value.__cause__, TimeoutError)

    @pytest.mark.asyncio
    async def test_dao_works_over_pool(self) -> None:
        connection = AsyncMock()
        connection.fetch.return_value = []
        executor = PoolExecutor(_make_pool(connection))

        assert await UserDao().find_by_id(executor, 99) is None
        connection.fetch.assert_awaited_once_with("SELECT * FROM users WHERE id = $1;", 99)


class TestDatabaseManager:
    @pytest.fixture
    def config(self) -> DatabaseConfig:
        return DatabaseConfig(
            host="db.internal",
            port=6543,
            database="app",
            user="svc",
            password="pw",
            pool_max_size=3,
        )

    @pytest.mark.asyncio
    async def test_create_pool_uses_config(self, config: DatabaseConfig) -> None:
        with patch("userdao.shared.database.asyncpg.create_pool", new=AsyncMock()) as create:
            await create_pool(config)

        create.assert_awaited_once_with(
            "postgresql://svc:pw@db.internal:6543/app",
            min_size=1,
            max_size=3,
        )

    @pytest.mark.asyncio
    async def test_create_pool_logs_connection_context(
        self, config: DatabaseConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="userdao.shared.database"):
            with patch("userdao.shared.database.asyncpg.create_pool", new=AsyncMock()):
                await create_pool(config)

        record = next(r for r in caplog.records if r.getMessage() == "Database connection pool initialized")
        assert record.extra_data == {
            "host": "db.internal",
            "port": 6543,
            "database": "app",
            "max_size": 3,
        }

    @pytest.mark.asyncio
    async def test_executor_creates_pool_once(self, config: DatabaseConfig) -> None:
        pool = _make_pool(AsyncMock())
        manager = DatabaseManager(config)

        with patch(
            "userdao.shared.database.asyncpg.create_pool", new=AsyncMock(return_value=pool)
        ) as create:
            first = await manager.executor()
            second = await manager.executor()

        assert create.await_count == 1
        assert first.pool is second.pool is pool

        await manager.close()
        pool.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connection_context_closes(self, config: DatabaseConfig) -> None:
        conn = AsyncMock()
        manager = DatabaseManager(config)

        with patch("userdao.shared.database.asyncpg.connect", new=AsyncMock(return_value=conn)):
            async with manager.connection() as executor:
                assert executor.connection is conn

        conn.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_without_pool_is_noop(self, config: DatabaseConfig) -> None:
        await DatabaseManager(config).close()

    @pytest.mark.asyncio
    async def test_concurrent_first_calls_create_one_pool(self, config: DatabaseConfig) -> None:
        pool = _make_pool(AsyncMock())

        async def slow_create_pool(*args, **kwargs):
            await asyncio.sleep(0.01)
            return pool

        manager = DatabaseManager(config)

        with patch(
            "userdao.shared.database.asyncpg.create_pool", new=AsyncMock(side_effect=slow_create_pool)
        ) as create:
            executors = await asyncio.gather(
                manager.executor(),
                manager.executor(),
                manager.executor(),
            )

        assert create.await_count == 1
        assert all(executor.pool is pool for executor in executors)
