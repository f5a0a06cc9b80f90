"""
Database access with asyncpg.

The data-access layer only needs something that can execute a parameterized
statement and return rows. That capability is `QueryExecutor`; the two
adapters below provide it over a single connection or over a pool.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any, Protocol

import asyncpg

from userdao.config import DatabaseConfig, get_database_config
from userdao.exceptions import StoreError
from userdao.shared.logging import get_logger, log_with_context

logger = get_logger(__name__)

Row = Mapping[str, Any]

# Failures raised by the driver or the network underneath it
DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, TimeoutError)


class QueryExecutor(Protocol):
    """Execute a parameterized statement and return its rows."""

    async def fetch(self, query: str, *args: Any) -> Sequence[Row]: ...


class ConnectionExecutor:
    """QueryExecutor over a single asyncpg connection."""

    def __init__(self, connection: asyncpg.Connection) -> None:
        self._connection = connection

    @property
    def connection(self) -> asyncpg.Connection:
        return self._connection

    async def fetch(self, query: str, *args: Any) -> Sequence[Row]:
        logger.debug("Executing statement", extra={"query": query, "executor": "connection"})
        try:
            return await self._connection.fetch(query, *args)
        except DRIVER_ERRORS as e:
            raise StoreError(f"statement failed: {e}", query=query) from e


class PoolExecutor:
    """QueryExecutor over an asyncpg pool; one pooled connection per call."""

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    @property
    def pool(self) -> asyncpg.Pool:
        return self._pool

    async def fetch(self, query: str, *args: Any) -> Sequence[Row]:
        logger.debug("Executing statement", extra={"query": query, "executor": "pool"})
        try:
            async with self._pool.acquire() as connection:
                return await connection.fetch(query, *args)
        except DRIVER_ERRORS as e:
            raise StoreError(f"statement failed: {e}", query=query) from e


async def connect(config: DatabaseConfig | None = None) -> asyncpg.Connection:
    """Open a single connection using the configured DSN."""
    config = config or get_database_config()
    return await asyncpg.connect(config.dsn)


async def create_pool(config: DatabaseConfig | None = None) -> asyncpg.Pool:
    """Create a connection pool bounded by `pool_max_size`."""
    config = config or get_database_config()
    pool = await asyncpg.create_pool(
        config.dsn,
        min_size=min(config.pool_min_size, config.pool_max_size),
        max_size=config.pool_max_size,
    )
    log_with_context(
        logger,
        logging.INFO,
        "Database connection pool initialized",
        host=config.host,
        port=config.port,
        database=config.database,
        max_size=config.pool_max_size,
    )
    return pool


class DatabaseManager:
    """Owns a lazily created pool and hands out executors over it."""

    def __init__(self, config: DatabaseConfig | None = None) -> None:
        """Initialize database manager.

        Args:
            config: Optional connection configuration override.
        """
        self._config = config or get_database_config()
        self._pool: asyncpg.Pool | None = None
        self._pool_lock = asyncio.Lock()

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    async def executor(self) -> PoolExecutor:
        """Get a pooled executor, creating the pool on first use."""
        if self._pool is None:
            async with self._pool_lock:
                if self._pool is None:
                    self._pool = await create_pool(self._config)
        return PoolExecutor(self._pool)

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[ConnectionExecutor]:
        """Open a dedicated connection for the duration of the context."""
        conn = await connect(self._config)
        try:
            yield ConnectionExecutor(conn)
        finally:
            await conn.close()

    async def close(self) -> None:
        """Close the pool if it was created."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection pool closed")


# Global database manager instance
_db_manager: DatabaseManager | None = None


def get_database_manager() -> DatabaseManager:
    """Get the global database manager instance."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


__all__ = [
    "ConnectionExecutor",
    "DatabaseManager",
    "PoolExecutor",
    "QueryExecutor",
    "Row",
    "connect",
    "create_pool",
    "get_database_manager",
]
