# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Database connection management with asyncpg and connection pooling.

Stores accept any ``QueryExecutor``: the pooled ``Database`` for standalone
statements, or the ``asyncpg.Connection`` yielded by
``Database.transaction()`` when several statements must commit together.
"""

import contextlib
import time
from collections.abc import AsyncIterator
from datetime import datetime, timezone
from typing import Any

import asyncpg
from beartype import beartype
from beartype.typing import Protocol, runtime_checkable

from .config import Settings, get_settings
from .logging_utils import get_logger

logger = get_logger(__name__)


@runtime_checkable
class QueryExecutor(Protocol):
    """The subset of the asyncpg connection API the stores rely on."""

    async def execute(self, query: str, *args: Any) -> str: ...

    async def fetch(self, query: str, *args: Any) -> list[Any]: ...

    async def fetchrow(self, query: str, *args: Any) -> Any: ...


@beartype
def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@beartype
def affected_rows(status: str | None) -> int:
    """Parse the row count out of an asyncpg command status such as ``UPDATE 3``."""
    if not status:
        return 0
    tail = status.rsplit(" ", 1)[-1]
    return int(tail) if tail.isdigit() else 0


class Database:
    """Pooled asyncpg database."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._pool: asyncpg.Pool | None = None
        self._settings = settings or get_settings()

    @beartype
    async def connect(self) -> None:
        """Create the connection pool."""
        if self._pool is not None:
            return

        self._pool = await asyncpg.create_pool(
            self._settings.database_url,
            min_size=self._settings.database_pool_min,
            max_size=self._settings.database_pool_max,
            max_inactive_connection_lifetime=self._settings.database_max_inactive_connection_lifetime,
            command_timeout=self._settings.database_command_timeout,
            server_settings={"jit": "off"},
        )
        logger.info(
            "Database pool ready (min=%d, max=%d)",
            self._settings.database_pool_min,
            self._settings.database_pool_max,
        )

    @beartype
    async def disconnect(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
        self._pool = None

    @contextlib.asynccontextmanager
    async def acquire(
        self, *, timeout: float | None = None
    ) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a pooled connection, warning when the wait is slow."""
        if self._pool is None:
            raise RuntimeError("Database not connected")

        timeout = timeout or self._settings.database_pool_timeout
        start_time = time.perf_counter()

        async with self._pool.acquire(timeout=timeout) as conn:
            wait_ms = (time.perf_counter() - start_time) * 1000
            if wait_ms > 1000:
                logger.warning("Slow connection acquisition: %.1fms", wait_ms)
            yield conn

    @contextlib.asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """Run the enclosed statements in one transaction on one connection.

        The transaction commits when the block exits normally and rolls back
        when it raises.
        """
        async with self.acquire() as conn:
            async with conn.transaction():
                yield conn

    @beartype
    async def execute(self, query: str, *args: Any) -> str:
        """Execute a statement and return its command status."""
        async with self.acquire() as conn:
            return await conn.execute(query, *args)

    @beartype
    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        """Execute a query and fetch all results."""
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)

    @beartype
    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        """Execute a query and fetch a single row."""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)
