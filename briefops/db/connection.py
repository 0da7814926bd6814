"""Shared psycopg v3 connection pool for the usage and ingestion stores."""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from psycopg import AsyncConnection
from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)

_pool: Optional[AsyncConnectionPool] = None


async def init_db(
    database_url: str,
    min_size: int = 1,
    max_size: int = 10,
    timeout: float = 10.0,
) -> None:
    """Open the process-wide pool. Call once before any handler runs.

    ``timeout`` bounds how long a caller waits for a free connection.

    Raises:
        RuntimeError: The pool is already open.
        psycopg.OperationalError: The database is unreachable.
    """
    global _pool
    if _pool is not None:
        raise RuntimeError("Database pool already initialized. Call close_db() first.")

    pool = AsyncConnectionPool(
        conninfo=database_url,
        min_size=min_size,
        max_size=max_size,
        timeout=timeout,
        open=False,
    )
    await pool.open()
    _pool = pool
    logger.info("Database pool opened", extra={"min_size": min_size, "max_size": max_size})


async def close_db() -> None:
    """Close the pool; a no-op when it was never opened."""
    global _pool
    if _pool is None:
        return
    await _pool.close()
    _pool = None
    logger.info("Database pool closed")


@asynccontextmanager
async def get_connection() -> AsyncGenerator[AsyncConnection, None]:
    """Borrow a connection for the duration of the block.

        async with get_connection() as conn:
            record = await UsageStore(conn).get_usage(user_id)

    Raises:
        RuntimeError: ``init_db`` has not been called.
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_db() at application startup.")

    async with _pool.connection() as conn:
        yield conn
