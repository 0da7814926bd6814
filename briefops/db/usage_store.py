"""Usage store for free tier accounting using psycopg v3.

Provides the per-user daily counter behind the channel summary quota.
"""
from typing import Optional

from psycopg import AsyncConnection

from briefops.db.connection import get_connection
from briefops.db.models import UsageRecord


class UsageStore:
    """Async store for per-user daily usage counters.

    Usage:
        async with get_connection() as conn:
            store = UsageStore(conn)
            record = await store.increment_usage(user_id, "2024-10-01")
    """

    def __init__(self, conn: AsyncConnection) -> None:
        """Initialize store with an async connection.

        Args:
            conn: Async psycopg connection from the pool.
        """
        self._conn = conn

    async def create_tables(self) -> None:
        """Create usage_records table if not exists.

        Safe to call multiple times - uses CREATE TABLE IF NOT EXISTS.
        """
        async with self._conn.cursor() as cur:
            await cur.execute("""
                CREATE TABLE IF NOT EXISTS usage_records (
                    user_id TEXT PRIMARY KEY,
                    date_key TEXT NOT NULL,
                    count INTEGER NOT NULL DEFAULT 0,
                    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                )
            """)
            await self._conn.commit()

    async def get_usage(self, user_id: str) -> Optional[UsageRecord]:
        """Get the usage record for a user.

        Args:
            user_id: Slack user ID.

        Returns:
            UsageRecord if the user has ever committed usage, None otherwise.
        """
        async with self._conn.cursor() as cur:
            await cur.execute(
                """
                SELECT user_id, date_key, count
                FROM usage_records
                WHERE user_id = %s
                """,
                (user_id,),
            )
            row = await cur.fetchone()

        if not row:
            return None

        return UsageRecord(user_id=row[0], date_key=row[1], count=row[2])

    async def increment_usage(self, user_id: str, date_key: str) -> UsageRecord:
        """Record one use for today in a single atomic statement.

        A missing row, or a row from an earlier day, becomes
        ``{date_key, count: 1}``; a row for ``date_key`` is incremented.
        The row lock taken by ON CONFLICT DO UPDATE serializes concurrent
        commits for the same user, so no increment is lost.

        Args:
            user_id: Slack user ID.
            date_key: Today's date key (YYYY-MM-DD).

        Returns:
            UsageRecord after the update.
        """
        async with self._conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO usage_records (user_id, date_key, count, updated_at)
                VALUES (%s, %s, 1, NOW())
                ON CONFLICT (user_id) DO UPDATE SET
                    count = CASE
                        WHEN usage_records.date_key = EXCLUDED.date_key
                        THEN usage_records.count + 1
                        ELSE 1
                    END,
                    date_key = EXCLUDED.date_key,
                    updated_at = NOW()
                RETURNING user_id, date_key, count
                """,
                (user_id, date_key),
            )
            row = await cur.fetchone()
            await self._conn.commit()

        return UsageRecord(user_id=row[0], date_key=row[1], count=row[2])


class PooledUsageStore:
    """Usage backend that borrows a pooled connection for each call.

    Lets long-lived components such as ``UsageLimiter`` hold a store
    without holding a connection.
    """

    async def get_usage(self, user_id: str) -> Optional[UsageRecord]:
        async with get_connection() as conn:
            return await UsageStore(conn).get_usage(user_id)

    async def increment_usage(self, user_id: str, date_key: str) -> UsageRecord:
        async with get_connection() as conn:
            return await UsageStore(conn).increment_usage(user_id, date_key)
