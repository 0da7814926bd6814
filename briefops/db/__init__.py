"""Database module for PostgreSQL connectivity and BriefOps persistence.

Provides async database connection utilities using psycopg v3, the usage
counter behind the free tier quota, and ingestion records for grounding
content.

Usage:
    from briefops.db import get_connection, init_db, close_db
    from briefops.db import UsageStore, IngestionStore

    # At application startup
    await init_db(settings.database_url)

    # During request handling
    async with get_connection() as conn:
        store = UsageStore(conn)
        record = await store.get_usage(user_id)

    # At application shutdown
    await close_db()
"""
from briefops.db.connection import close_db, get_connection, init_db
from briefops.db.models import IngestionRecord, UsageRecord
from briefops.db.usage_store import PooledUsageStore, UsageStore
from briefops.db.ingestion_store import IngestionStore

__all__ = [
    # Connection
    "get_connection",
    "init_db",
    "close_db",
    # Models
    "UsageRecord",
    "IngestionRecord",
    # Stores
    "UsageStore",
    "PooledUsageStore",
    "IngestionStore",
]
