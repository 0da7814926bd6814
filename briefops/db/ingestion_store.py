"""Ingestion store for grounding documents and video transcripts using psycopg v3."""
from typing import Literal, Optional

from psycopg import AsyncConnection

from briefops.db.models import IngestionRecord

_COLUMNS = "id, kind, source_id, name, source_url, storage_uri, summary, created_at"


class IngestionStore:
    """Async store for ingestion records.

    Usage:
        async with get_connection() as conn:
            store = IngestionStore(conn)
            record = await store.append_ingestion_record("document", file_id, name)
    """

    def __init__(self, conn: AsyncConnection) -> None:
        """Initialize store with an async connection.

        Args:
            conn: Async psycopg connection from the pool.
        """
        self._conn = conn

    async def create_tables(self) -> None:
        """Create ingestion_records table if not exists."""
        async with self._conn.cursor() as cur:
            await cur.execute("""
                CREATE TABLE IF NOT EXISTS ingestion_records (
                    id BIGSERIAL PRIMARY KEY,
                    kind TEXT NOT NULL,
                    source_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    source_url TEXT,
                    storage_uri TEXT,
                    summary TEXT,
                    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                )
            """)
            await cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_ingestion_records_created_at
                ON ingestion_records (created_at DESC)
            """)
            await self._conn.commit()

    def _row_to_record(self, row: tuple) -> IngestionRecord:
        """Convert database row to IngestionRecord model."""
        return IngestionRecord(
            id=row[0],
            kind=row[1],
            source_id=row[2],
            name=row[3],
            source_url=row[4],
            storage_uri=row[5],
            summary=row[6],
            created_at=row[7],
        )

    async def append_ingestion_record(
        self,
        kind: Literal["document", "youtube"],
        source_id: str,
        name: str,
        source_url: Optional[str] = None,
        storage_uri: Optional[str] = None,
        summary: Optional[str] = None,
    ) -> IngestionRecord:
        """Insert a new ingestion record.

        Returns:
            IngestionRecord: The stored record with its id and timestamp.
        """
        async with self._conn.cursor() as cur:
            await cur.execute(
                f"""
                INSERT INTO ingestion_records (kind, source_id, name, source_url, storage_uri, summary)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING {_COLUMNS}
                """,
                (kind, source_id, name, source_url, storage_uri, summary),
            )
            row = await cur.fetchone()
            await self._conn.commit()

        return self._row_to_record(row)

    async def attach_summary(self, record_id: int, summary: str) -> Optional[IngestionRecord]:
        """Store the generated summary on an existing record.

        Returns:
            IngestionRecord if found, None otherwise.
        """
        async with self._conn.cursor() as cur:
            await cur.execute(
                f"""
                UPDATE ingestion_records
                SET summary = %s
                WHERE id = %s
                RETURNING {_COLUMNS}
                """,
                (summary, record_id),
            )
            row = await cur.fetchone()
            await self._conn.commit()

        if not row:
            return None

        return self._row_to_record(row)

    async def list_ingestion_records(self, limit: int = 20) -> list[IngestionRecord]:
        """List ingestion records, newest first.

        Args:
            limit: Maximum records to return.
        """
        async with self._conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM ingestion_records
                ORDER BY created_at DESC, id DESC
                LIMIT %s
                """,
                (limit,),
            )
            rows = await cur.fetchall()

        return [self._row_to_record(row) for row in rows]
