"""Ingestion of Slack documents and YouTube transcripts as grounding content.

Ingested content is uploaded to object storage with the grounding flag,
recorded in the ingestion table and summarized. Several locators can be
ingested in one command; each one succeeds or fails on its own.
"""

import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Callable, Optional

import psycopg
from psycopg import AsyncConnection
from slack_sdk.web.async_client import AsyncWebClient

from briefops.db import IngestionRecord, IngestionStore, get_connection
from briefops.documents import (
    DownloadError,
    ExtractionError,
    InvalidVideoUrlError,
    NoTranscriptAvailableError,
    ObjectStorage,
    StorageError,
    TranscriptSource,
    download_file,
    extract_file_id,
    extract_from_file,
    fetch_file_info,
    normalize_for_llm,
    transcript_object_key,
)
from briefops.slack.classifier import extract_youtube_video_id
from briefops.summarization.chunking import ChunkedSummarizer
from briefops.summarization.pipeline import Notify, no_progress

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[], AbstractAsyncContextManager[AsyncConnection]]

INVALID_LOCATOR_MESSAGE = "Invalid Slack file URL or YouTube link. Could not extract the file ID."
EXTRACTION_FAILED_MESSAGE = "Could not extract text from the document."
INGESTION_FAILED_MESSAGE = "An unexpected error occurred while ingesting this source."


@dataclass(frozen=True)
class IngestionOutcome:
    """Result of ingesting one locator."""
    locator: str
    kind: Optional[str] = None
    name: Optional[str] = None
    summary: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class IngestionService:
    """Ingests documents and videos.

    Args:
        chunked: Map-reduce summarizer for the ingested text.
        storage: Object storage client.
        bucket: Bucket that receives grounding content.
        transcripts: YouTube transcript source.
        bot_token: Slack bot token for private file downloads.
        connection_factory: Yields a database connection per use.
        download_timeout: File download timeout in seconds.
    """

    def __init__(
        self,
        chunked: ChunkedSummarizer,
        storage: ObjectStorage,
        bucket: str,
        transcripts: TranscriptSource,
        bot_token: str,
        connection_factory: ConnectionFactory = get_connection,
        download_timeout: float = 15.0,
    ):
        self.chunked = chunked
        self.storage = storage
        self.bucket = bucket
        self.transcripts = transcripts
        self.bot_token = bot_token
        self.connection_factory = connection_factory
        self.download_timeout = download_timeout

    async def ingest_many(
        self,
        client: AsyncWebClient,
        locators: list[str],
        notify: Notify = no_progress,
    ) -> list[IngestionOutcome]:
        """Ingest each locator in order; one failure never stops the rest."""
        outcomes = []
        for locator in locators:
            outcomes.append(await self.ingest(client, locator, notify))
        return outcomes

    async def ingest(
        self,
        client: AsyncWebClient,
        locator: str,
        notify: Notify = no_progress,
    ) -> IngestionOutcome:
        """Ingest a YouTube video or a Slack file, whichever ``locator`` names."""
        locator = locator.strip().strip("<>").split("|")[0]

        try:
            if extract_youtube_video_id(locator):
                return await self.ingest_youtube(locator, notify)
            file_id = extract_file_id(locator)
            if not file_id:
                return IngestionOutcome(locator=locator, error=INVALID_LOCATOR_MESSAGE)
            return await self.ingest_document(client, locator, file_id, notify)
        except (DownloadError, StorageError) as e:
            logger.error(f"Ingestion failed: {e}", extra={"locator": locator})
            return IngestionOutcome(locator=locator, error=str(e))
        except ExtractionError as e:
            logger.error(f"Extraction failed: {e}", extra={"locator": locator})
            return IngestionOutcome(locator=locator, kind="document", error=EXTRACTION_FAILED_MESSAGE)
        except InvalidVideoUrlError:
            return IngestionOutcome(locator=locator, kind="youtube", error="Invalid YouTube URL.")
        except NoTranscriptAvailableError:
            return IngestionOutcome(
                locator=locator,
                kind="youtube",
                error="No transcript available for this YouTube video.",
            )
        except psycopg.Error as e:
            logger.error(
                f"Failed to record ingestion: {e}",
                extra={"locator": locator},
                exc_info=True,
            )
            return IngestionOutcome(locator=locator, error="Could not record the ingestion.")
        except Exception as e:
            logger.error(
                f"Unexpected ingestion error: {e!r}",
                extra={"locator": locator},
                exc_info=True,
            )
            return IngestionOutcome(locator=locator, error=INGESTION_FAILED_MESSAGE)

    async def ingest_document(
        self,
        client: AsyncWebClient,
        locator: str,
        file_id: str,
        notify: Notify = no_progress,
    ) -> IngestionOutcome:
        await notify(f"Ingestion started: Processing the document from the URL: {locator}")

        file = await fetch_file_info(client, file_id)
        await notify(f"Downloading the document: {file.name}...")
        content = await download_file(file, self.bot_token, self.download_timeout)

        storage_uri = await self.storage.put_object(
            self.bucket,
            file.name,
            content,
            content_type=file.mimetype or None,
            metadata={"slack_file_id": file_id},
            grounding=True,
        )

        async with self.connection_factory() as conn:
            record = await IngestionStore(conn).append_ingestion_record(
                "document", file_id, file.name, source_url=locator, storage_uri=storage_uri
            )

        await notify(f"File uploaded to storage. Starting summarization for {file.name}...")
        text = normalize_for_llm(
            await asyncio.to_thread(extract_from_file, content, file.name, file.mimetype)
        )
        result = await self.chunked.summarize_long(text)
        if not result.is_ok:
            return IngestionOutcome(
                locator=locator, kind="document", name=file.name, error=result.render()
            )

        async with self.connection_factory() as conn:
            await IngestionStore(conn).attach_summary(record.id, result.text)

        logger.info(
            "Document ingested",
            extra={"file_id": file_id, "storage_uri": storage_uri, "record_id": record.id},
        )
        return IngestionOutcome(locator=locator, kind="document", name=file.name, summary=result.text)

    async def ingest_youtube(
        self,
        url: str,
        notify: Notify = no_progress,
    ) -> IngestionOutcome:
        await notify(f"Ingestion started: Processing the YouTube video: {url}")

        video_id, transcript = await self.transcripts.fetch_transcript_text(url)
        storage_uri = await self.storage.put_object(
            self.bucket,
            transcript_object_key(video_id),
            transcript,
            metadata={"youtube_video_id": video_id},
            grounding=True,
        )

        result = await self.chunked.summarize_long(transcript)
        if not result.is_ok:
            return IngestionOutcome(locator=url, kind="youtube", name=url, error=result.render())

        async with self.connection_factory() as conn:
            record = await IngestionStore(conn).append_ingestion_record(
                "youtube", video_id, url, source_url=url, storage_uri=storage_uri, summary=result.text
            )

        logger.info(
            "Video ingested",
            extra={"video_id": video_id, "storage_uri": storage_uri, "record_id": record.id},
        )
        return IngestionOutcome(locator=url, kind="youtube", name=url, summary=result.text)

    async def list_recent(self, limit: int = 20) -> list[IngestionRecord]:
        async with self.connection_factory() as conn:
            return await IngestionStore(conn).list_ingestion_records(limit)


def format_ingestion_report(outcomes: list[IngestionOutcome]) -> str:
    """Notification listing every success with its summary, then every failure."""
    lines = []
    for outcome in outcomes:
        if not outcome.ok:
            continue
        if outcome.kind == "youtube":
            lines.append(
                "🎉 The YouTube video has been successfully ingested and summarized. "
                f"Here's a brief summary:\n{outcome.summary}"
            )
        else:
            lines.append(
                f"🎉 The document *{outcome.name}* has been successfully ingested and summarized. "
                f"Here's a brief summary:\n{outcome.summary}"
            )

    failures = [o for o in outcomes if not o.ok]
    for outcome in failures:
        lines.append(f":x: An error occurred during ingestion of {outcome.locator}: {outcome.error}")

    if len(failures) < len(outcomes):
        lines.append("Feel free to query @briefops for further details!")

    return "\n\n".join(lines)


def format_ingestion_list(records: list[IngestionRecord]) -> str:
    if not records:
        return ":information_source: Nothing has been ingested yet."

    lines = ["*Recently ingested content:*"]
    for record in records:
        label = "YouTube" if record.kind == "youtube" else "Document"
        status = "summarized" if record.summary else "not summarized"
        lines.append(f"- {label}: {record.name} ({status}, {record.created_at:%Y-%m-%d})")
    return "\n".join(lines)
