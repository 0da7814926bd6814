"""Tests for document and video ingestion."""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import psycopg
import pytest

from briefops.db.models import IngestionRecord
from briefops.documents import DownloadError, NoTranscriptAvailableError, StorageError
from briefops.summarization.chunking import ChunkedSummarizer
from briefops.summarization.ingest import (
    EXTRACTION_FAILED_MESSAGE,
    INGESTION_FAILED_MESSAGE,
    INVALID_LOCATOR_MESSAGE,
    IngestionOutcome,
    IngestionService,
    format_ingestion_list,
    format_ingestion_report,
)

CREATED = datetime(2024, 10, 1, 9, 30, tzinfo=timezone.utc)
DOC_URL = "https://acme.slack.com/files/U01/F0123ABCD/report.csv"
VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def record(kind="document", summary=None, name="report.csv", record_id=1) -> IngestionRecord:
    return IngestionRecord(
        id=record_id,
        kind=kind,
        source_id="F0123ABCD",
        name=name,
        summary=summary,
        created_at=CREATED,
    )


@asynccontextmanager
async def fake_connection():
    yield MagicMock()


@pytest.fixture
def store():
    """IngestionStore replacement shared by every connection."""
    fake = MagicMock()
    fake.append_ingestion_record = AsyncMock(return_value=record())
    fake.attach_summary = AsyncMock(return_value=record(summary="A summary."))
    fake.list_ingestion_records = AsyncMock(return_value=[])
    with patch("briefops.summarization.ingest.IngestionStore", return_value=fake):
        yield fake


@pytest.fixture
def storage():
    fake = MagicMock()
    fake.put_object = AsyncMock(side_effect=lambda bucket, key, *a, **kw: f"gs://{bucket}/{key}")
    return fake


@pytest.fixture
def transcripts():
    source = MagicMock()
    source.fetch_transcript_text = AsyncMock(return_value=("dQw4w9WgXcQ", "never gonna give you up"))
    return source


@pytest.fixture
def service(gateway, storage, transcripts):
    return IngestionService(
        chunked=ChunkedSummarizer(gateway, chunk_word_count=100),
        storage=storage,
        bucket="briefops-docs",
        transcripts=transcripts,
        bot_token="xoxb-test",
        connection_factory=fake_connection,
    )


@pytest.fixture
def slack_file_client(slack_client):
    slack_client.files_info.return_value = {
        "ok": True,
        "file": {
            "id": "F0123ABCD",
            "name": "report.csv",
            "mimetype": "text/csv",
            "url_private": "https://files.slack.com/report.csv",
        },
    }
    return slack_client


class TestIngestDocument:
    """Slack file locators."""

    @pytest.mark.asyncio
    async def test_document(self, service, slack_file_client, storage, store):
        with patch("briefops.summarization.ingest.download_file", AsyncMock(return_value=b"a,b\n1,2")):
            outcome = await service.ingest(slack_file_client, f"<{DOC_URL}>")

        assert outcome == IngestionOutcome(
            locator=DOC_URL, kind="document", name="report.csv", summary="A summary."
        )
        storage.put_object.assert_awaited_once_with(
            "briefops-docs",
            "report.csv",
            b"a,b\n1,2",
            content_type="text/csv",
            metadata={"slack_file_id": "F0123ABCD"},
            grounding=True,
        )
        store.append_ingestion_record.assert_awaited_once_with(
            "document", "F0123ABCD", "report.csv",
            source_url=DOC_URL, storage_uri="gs://briefops-docs/report.csv",
        )
        store.attach_summary.assert_awaited_once_with(1, "A summary.")

    @pytest.mark.asyncio
    async def test_progress_notifications(self, service, slack_file_client, store):
        notify = AsyncMock()

        with patch("briefops.summarization.ingest.download_file", AsyncMock(return_value=b"a,b")):
            await service.ingest(slack_file_client, DOC_URL, notify)

        messages = [call.args[0] for call in notify.await_args_list]
        assert messages[0] == f"Ingestion started: Processing the document from the URL: {DOC_URL}"
        assert messages[1] == "Downloading the document: report.csv..."

    @pytest.mark.asyncio
    async def test_download_failure(self, service, slack_file_client, storage, store):
        with patch(
            "briefops.summarization.ingest.download_file",
            AsyncMock(side_effect=DownloadError("Failed to download the file from Slack.")),
        ):
            outcome = await service.ingest(slack_file_client, DOC_URL)

        assert outcome.error == "Failed to download the file from Slack."
        storage.put_object.assert_not_awaited()
        store.append_ingestion_record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_storage_failure(self, service, slack_file_client, storage, store):
        storage.put_object.side_effect = StorageError("Upload of report.csv failed")

        with patch("briefops.summarization.ingest.download_file", AsyncMock(return_value=b"a,b")):
            outcome = await service.ingest(slack_file_client, DOC_URL)

        assert not outcome.ok
        store.append_ingestion_record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_database_failure(self, service, slack_file_client, store):
        store.append_ingestion_record.side_effect = psycopg.OperationalError("connection lost")

        with patch("briefops.summarization.ingest.download_file", AsyncMock(return_value=b"a,b")):
            outcome = await service.ingest(slack_file_client, DOC_URL)

        assert outcome.error == "Could not record the ingestion."

    @pytest.mark.asyncio
    async def test_extraction_failure_hides_parser_detail(self, service, slack_file_client, store):
        slack_file_client.files_info.return_value["file"]["name"] = "report.pdf"
        slack_file_client.files_info.return_value["file"]["mimetype"] = "application/pdf"

        with patch("briefops.summarization.ingest.download_file", AsyncMock(return_value=b"not a pdf")):
            outcome = await service.ingest(slack_file_client, DOC_URL)

        assert outcome.error == EXTRACTION_FAILED_MESSAGE
        store.attach_summary.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_locator(self, service, slack_client):
        outcome = await service.ingest(slack_client, "https://example.com/page")

        assert outcome.error == INVALID_LOCATOR_MESSAGE
        slack_client.files_info.assert_not_awaited()


class TestIngestYoutube:
    """YouTube locators."""

    @pytest.mark.asyncio
    async def test_video(self, service, slack_client, storage, store):
        outcome = await service.ingest(slack_client, VIDEO_URL)

        assert outcome.ok
        assert outcome.kind == "youtube"
        storage.put_object.assert_awaited_once_with(
            "briefops-docs",
            "youtube_transcript_dQw4w9WgXcQ.txt",
            "never gonna give you up",
            metadata={"youtube_video_id": "dQw4w9WgXcQ"},
            grounding=True,
        )
        store.append_ingestion_record.assert_awaited_once_with(
            "youtube", "dQw4w9WgXcQ", VIDEO_URL,
            source_url=VIDEO_URL,
            storage_uri="gs://briefops-docs/youtube_transcript_dQw4w9WgXcQ.txt",
            summary="A summary.",
        )

    @pytest.mark.asyncio
    async def test_no_transcript(self, service, slack_client, transcripts, store):
        transcripts.fetch_transcript_text.side_effect = NoTranscriptAvailableError("dQw4w9WgXcQ")

        outcome = await service.ingest(slack_client, VIDEO_URL)

        assert outcome.error == "No transcript available for this YouTube video."
        store.append_ingestion_record.assert_not_awaited()


class TestIngestMany:

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_others(self, service, slack_client, store):
        outcomes = await service.ingest_many(slack_client, ["not-a-link", VIDEO_URL])

        assert [o.ok for o in outcomes] == [False, True]

    @pytest.mark.asyncio
    async def test_files_info_timeout_keeps_earlier_outcomes(self, service, slack_client, store):
        slack_client.files_info.side_effect = asyncio.TimeoutError()

        outcomes = await service.ingest_many(slack_client, [VIDEO_URL, DOC_URL])

        assert [o.ok for o in outcomes] == [True, False]
        assert outcomes[0].summary == "A summary."
        assert outcomes[1].error == "Could not reach Slack to look up the file."

    @pytest.mark.asyncio
    async def test_unexpected_error_is_reported_per_source(
        self, service, slack_file_client, transcripts, store
    ):
        transcripts.fetch_transcript_text.side_effect = ConnectionError("reset")

        with patch("briefops.summarization.ingest.download_file", AsyncMock(return_value=b"a,b")):
            outcomes = await service.ingest_many(slack_file_client, [VIDEO_URL, DOC_URL])

        assert outcomes[0] == IngestionOutcome(locator=VIDEO_URL, error=INGESTION_FAILED_MESSAGE)
        assert outcomes[1].ok
        assert outcomes[1].name == "report.csv"

    @pytest.mark.asyncio
    async def test_list_recent(self, service, store):
        store.list_ingestion_records.return_value = [record()]

        records = await service.list_recent(5)

        assert len(records) == 1
        store.list_ingestion_records.assert_awaited_once_with(5)


class TestFormatting:
    """Report and listing texts."""

    def test_report(self):
        text = format_ingestion_report([
            IngestionOutcome(locator=DOC_URL, kind="document", name="report.csv", summary="S1"),
            IngestionOutcome(locator="bad", error=INVALID_LOCATOR_MESSAGE),
        ])

        assert text.startswith("🎉 The document *report.csv* has been successfully ingested")
        assert f":x: An error occurred during ingestion of bad: {INVALID_LOCATOR_MESSAGE}" in text
        assert text.endswith("Feel free to query @briefops for further details!")

    def test_report_all_failed(self):
        text = format_ingestion_report([IngestionOutcome(locator="bad", error="nope")])

        assert "Feel free" not in text

    def test_list(self):
        text = format_ingestion_list([
            record(summary="S"),
            record(kind="youtube", name=VIDEO_URL, record_id=2),
        ])

        assert text.splitlines() == [
            "*Recently ingested content:*",
            "- Document: report.csv (summarized, 2024-10-01)",
            f"- YouTube: {VIDEO_URL} (not summarized, 2024-10-01)",
        ]

    def test_empty_list(self):
        assert "Nothing has been ingested" in format_ingestion_list([])
