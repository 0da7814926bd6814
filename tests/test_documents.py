"""Tests for document extraction and Slack file helpers."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.api_core import exceptions as gcs_exceptions
from slack_sdk.errors import SlackApiError
from youtube_transcript_api import TranscriptsDisabled

from briefops.documents.extractor import (
    ExtractionError,
    extract_csv,
    extract_from_file,
    extract_text,
    normalize_for_llm,
)
from briefops.documents.slack import (
    DownloadError,
    extract_file_id,
    fetch_file_info,
    is_supported,
)
from briefops.documents.storage import ObjectStorage, StorageError
from briefops.documents.youtube import (
    InvalidVideoUrlError,
    NoTranscriptAvailableError,
    TranscriptSegment,
    TranscriptSource,
    join_segments,
    transcript_object_key,
)
from briefops.slack.models import SlackFile


class TestExtractor:
    """Format dispatch and text cleanup."""

    def test_csv_rows(self):
        content = b"name,role\nAda, engineer\n\nBob,pm\n"

        assert extract_csv(content) == "name, role\nAda, engineer\nBob, pm"

    def test_csv_by_mimetype(self):
        assert extract_from_file(b"a,b", "upload", mimetype="text/csv") == "a, b"

    def test_text_by_extension(self):
        assert extract_from_file(b"  hello  ", "notes.md") == "hello"

    def test_latin1_fallback(self):
        assert extract_text("café".encode("latin-1")) == "café"

    def test_unsupported(self):
        with pytest.raises(ExtractionError):
            extract_from_file(b"\x89PNG", "shot.png", mimetype="image/png")

    def test_corrupt_pdf(self):
        with pytest.raises(ExtractionError):
            extract_from_file(b"not a pdf", "report.pdf", mimetype="application/pdf")

    def test_normalize_collapses_whitespace(self):
        assert normalize_for_llm("a   b\n\n\n  c  ") == "a b\nc"

    def test_normalize_truncates(self):
        result = normalize_for_llm("x" * 200, max_length=100)

        assert result.endswith("[Document truncated...]")
        assert result.startswith("x" * 50)


class TestSlackFiles:
    """File id parsing and files.info lookups."""

    def test_file_id_from_permalink(self):
        assert extract_file_id("https://acme.slack.com/files/U01ABC/F0123ABCD/report.pdf") == "F0123ABCD"

    def test_file_id_from_private_url(self):
        url = "https://files.slack.com/files-pri/T0ACME-F0123ABCD/report.pdf"
        assert extract_file_id(url) == "F0123ABCD"

    def test_file_id_from_link_markup(self):
        assert extract_file_id("<https://acme.slack.com/files/U01/F0123ABCD|report>") == "F0123ABCD"

    def test_no_file_id(self):
        assert extract_file_id("https://example.com/page") is None

    def test_supported_types(self):
        assert is_supported(SlackFile(id="F1", mimetype="application/pdf"))
        assert is_supported(SlackFile(id="F3", mimetype="text/csv"))
        assert not is_supported(SlackFile(id="F2", mimetype="image/png"))

    @pytest.mark.asyncio
    async def test_fetch_file_info(self):
        client = MagicMock()
        client.files_info = AsyncMock(return_value={
            "ok": True,
            "file": {"id": "F1", "name": "r.pdf", "mimetype": "application/pdf"},
        })

        file = await fetch_file_info(client, "F1")

        assert file.name == "r.pdf"
        client.files_info.assert_awaited_once_with(file="F1")

    @pytest.mark.asyncio
    async def test_fetch_file_info_not_found(self):
        client = MagicMock()
        client.files_info = AsyncMock(
            side_effect=SlackApiError("file_not_found", {"ok": False, "error": "file_not_found"})
        )

        with pytest.raises(DownloadError):
            await fetch_file_info(client, "F404")

    @pytest.mark.asyncio
    async def test_fetch_file_info_timeout(self):
        client = MagicMock()
        client.files_info = AsyncMock(side_effect=asyncio.TimeoutError())

        with pytest.raises(DownloadError, match="Could not reach Slack"):
            await fetch_file_info(client, "F1")


class TestTranscriptHelpers:

    def test_object_key(self):
        assert transcript_object_key("dQw4w9WgXcQ") == "youtube_transcript_dQw4w9WgXcQ.txt"

    def test_join_segments(self):
        segments = [TranscriptSegment(text="hello", start=0.0), TranscriptSegment(text="world", start=1.2)]

        assert join_segments(segments) == "hello world"


class TestTranscriptSource:
    """Transcript fetching with a stubbed transcript API."""

    @pytest.mark.asyncio
    async def test_fetch_transcript_text(self):
        api = MagicMock()
        api.fetch.return_value = [
            SimpleNamespace(text="never gonna", start=0.0),
            SimpleNamespace(text=" give you up ", start=1.5),
        ]

        video_id, text = await TranscriptSource(api=api).fetch_transcript_text(
            "https://youtu.be/dQw4w9WgXcQ"
        )

        assert video_id == "dQw4w9WgXcQ"
        assert text == "never gonna give you up"
        api.fetch.assert_called_once_with("dQw4w9WgXcQ")

    @pytest.mark.asyncio
    async def test_disabled_transcript(self):
        api = MagicMock()
        api.fetch.side_effect = TranscriptsDisabled("dQw4w9WgXcQ")

        with pytest.raises(NoTranscriptAvailableError) as exc_info:
            await TranscriptSource(api=api).fetch_transcript("dQw4w9WgXcQ")

        assert exc_info.value.video_id == "dQw4w9WgXcQ"

    @pytest.mark.asyncio
    async def test_empty_transcript(self):
        api = MagicMock()
        api.fetch.return_value = []

        with pytest.raises(NoTranscriptAvailableError):
            await TranscriptSource(api=api).fetch_transcript("dQw4w9WgXcQ")

    @pytest.mark.asyncio
    async def test_invalid_url(self):
        with pytest.raises(InvalidVideoUrlError):
            await TranscriptSource(api=MagicMock()).fetch_transcript_text("https://example.com/video")


class TestObjectStorage:
    """Uploads through a stubbed GCS client."""

    @pytest.mark.asyncio
    async def test_put_object_with_grounding(self):
        client = MagicMock()
        blob = client.bucket.return_value.blob.return_value

        uri = await ObjectStorage(client=client).put_object(
            "briefops-docs", "youtube_transcript_x.txt", "hello", grounding=True
        )

        assert uri == "gs://briefops-docs/youtube_transcript_x.txt"
        client.bucket.assert_called_once_with("briefops-docs")
        assert blob.metadata == {"grounding": "true"}
        blob.upload_from_string.assert_called_once_with(
            b"hello", content_type="text/plain; charset=utf-8"
        )

    @pytest.mark.asyncio
    async def test_missing_bucket(self):
        with pytest.raises(StorageError):
            await ObjectStorage(client=MagicMock()).put_object("", "k", b"data")

    @pytest.mark.asyncio
    async def test_upload_failure(self):
        client = MagicMock()
        client.bucket.return_value.blob.return_value.upload_from_string.side_effect = (
            gcs_exceptions.ServiceUnavailable("down")
        )

        with pytest.raises(StorageError):
            await ObjectStorage(client=client).put_object("b", "k", b"data")
