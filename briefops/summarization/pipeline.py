"""Channel and thread summarization flows.

Each flow gathers context from Slack, bounds it, sends it through the
gateway and returns a ``Reply``. Nothing here posts to Slack; handlers do.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from slack_sdk.web.async_client import AsyncWebClient

from briefops.documents import (
    DownloadError,
    ExtractionError,
    InvalidVideoUrlError,
    NoTranscriptAvailableError,
    ObjectStorage,
    StorageError,
    TranscriptSource,
    download_and_extract,
    download_file,
    extract_from_file,
    is_supported,
    normalize_for_llm,
)
from briefops.slack.classifier import classify_messages
from briefops.slack.history import (
    FetchFailedError,
    NotAMemberError,
    fetch_channel_messages,
    fetch_thread_messages,
    format_messages_for_context,
    oldest_timestamp,
)
from briefops.slack.models import SlackFile, SlackMessage
from briefops.summarization.chunking import ChunkedSummarizer
from briefops.summarization.gateway import SummarizationGateway, SummaryResult, SummaryStatus
from briefops.summarization.replies import (
    FETCH_FAILED_MESSAGE,
    NOT_A_MEMBER_MESSAGE,
    Reply,
    daily_limit_message,
    days_limit_message,
    no_messages_message,
)
from briefops.summarization.usage import UsageDecision, UsageLimiter
from briefops.web import WebFetcher, WebFetchError

logger = logging.getLogger(__name__)

DEFAULT_DAYS = 7

# int(16000 tokens / 0.75 tokens per char)
DEFAULT_MAX_INPUT_CHARS = 21333

Notify = Callable[[str], Awaitable[None]]

FILE_ERROR_MESSAGE = "An error occurred while summarizing the file."


async def no_progress(_: str) -> None:
    return None


class SummaryPipeline:
    """Summaries of channel history and of thread content.

    Args:
        gateway: Single-call summarizer.
        chunked: Map-reduce summarizer for long documents and transcripts.
        limiter: Free tier gate for channel summaries.
        web_fetcher: Fetches linked pages.
        transcripts: Fetches YouTube transcripts.
        storage: Object storage for documents found in threads.
        bucket: Storage bucket; uploads are skipped when empty.
        bot_token: Slack bot token for private file downloads.
        download_timeout: File download timeout in seconds.
        max_input_chars: Largest context sent in one call; longer context
            goes through the chunked summarizer.
    """

    def __init__(
        self,
        gateway: SummarizationGateway,
        chunked: ChunkedSummarizer,
        limiter: UsageLimiter,
        web_fetcher: WebFetcher,
        transcripts: TranscriptSource,
        storage: ObjectStorage,
        bucket: str,
        bot_token: str,
        download_timeout: float = 15.0,
        max_input_chars: int = DEFAULT_MAX_INPUT_CHARS,
    ):
        self.gateway = gateway
        self.chunked = chunked
        self.limiter = limiter
        self.web_fetcher = web_fetcher
        self.transcripts = transcripts
        self.storage = storage
        self.bucket = bucket
        self.bot_token = bot_token
        self.download_timeout = download_timeout
        self.max_input_chars = max_input_chars

    async def summarize_context(self, content: str) -> SummaryResult:
        """One call when ``content`` fits, map-reduce otherwise."""
        if len(content) <= self.max_input_chars:
            return await self.gateway.summarize(content)
        logger.info(
            "Context over budget, chunking",
            extra={"chars": len(content), "max_input_chars": self.max_input_chars},
        )
        return await self.chunked.summarize_long(content)

    # -------------------------------------------------------------------------
    # Channel
    # -------------------------------------------------------------------------

    async def summarize_channel(
        self,
        client: AsyncWebClient,
        channel_id: str,
        user_id: str,
        num_days: int = DEFAULT_DAYS,
        now: Optional[float] = None,
    ) -> Reply:
        """Summarize the last ``num_days`` days of a channel.

        The usage check runs before any fetch. The caller commits usage once
        a ``summarized`` reply has been delivered.
        """
        decision = await self.limiter.check_and_reserve(user_id, num_days)
        if decision == UsageDecision.DAYS_LIMIT_EXCEEDED:
            return Reply(days_limit_message(self.limiter.limits.max_days), private=True)
        if decision == UsageDecision.DAILY_LIMIT_EXCEEDED:
            return Reply(daily_limit_message(self.limiter.limits.daily_limit), private=True)

        try:
            messages = await fetch_channel_messages(
                client, channel_id, oldest=oldest_timestamp(num_days, now)
            )
        except NotAMemberError:
            return Reply(NOT_A_MEMBER_MESSAGE, private=True)
        except FetchFailedError:
            return Reply(FETCH_FAILED_MESSAGE, private=True)

        content = format_messages_for_context(messages)
        if not content:
            return Reply(no_messages_message(num_days))

        logger.info(
            "Summarizing channel",
            extra={"channel_id": channel_id, "days": num_days, "messages": len(messages)},
        )
        result = await self.summarize_context(content)
        if result.is_ok:
            return Reply(
                f"*Here is the summary for the past {num_days} day(s):*\n{result.text}",
                summarized=True,
            )
        if result.status == SummaryStatus.EMPTY:
            return Reply(f":information_source: {result.render()}")
        return Reply(
            f":warning: Failed to summarize the messages. {result.render()}",
            private=True,
        )

    # -------------------------------------------------------------------------
    # Thread (mention)
    # -------------------------------------------------------------------------

    async def summarize_thread(
        self,
        client: AsyncWebClient,
        channel_id: str,
        thread_ts: str,
    ) -> Reply:
        """Summarize thread messages together with their PDF/CSV attachments.

        Each attachment is summarized on its own first; unsupported or
        failing files add an informational line instead of aborting.
        """
        try:
            messages = await fetch_thread_messages(client, channel_id, thread_ts)
        except NotAMemberError:
            return Reply(NOT_A_MEMBER_MESSAGE)
        except FetchFailedError:
            return Reply("Failed to fetch messages and files due to an unexpected error.")

        content = format_messages_for_context(messages)
        files = collect_files(messages)
        if not content and not files:
            return Reply(":information_source: No messages or files found in the thread to summarize.")

        parts = [content] if content else []
        for file in files:
            parts.append(await self._summarize_attachment(file))

        result = await self.summarize_context("\n\n".join(parts))
        return Reply(f"*Summary for the thread:*\n{result.render()}", summarized=result.is_ok)

    async def _summarize_attachment(self, file: SlackFile) -> str:
        if not is_supported(file):
            return f":information_source: File type {file.mimetype} is not supported for summarization."

        try:
            text = await download_and_extract(file, self.bot_token, timeout=self.download_timeout)
        except (DownloadError, ExtractionError) as e:
            logger.warning(
                f"Error summarizing file: {e}",
                extra={"file_id": file.id, "mimetype": file.mimetype},
            )
            return FILE_ERROR_MESSAGE

        result = await self.chunked.summarize_long(text)
        if result.status == SummaryStatus.FAILED:
            return FILE_ERROR_MESSAGE
        return f"Summary of {file.name}:\n{result.render()}"

    # -------------------------------------------------------------------------
    # Thread (/briefops inside a thread)
    # -------------------------------------------------------------------------

    async def summarize_thread_content(
        self,
        client: AsyncWebClient,
        channel_id: str,
        thread_ts: str,
        youtube: bool = False,
        notify: Notify = no_progress,
    ) -> Reply:
        """Find the document, video or link a thread is about and summarize it.

        Args:
            client: Slack Web API client
            channel_id: Channel holding the thread
            thread_ts: Root message timestamp
            youtube: Whether YouTube transcript summaries were requested
            notify: Receives progress lines while work is underway
        """
        try:
            messages = await fetch_thread_messages(client, channel_id, thread_ts)
        except NotAMemberError:
            return Reply(NOT_A_MEMBER_MESSAGE, private=True)
        except FetchFailedError:
            return Reply(FETCH_FAILED_MESSAGE, private=True)

        found = classify_messages(messages)

        if found.file is not None:
            await notify(f'Found a document "{found.file.name}". Summarizing...')
            return await self.summarize_document(found.file)

        if found.video_url:
            await notify(f"Found a YouTube link: {found.video_url}")
            if not youtube:
                return Reply(":information_source: Use `--youtube` for YouTube transcript summaries.")
            return await self.summarize_video(found.video_url)

        if found.url:
            await notify(f"Found a URL: {found.url}. Summarizing...")
            return await self.summarize_url(found.url)

        return Reply("No documents or URLs found in this thread to summarize.")

    async def summarize_document(self, file: SlackFile) -> Reply:
        """Download, store, extract and chunk-summarize one Slack file."""
        try:
            content = await download_file(file, self.bot_token, self.download_timeout)
            if self.bucket:
                await self.storage.put_object(
                    self.bucket, file.name, content, content_type=file.mimetype
                )
            text = normalize_for_llm(
                await asyncio.to_thread(extract_from_file, content, file.name, file.mimetype)
            )
        except (DownloadError, StorageError, ExtractionError) as e:
            logger.error(
                f"Error summarizing document: {e}",
                extra={"file_id": file.id, "mimetype": file.mimetype},
            )
            return Reply(":warning: Failed to summarize the document.")

        result = await self.chunked.summarize_long(text)
        if not result.is_ok:
            return Reply(f":warning: Failed to summarize the document. {result.render()}")
        return Reply(f'*Summary of the document "{file.name}":*\n{result.text}', summarized=True)

    async def summarize_video(self, url: str) -> Reply:
        """Chunk-summarize a YouTube video's transcript."""
        try:
            video_id, transcript = await self.transcripts.fetch_transcript_text(url)
        except InvalidVideoUrlError:
            return Reply(":warning: Failed to summarize the YouTube video. Invalid YouTube URL.")
        except NoTranscriptAvailableError:
            return Reply(
                ":warning: Failed to summarize the YouTube video. "
                "No transcript available for this YouTube video."
            )

        result = await self.chunked.summarize_long(transcript)
        if not result.is_ok:
            return Reply(f":warning: Failed to summarize the YouTube video. {result.render()}")
        logger.info("Summarized video", extra={"video_id": video_id})
        return Reply(f"*Summary of the YouTube video {url}:*\n{result.text}", summarized=True)

    async def summarize_url(self, url: str) -> Reply:
        """Fetch a web page and summarize its readable text."""
        try:
            text = await self.web_fetcher.fetch_text(url)
        except WebFetchError:
            return Reply(":warning: Failed to summarize the URL. Failed to fetch the URL content.")

        if not text:
            return Reply(f":information_source: No readable content found at {url}.")

        result = await self.gateway.summarize(text)
        if not result.is_ok:
            return Reply(f":warning: Failed to summarize the URL. {result.render()}")
        return Reply(f"*Summary of the content at {url}:*\n{result.text}", summarized=True)


def collect_files(messages: list[SlackMessage]) -> list[SlackFile]:
    return [f for m in messages for f in m.files]
