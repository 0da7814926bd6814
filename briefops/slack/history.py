"""Conversation history fetching service for Slack channels and threads.

Follows Slack's cursor pagination until the API reports no further pages and
returns messages in chronological order. Errors are raised, not swallowed:
``NotAMemberError`` when the bot is not in the channel, ``FetchFailedError``
for anything else.
"""

import logging
import math
import time
from typing import AsyncIterator, Awaitable, Callable, Optional

from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from briefops.slack.models import FetchPage, SlackMessage

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 200

NOT_A_MEMBER_ERRORS = {"not_in_channel"}


class FetchFailedError(Exception):
    """Slack history could not be fetched."""

    pass


class NotAMemberError(FetchFailedError):
    """The bot lacks access to the requested channel."""

    def __init__(self, channel_id: str):
        self.channel_id = channel_id
        super().__init__(f"Not a member of channel {channel_id}")


PageFn = Callable[[Optional[str]], Awaitable[FetchPage]]


def oldest_timestamp(num_days: int, now: float | None = None) -> int:
    """Unix timestamp ``num_days`` before ``now`` (whole seconds)."""
    now = time.time() if now is None else now
    return math.floor(now - num_days * 86400)


def _to_page(result) -> FetchPage:
    messages = result.get("messages") or []
    cursor = (result.get("response_metadata") or {}).get("next_cursor") or None
    return FetchPage(
        items=[SlackMessage.from_api(m) for m in messages],
        cursor=cursor,
        has_more=bool(result.get("has_more")),
    )


def _raise_for(e: Exception, channel_id: str, **context) -> None:
    """Translate a Slack/transport exception into the history error kinds."""
    if isinstance(e, SlackApiError):
        error_code = e.response.get("error", "unknown")
        if error_code in NOT_A_MEMBER_ERRORS:
            logger.info(
                "Bot is not a member of the channel",
                extra={"channel_id": channel_id, **context},
            )
            raise NotAMemberError(channel_id) from e
        if error_code == "ratelimited":
            retry_after = e.response.headers.get("Retry-After", "unknown")
            logger.warning(
                f"Rate limited fetching history, retry after {retry_after}s",
                extra={"channel_id": channel_id, "retry_after": retry_after, **context},
            )
        else:
            logger.error(
                f"Slack API error fetching history: {error_code}",
                extra={"channel_id": channel_id, "error": error_code, **context},
            )
        raise FetchFailedError(f"Slack API error: {error_code}") from e

    logger.error(
        f"Unexpected error fetching history: {e}",
        extra={"channel_id": channel_id, **context},
        exc_info=True,
    )
    raise FetchFailedError(str(e)) from e


async def fetch_history_page(
    client: AsyncWebClient,
    channel_id: str,
    oldest: float | None = None,
    cursor: str | None = None,
    limit: int = MAX_PAGE_SIZE,
) -> FetchPage:
    """Fetch one page of channel history (newest first)."""
    kwargs = {"channel": channel_id, "limit": min(limit, MAX_PAGE_SIZE)}
    if oldest is not None:
        kwargs["oldest"] = str(oldest)
    if cursor:
        kwargs["cursor"] = cursor

    try:
        result = await client.conversations_history(**kwargs)
    except Exception as e:
        _raise_for(e, channel_id, cursor=cursor)
    return _to_page(result)


async def fetch_thread_page(
    client: AsyncWebClient,
    channel_id: str,
    thread_ts: str,
    cursor: str | None = None,
    limit: int = MAX_PAGE_SIZE,
) -> FetchPage:
    """Fetch one page of thread replies (oldest first, root message included)."""
    kwargs = {"channel": channel_id, "ts": thread_ts, "limit": min(limit, MAX_PAGE_SIZE)}
    if cursor:
        kwargs["cursor"] = cursor

    try:
        result = await client.conversations_replies(**kwargs)
    except Exception as e:
        _raise_for(e, channel_id, thread_ts=thread_ts, cursor=cursor)
    return _to_page(result)


async def iter_pages(fetch_page: PageFn) -> AsyncIterator[FetchPage]:
    """Follow continuation cursors until the source reports no more pages.

    Pages are requested strictly one after another. A page that claims
    ``has_more`` but carries no cursor ends the loop.
    """
    cursor = None
    while True:
        page = await fetch_page(cursor)
        yield page
        if not page.has_more or not page.cursor:
            break
        cursor = page.cursor


async def collect_messages(
    fetch_page: PageFn,
    newest_first: bool,
    oldest: float | None = None,
) -> list[SlackMessage]:
    """Concatenate every page and return the messages oldest-first.

    Args:
        fetch_page: Returns the page for a cursor (None for the first page)
        newest_first: Whether the source delivers newest messages first
        oldest: Drop messages with a timestamp before this bound; the API's
            own bound is not relied on

    Returns:
        Messages in chronological order
    """
    messages: list[SlackMessage] = []
    pages = 0
    async for page in iter_pages(fetch_page):
        pages += 1
        messages.extend(page.items)

    if newest_first:
        messages.reverse()

    if oldest is not None:
        messages = [m for m in messages if m.timestamp >= oldest]

    logger.debug(
        f"Fetched {len(messages)} messages",
        extra={"pages": pages, "oldest": oldest},
    )
    return messages


async def fetch_channel_messages(
    client: AsyncWebClient,
    channel_id: str,
    oldest: float | None = None,
    page_size: int = MAX_PAGE_SIZE,
) -> list[SlackMessage]:
    """Fetch all channel messages since ``oldest``, chronologically.

    Raises:
        NotAMemberError: The bot is not in the channel
        FetchFailedError: Any other Slack or transport error
    """
    async def page(cursor: str | None) -> FetchPage:
        return await fetch_history_page(client, channel_id, oldest, cursor, page_size)

    return await collect_messages(page, newest_first=True, oldest=oldest)


async def fetch_thread_messages(
    client: AsyncWebClient,
    channel_id: str,
    thread_ts: str,
    page_size: int = MAX_PAGE_SIZE,
) -> list[SlackMessage]:
    """Fetch every message in a thread, root first.

    Raises:
        NotAMemberError: The bot is not in the channel
        FetchFailedError: Any other Slack or transport error
    """
    async def page(cursor: str | None) -> FetchPage:
        return await fetch_thread_page(client, channel_id, thread_ts, cursor, page_size)

    return await collect_messages(page, newest_first=False)


def format_messages_for_context(
    messages: list[SlackMessage],
    include_timestamps: bool = False,
) -> str:
    """Format Slack messages for LLM context injection.

    Args:
        messages: Messages in the order they should appear
        include_timestamps: Whether to include timestamps in output

    Returns:
        One message per line, "[user] message" or "[user at ts] message".
        Messages without text are skipped.

    Example:
        >>> msgs = [SlackMessage(ts="1", user="U123", text="Hello")]
        >>> format_messages_for_context(msgs)
        '[U123] Hello'
    """
    lines = []
    for msg in messages:
        if not msg.text:
            continue

        user = msg.user or "unknown"
        if include_timestamps:
            lines.append(f"[{user} at {msg.ts}] {msg.text}")
        else:
            lines.append(f"[{user}] {msg.text}")

    return "\n".join(lines)
