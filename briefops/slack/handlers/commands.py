"""Slash command handlers: /briefops, /briefops-ingest, /briefops-search, /briefops-status.

Handlers are acknowledged by the router before they run. Every handler
turns unexpected exceptions into a generic ephemeral reply; details go to
the log only.
"""

import structlog
from slack_sdk.web.async_client import AsyncWebClient

from briefops.services import Services
from briefops.slack.handlers.helpers import (
    parse_ingest_args,
    parse_search_args,
    parse_summary_args,
    respond_with,
    say_or_respond,
)
from briefops.summarization.ingest import format_ingestion_list, format_ingestion_report
from briefops.summarization.replies import GENERIC_ERROR_MESSAGE, Reply
from briefops.summarization.search import format_results
from briefops.web import WebSearchError

logger = structlog.get_logger()

INGEST_USAGE = (
    "Usage: `/briefops-ingest <slack-file-url|youtube-url> [...] [--public]` "
    "or `/briefops-ingest --list`"
)
SEARCH_ERROR_MESSAGE = "An error occurred while performing the search. Please try again later."


async def handle_briefops_command(
    command: dict,
    respond,
    say,
    client: AsyncWebClient,
    services: Services,
) -> None:
    """Handle /briefops.

    Inside a thread the thread's document, video or link is summarized and
    the answer goes to the thread. Elsewhere the channel's last N days are
    summarized, gated by the free tier quota.
    """
    channel_id = command.get("channel_id", "")
    user_id = command.get("user_id", "")
    thread_ts = command.get("thread_ts")
    args = parse_summary_args(command.get("text", ""))

    logger.info(
        "briefops_command",
        channel=channel_id,
        user=user_id,
        days=args.days,
        public=args.public,
        in_thread=bool(thread_ts),
    )

    try:
        if thread_ts:
            async def notify(text: str) -> None:
                await say(text=text, thread_ts=thread_ts)

            reply = await services.pipeline.summarize_thread_content(
                client, channel_id, thread_ts, youtube=args.youtube, notify=notify
            )
            if reply.private:
                await respond_with(respond, reply, public=False)
            else:
                await say(text=reply.text, thread_ts=thread_ts)
            return

        reply = await services.pipeline.summarize_channel(client, channel_id, user_id, args.days)
        await respond_with(respond, reply, public=args.public)
        if reply.summarized:
            await services.limiter.commit(user_id)

    except Exception as e:
        logger.error("briefops_command_failed", error=str(e), channel=channel_id, exc_info=True)
        await respond(text=GENERIC_ERROR_MESSAGE, response_type="ephemeral")


async def handle_ingest_command(
    command: dict,
    respond,
    say,
    client: AsyncWebClient,
    services: Services,
) -> None:
    """Handle /briefops-ingest: ingest documents and videos, or list recent ingestions."""
    channel_id = command.get("channel_id", "")
    args = parse_ingest_args(command.get("text", ""))

    logger.info(
        "ingest_command",
        channel=channel_id,
        user=command.get("user_id"),
        locators=len(args.locators),
        list_only=args.list_only,
    )

    try:
        if args.list_only:
            records = await services.ingestion.list_recent()
            await respond(text=format_ingestion_list(records), response_type="ephemeral")
            return

        if not args.locators:
            await respond(text=INGEST_USAGE, response_type="ephemeral")
            return

        async def notify(text: str) -> None:
            await respond(text=text, response_type="ephemeral")

        outcomes = await services.ingestion.ingest_many(client, args.locators, notify)
        report = Reply(format_ingestion_report(outcomes))
        await say_or_respond(say, respond, report, public=args.public, channel=channel_id)

    except Exception as e:
        logger.error("ingest_command_failed", error=str(e), channel=channel_id, exc_info=True)
        await respond(
            text=":x: An error occurred during ingestion. Please check the logs for more details.",
            response_type="ephemeral",
        )


async def handle_search_command(
    command: dict,
    respond,
    say,
    services: Services,
) -> None:
    """Handle /briefops-search: list results, or summarize them with --summarize."""
    channel_id = command.get("channel_id", "")
    args = parse_search_args(command.get("text", ""))

    async def send(reply: Reply) -> None:
        await say_or_respond(say, respond, reply, public=args.public, channel=channel_id)

    if not args.query:
        await respond(text="Please provide a search query.", response_type="ephemeral")
        return

    if services.search is None:
        await respond(text="Web search is not configured for this workspace.", response_type="ephemeral")
        return

    logger.info("search_command", channel=channel_id, query=args.query, summarize=args.summarize)

    try:
        results = await services.search.search(args.query)
    except WebSearchError as e:
        logger.error("search_failed", error=str(e), query=args.query)
        await send(Reply(SEARCH_ERROR_MESSAGE))
        return

    try:
        if not results or not args.summarize:
            await send(Reply(format_results(args.query, results)))
            return

        await send(Reply("Summarizing top results, please wait..."))
        reply = await services.search.summarize_results(args.query, results)
        await send(reply)

    except Exception as e:
        logger.error("search_command_failed", error=str(e), query=args.query, exc_info=True)
        await send(Reply(SEARCH_ERROR_MESSAGE))


async def handle_status_command(command: dict, respond, services: Services) -> None:
    """Handle /briefops-status: today's usage and the configured limits."""
    user_id = command.get("user_id", "")
    limits = services.limiter.limits

    try:
        used = await services.limiter.todays_count(user_id)
    except Exception as e:
        logger.error("status_command_failed", error=str(e), user=user_id, exc_info=True)
        await respond(text=GENERIC_ERROR_MESSAGE, response_type="ephemeral")
        return

    daily = str(limits.daily_limit) if limits.daily_limit > 0 else "unlimited"
    max_days = str(limits.max_days) if limits.max_days > 0 else "unlimited"
    search = "enabled" if services.search is not None else "not configured"

    text = "\n".join([
        "*BriefOps status*",
        f"- Summaries used today: {used} / {daily}",
        f"- Maximum days per channel summary: {max_days}",
        f"- Model: `{services.model_name}`",
        f"- Web search: {search}",
    ])
    await respond(text=text, response_type="ephemeral")
