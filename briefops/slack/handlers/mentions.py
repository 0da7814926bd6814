"""@briefops mention handler: summarize the thread the bot was mentioned in."""

import structlog
from slack_sdk.web.async_client import AsyncWebClient

from briefops.services import Services
from briefops.summarization.replies import GENERIC_ERROR_MESSAGE

logger = structlog.get_logger()


async def handle_mention(event: dict, say, client: AsyncWebClient, services: Services) -> None:
    """Reply in the thread with a summary of its messages and attachments.

    A mention outside a thread summarizes the thread rooted at the mention
    itself.
    """
    channel_id = event.get("channel", "")
    thread_ts = event.get("thread_ts") or event.get("ts", "")

    logger.info("mention_received", channel=channel_id, thread_ts=thread_ts, user=event.get("user"))

    try:
        reply = await services.pipeline.summarize_thread(client, channel_id, thread_ts)
        await say(text=reply.text, thread_ts=thread_ts)
    except Exception as e:
        logger.error("mention_failed", error=str(e), channel=channel_id, exc_info=True)
        await say(text=GENERIC_ERROR_MESSAGE, thread_ts=thread_ts)
