"""Slack Bolt application with Socket Mode."""

import asyncio
import logging
import sys

from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp
from slack_sdk.web.async_client import AsyncWebClient

logger = logging.getLogger(__name__)


def create_slack_app(bot_token: str, signing_secret: str, timeout: int = 15) -> AsyncApp:
    """Create the Bolt app with a Web API client bounded by ``timeout`` seconds."""
    client = AsyncWebClient(token=bot_token, timeout=timeout)
    app = AsyncApp(client=client, signing_secret=signing_secret)
    logger.info("Slack app initialized")
    return app


async def connect_with_retry(
    handler: AsyncSocketModeHandler,
    max_retries: int = 5,
    retry_interval: float = 5.0,
) -> None:
    """Open the Socket Mode connection, retrying with a fixed backoff.

    The process exits with status 1 once ``max_retries`` attempts have
    failed. Only the event-stream connection is retried here.
    """
    attempts = max(1, max_retries)
    for attempt in range(1, attempts + 1):
        try:
            await handler.connect_async()
            logger.info("Socket Mode connected", extra={"attempt": attempt})
            return
        except Exception as e:
            logger.error(
                f"Socket Mode connection failed: {e}",
                extra={"attempt": attempt, "max_retries": attempts},
            )
            if attempt < attempts:
                await asyncio.sleep(retry_interval)

    logger.critical("Max retries reached. Exiting.")
    sys.exit(1)


async def watch_connection(
    handler: AsyncSocketModeHandler,
    max_retries: int = 5,
    retry_interval: float = 5.0,
    check_interval: float = 10.0,
) -> None:
    """Reconnect through ``connect_with_retry`` whenever the connection drops.

    Runs until cancelled, or until a reconnect exhausts its retries and the
    process exits.
    """
    while True:
        await asyncio.sleep(check_interval)
        if await handler.client.is_connected():
            continue
        logger.warning("Socket Mode connection lost, reconnecting")
        await connect_with_retry(handler, max_retries, retry_interval)


async def start_socket_mode(
    app: AsyncApp,
    app_token: str,
    max_retries: int = 5,
    retry_interval: float = 5.0,
) -> AsyncSocketModeHandler:
    """Connect Socket Mode and return the handler; the connection runs in the background.

    The client's own unbounded reconnect loop is turned off so drops are
    handled by ``watch_connection``.
    """
    handler = AsyncSocketModeHandler(app, app_token)
    handler.client.auto_reconnect_enabled = False
    logger.info("Starting Socket Mode...")
    await connect_with_retry(handler, max_retries, retry_interval)
    return handler


async def stop_socket_mode(handler: AsyncSocketModeHandler | None) -> None:
    """Stop Socket Mode handler."""
    if handler:
        await handler.close_async()
        logger.info("Socket Mode stopped")
