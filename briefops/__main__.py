"""
BriefOps - Slack summarization bot

Entry point: configures logging, opens the database pool, wires services
and runs the Slack app over Socket Mode.
"""

import asyncio
import logging

import structlog

from briefops import __version__
from briefops.config import Settings, get_settings
from briefops.db import IngestionStore, UsageStore, close_db, get_connection, init_db
from briefops.services import build_services
from briefops.slack.app import create_slack_app, start_socket_mode, stop_socket_mode, watch_connection
from briefops.slack.handlers import register_handlers


def configure_logging(level: str) -> None:
    """Configure stdlib logging and structured logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


async def run(settings: Settings) -> None:
    logger = structlog.get_logger()
    logger.info("briefops_starting", version=__version__, environment=settings.environment)

    await init_db(settings.database_url)
    handler = None
    try:
        async with get_connection() as conn:
            await UsageStore(conn).create_tables()
            await IngestionStore(conn).create_tables()

        services = build_services(settings)
        app = create_slack_app(
            settings.slack_bot_token,
            settings.slack_signing_secret,
            timeout=settings.slack_timeout_seconds,
        )
        register_handlers(app, services)

        handler = await start_socket_mode(
            app,
            settings.slack_app_token,
            max_retries=settings.socket_max_retries,
            retry_interval=settings.socket_retry_interval_seconds,
        )
        logger.info("briefops_started", model=services.model_name)
        await watch_connection(
            handler,
            max_retries=settings.socket_max_retries,
            retry_interval=settings.socket_retry_interval_seconds,
            check_interval=settings.socket_check_interval_seconds,
        )
    finally:
        await stop_socket_mode(handler)
        await close_db()


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
