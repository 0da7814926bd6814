"""
Slack Handlers - Slash command and mention registration.

Routes incoming commands and events to the summarization flows.
"""

from slack_bolt.async_app import AsyncApp

from briefops.services import Services
from briefops.slack.handlers.commands import (
    handle_briefops_command,
    handle_ingest_command,
    handle_search_command,
    handle_status_command,
)
from briefops.slack.handlers.mentions import handle_mention


def register_handlers(app: AsyncApp, services: Services) -> None:
    """
    Register all command and event handlers with the Slack app.

    Args:
        app: Slack Bolt async app instance.
        services: Components built at startup, shared by every handler.
    """
    # =========================================================================
    # Slash Commands
    # =========================================================================

    @app.command("/briefops")
    async def briefops_command(ack, command, respond, say, client) -> None:
        await ack()
        await handle_briefops_command(command, respond, say, client, services)

    @app.command("/briefops-ingest")
    async def ingest_command(ack, command, respond, say, client) -> None:
        await ack()
        await handle_ingest_command(command, respond, say, client, services)

    @app.command("/briefops-search")
    async def search_command(ack, command, respond, say) -> None:
        await ack()
        await handle_search_command(command, respond, say, services)

    @app.command("/briefops-status")
    async def status_command(ack, command, respond) -> None:
        await ack()
        await handle_status_command(command, respond, services)

    # =========================================================================
    # Events
    # =========================================================================

    @app.event("app_mention")
    async def mention_event(event, say, client) -> None:
        await handle_mention(event, say, client, services)

    @app.event("message")
    async def message_event() -> None:
        # Plain messages are ignored; mentions arrive as app_mention.
        pass
