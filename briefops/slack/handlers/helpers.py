"""
Slack Handler Helpers.

Argument parsing for the slash commands and reply routing.
"""

import re
from dataclasses import dataclass, field

from briefops.summarization.replies import Reply

DEFAULT_DAYS = 7

_DAYS = re.compile(r"^\d+$")


# Argument Parsing
# =============================================================================


@dataclass
class SummaryArgs:
    """``/briefops [days] [--public|--private] [--youtube]``"""
    days: int = DEFAULT_DAYS
    public: bool = True
    youtube: bool = False


@dataclass
class IngestArgs:
    """``/briefops-ingest <locator>... [--public]`` or ``/briefops-ingest --list``"""
    locators: list[str] = field(default_factory=list)
    public: bool = False
    list_only: bool = False


@dataclass
class SearchArgs:
    """``/briefops-search <query> [--summarize] [--public]``"""
    query: str = ""
    summarize: bool = False
    public: bool = False


def parse_summary_args(text: str) -> SummaryArgs:
    """Parse /briefops arguments; a non-positive day count falls back to the default."""
    args = SummaryArgs()
    for token in (text or "").split():
        if token == "--private":
            args.public = False
        elif token == "--public":
            args.public = True
        elif token == "--youtube":
            args.youtube = True
        elif _DAYS.match(token):
            days = int(token)
            args.days = days if days > 0 else DEFAULT_DAYS
    return args


def parse_ingest_args(text: str) -> IngestArgs:
    args = IngestArgs()
    for token in (text or "").split():
        if token in ("--public", "-public"):
            args.public = True
        elif token == "--list":
            args.list_only = True
        else:
            args.locators.append(token)
    return args


def parse_search_args(text: str) -> SearchArgs:
    """Flags may appear anywhere; everything else forms the query."""
    args = SearchArgs()
    words = []
    for token in (text or "").split():
        if token in ("--summarize", "--summarise"):
            args.summarize = True
        elif token in ("--public", "-public"):
            args.public = True
        else:
            words.append(token)
    args.query = " ".join(words)
    return args


# Reply Routing
# =============================================================================


def response_type(public: bool, reply: Reply | None = None) -> str:
    """``in_channel`` for public replies unless the reply must stay private."""
    if public and not (reply and reply.private):
        return "in_channel"
    return "ephemeral"


async def respond_with(respond, reply: Reply, public: bool) -> None:
    """Send a reply through the command's response URL."""
    await respond(
        text=reply.text,
        response_type=response_type(public, reply),
        unfurl_links=reply.unfurl,
        unfurl_media=reply.unfurl,
    )


async def say_or_respond(say, respond, reply: Reply, public: bool, channel: str) -> None:
    """Post publicly with ``say`` or answer ephemerally with ``respond``."""
    if response_type(public, reply) == "in_channel":
        await say(text=reply.text, channel=channel, unfurl_links=reply.unfurl, unfurl_media=reply.unfurl)
    else:
        await respond(
            text=reply.text,
            response_type="ephemeral",
            unfurl_links=reply.unfurl,
            unfurl_media=reply.unfurl,
        )
