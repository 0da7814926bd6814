"""Slack handlers package."""

from briefops.slack.handlers.helpers import (
    parse_ingest_args,
    parse_search_args,
    parse_summary_args,
)
from briefops.slack.handlers.main import register_handlers

__all__ = [
    # Main handler registration
    "register_handlers",
    # Argument parsing
    "parse_summary_args",
    "parse_ingest_args",
    "parse_search_args",
]
