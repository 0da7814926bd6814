"""BriefOps - Slack summarization bot."""

__version__ = "1.0.0"
