"""User-facing reply texts."""

from dataclasses import dataclass

NOT_A_MEMBER_MESSAGE = (
    "It looks like I'm not a member of this channel. "
    "Please invite me by typing: `/invite @briefops`."
)
FETCH_FAILED_MESSAGE = "Failed to fetch messages due to an unexpected error."
GENERIC_ERROR_MESSAGE = "An error occurred while processing your request."


@dataclass(frozen=True)
class Reply:
    """Text to post back plus how to post it.

    Attributes:
        text: Message body (Slack mrkdwn)
        summarized: A summary was produced; channel summaries count toward
            the daily quota only when this is set
        private: Always answer ephemerally, whatever the visibility flag
        unfurl: Let Slack unfurl links in the message
    """
    text: str
    summarized: bool = False
    private: bool = False
    unfurl: bool = True


def days_limit_message(max_days: int) -> str:
    return f":warning: Free users can summarize up to {max_days} days."


def daily_limit_message(daily_limit: int) -> str:
    return f":warning: You have reached your daily summary limit of {daily_limit} summaries."


def no_messages_message(num_days: int) -> str:
    return f":information_source: No messages found in the past {num_days} day(s) to summarize."
