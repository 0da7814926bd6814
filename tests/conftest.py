"""
Pytest configuration and fixtures.

Fakes for Slack, the LLM backend and storage so tests run without
credentials or network access.
"""

from datetime import datetime, timezone
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from briefops.config import UsageLimits
from briefops.db.models import UsageRecord
from briefops.llm import FinishReason, LLMProvider, LLMResult
from briefops.summarization.gateway import SummarizationGateway
from briefops.summarization.usage import UsageLimiter


# =============================================================================
# Builders
# =============================================================================


def llm_result(text: str = "A summary.", finish_reason: FinishReason = FinishReason.STOP, error=None) -> LLMResult:
    """Build an adapter result as the LLM client would return it."""
    return LLMResult(
        text=text,
        finish_reason=finish_reason,
        error=error,
        provider=LLMProvider.GEMINI,
        model="gemini-1.5-flash-002",
    )


def slack_message(ts: str, text: str = "", user: str = "U1", files: Optional[list] = None) -> dict:
    """Raw Slack message payload."""
    msg = {"type": "message", "ts": ts, "user": user, "text": text}
    if files:
        msg["files"] = files
    return msg


def history_page(messages: list[dict], next_cursor: str = "", has_more: bool = False) -> dict:
    """Raw conversations.history / conversations.replies response."""
    return {
        "ok": True,
        "messages": messages,
        "has_more": has_more,
        "response_metadata": {"next_cursor": next_cursor},
    }


# =============================================================================
# Fakes
# =============================================================================


class FakeUsageStore:
    """In-memory usage backend that counts writes."""

    def __init__(self):
        self.records: dict[str, UsageRecord] = {}
        self.writes = 0

    async def get_usage(self, user_id: str) -> Optional[UsageRecord]:
        return self.records.get(user_id)

    async def increment_usage(self, user_id: str, date_key: str) -> UsageRecord:
        self.writes += 1
        current = self.records.get(user_id)
        if current is None or current.date_key != date_key:
            record = UsageRecord(user_id=user_id, date_key=date_key, count=1)
        else:
            record = UsageRecord(user_id=user_id, date_key=date_key, count=current.count + 1)
        self.records[user_id] = record
        return record


class FakeClock:
    """Settable clock for date-dependent tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def usage_store():
    return FakeUsageStore()


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 10, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def limiter(usage_store, clock):
    return UsageLimiter(usage_store, UsageLimits(daily_limit=2, max_days=14), clock=clock)


@pytest.fixture
def mock_llm():
    """LLM client whose invoke returns a fixed summary."""
    llm = MagicMock()
    llm.invoke = AsyncMock(return_value=llm_result())
    return llm


@pytest.fixture
def gateway(mock_llm):
    return SummarizationGateway(mock_llm)


@pytest.fixture
def slack_client():
    """AsyncWebClient stand-in."""
    client = MagicMock()
    client.conversations_history = AsyncMock(return_value=history_page([]))
    client.conversations_replies = AsyncMock(return_value=history_page([]))
    client.files_info = AsyncMock()
    return client
