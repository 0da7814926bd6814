"""Free tier gating for channel summaries.

The check and the commit are separate calls: handlers check before doing
expensive work and commit only after a summary was delivered. Two
concurrent requests from the same user can both pass the check before
either commits.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Protocol

from briefops.config import UsageLimits
from briefops.db.models import UsageRecord

logger = logging.getLogger(__name__)


class UsageDecision(str, Enum):
    """Outcome of ``UsageLimiter.check_and_reserve``."""
    ALLOWED = "allowed"
    DAILY_LIMIT_EXCEEDED = "daily_limit_exceeded"
    DAYS_LIMIT_EXCEEDED = "days_limit_exceeded"


class UsageBackend(Protocol):
    """Storage operations the limiter needs (see ``briefops.db.UsageStore``)."""

    async def get_usage(self, user_id: str) -> Optional[UsageRecord]: ...

    async def increment_usage(self, user_id: str, date_key: str) -> UsageRecord: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UsageLimiter:
    """Per-user daily quota plus a cap on the requested day window.

    Args:
        store: Usage storage backend.
        limits: Configured quota; values <= 0 disable a check.
        clock: Returns the current time; date keys are UTC calendar days.
    """

    def __init__(
        self,
        store: UsageBackend,
        limits: UsageLimits,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.limits = limits
        self.clock = clock

    @property
    def daily_limit_enabled(self) -> bool:
        return self.limits.daily_limit > 0

    @property
    def max_days_enabled(self) -> bool:
        return self.limits.max_days > 0

    def today_key(self) -> str:
        return self.clock().astimezone(timezone.utc).date().isoformat()

    async def todays_count(self, user_id: str) -> int:
        """Summaries committed today; 0 for a missing or stale record."""
        record = await self.store.get_usage(user_id)
        if record is None or record.date_key != self.today_key():
            return 0
        return record.count

    async def check_and_reserve(self, user_id: str, requested_days: int) -> UsageDecision:
        """Decide whether ``user_id`` may summarize ``requested_days`` days now.

        The day-window check runs first. Nothing is written.
        """
        if self.max_days_enabled and requested_days > self.limits.max_days:
            logger.info(
                "Requested day window over limit",
                extra={
                    "user_id": user_id,
                    "requested_days": requested_days,
                    "max_days": self.limits.max_days,
                },
            )
            return UsageDecision.DAYS_LIMIT_EXCEEDED

        if not self.daily_limit_enabled:
            return UsageDecision.ALLOWED

        count = await self.todays_count(user_id)
        if count >= self.limits.daily_limit:
            logger.info(
                "Daily summary limit reached",
                extra={"user_id": user_id, "count": count, "daily_limit": self.limits.daily_limit},
            )
            return UsageDecision.DAILY_LIMIT_EXCEEDED

        return UsageDecision.ALLOWED

    async def commit(self, user_id: str) -> Optional[UsageRecord]:
        """Count one delivered summary for today.

        No-op (and no storage write) when the daily limit is disabled.
        """
        if not self.daily_limit_enabled:
            return None

        record = await self.store.increment_usage(user_id, self.today_key())
        logger.debug(
            "Usage committed",
            extra={"user_id": user_id, "date_key": record.date_key, "count": record.count},
        )
        return record
