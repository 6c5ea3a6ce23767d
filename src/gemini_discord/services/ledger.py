"""Per-user cooldown and daily quota bookkeeping. Pure in-memory, no I/O."""

import logging
import time
from datetime import datetime
from typing import Dict, Optional
from zoneinfo import ZoneInfo

from ..models.memory import DailyUsage, QuotaStatus

logger = logging.getLogger(__name__)

QUOTA_TIMEZONE = "Asia/Taipei"


class CooldownTracker:
    """Minimum interval between two accepted requests from the same user.

    Check-then-set is not atomic: two requests from one user that both reach
    try_acquire before either records its timestamp will both pass.
    """

    def __init__(self, window_seconds: float = 1.2):
        self.window_seconds = window_seconds
        self._last_request_at: Dict[str, float] = {}

    def try_acquire(self, user_id: str, now: Optional[float] = None) -> bool:
        """Record the request and return True, or return False inside the window."""
        now = time.time() if now is None else now
        last = self._last_request_at.get(user_id)
        if last is not None and now - last < self.window_seconds:
            return False
        self._last_request_at[user_id] = now
        return True


class DailyQuota:
    """Per-user request counter bucketed by calendar day in a fixed timezone."""

    def __init__(self, limit: int = 20, timezone: str = QUOTA_TIMEZONE):
        self.limit = limit
        self.tz = ZoneInfo(timezone)
        self._usage: Dict[str, DailyUsage] = {}

    def day_key(self, now: Optional[datetime] = None) -> str:
        """Calendar date (YYYY-MM-DD) in the quota timezone."""
        if now is None:
            now = datetime.now(self.tz)
        elif now.tzinfo is None:
            raise ValueError("day_key needs a timezone-aware datetime")
        return now.astimezone(self.tz).date().isoformat()

    def _current(self, user_id: str, day_key: str) -> DailyUsage:
        usage = self._usage.get(user_id)
        if usage is None or usage.day_key != day_key:
            usage = DailyUsage(day_key=day_key)
            self._usage[user_id] = usage
        return usage

    def check(self, user_id: str, now: Optional[datetime] = None) -> QuotaStatus:
        """Report whether the user may make another request today."""
        key = self.day_key(now)
        usage = self._current(user_id, key)
        left = max(0, self.limit - usage.count)
        return QuotaStatus(ok=left > 0, left=left, day_key=key)

    def increment(self, user_id: str, now: Optional[datetime] = None) -> int:
        """Count one successful reply; returns today's total."""
        usage = self._current(user_id, self.day_key(now))
        usage.count += 1
        return usage.count

    def usage_for(self, user_id: str) -> Optional[DailyUsage]:
        return self._usage.get(user_id)
