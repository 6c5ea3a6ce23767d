"""Unit tests for cooldown and daily quota bookkeeping."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from gemini_discord.services.ledger import CooldownTracker, DailyQuota

TAIPEI = ZoneInfo("Asia/Taipei")


class TestCooldownTracker:
    def test_first_request_passes(self):
        tracker = CooldownTracker(window_seconds=1.2)
        assert tracker.try_acquire("u1", now=100.0) is True

    def test_request_inside_window_is_dropped(self):
        tracker = CooldownTracker(window_seconds=1.2)
        assert tracker.try_acquire("u1", now=100.0)
        assert tracker.try_acquire("u1", now=101.0) is False

    def test_dropped_request_does_not_extend_window(self):
        tracker = CooldownTracker(window_seconds=1.2)
        tracker.try_acquire("u1", now=100.0)
        tracker.try_acquire("u1", now=101.0)
        assert tracker.try_acquire("u1", now=101.3) is True

    def test_users_are_independent(self):
        tracker = CooldownTracker(window_seconds=1.2)
        assert tracker.try_acquire("u1", now=100.0)
        assert tracker.try_acquire("u2", now=100.1)


class TestDailyQuota:
    def test_day_key_uses_taipei_calendar(self):
        quota = DailyQuota()
        # 2024-03-01 17:00 UTC is already 2024-03-02 in Taipei
        now = datetime(2024, 3, 1, 17, 0, tzinfo=timezone.utc)
        assert quota.day_key(now) == "2024-03-02"

    def test_day_key_rejects_naive_datetime(self):
        with pytest.raises(ValueError):
            DailyQuota().day_key(datetime(2024, 3, 1, 12, 0))

    def test_fresh_user_has_full_quota(self):
        quota = DailyQuota(limit=20)
        status = quota.check("u1", now=datetime(2024, 3, 1, 9, tzinfo=TAIPEI))
        assert status.ok is True
        assert status.left == 20
        assert status.day_key == "2024-03-01"

    def test_limit_reached(self):
        quota = DailyQuota(limit=20)
        now = datetime(2024, 3, 1, 9, tzinfo=TAIPEI)
        for _ in range(20):
            assert quota.check("u1", now=now).ok
            quota.increment("u1", now=now)

        status = quota.check("u1", now=now)
        assert status.ok is False
        assert status.left == 0

    def test_new_day_resets_count(self):
        quota = DailyQuota(limit=2)
        day1 = datetime(2024, 3, 1, 23, 59, tzinfo=TAIPEI)
        day2 = datetime(2024, 3, 2, 0, 1, tzinfo=TAIPEI)
        quota.increment("u1", now=day1)
        quota.increment("u1", now=day1)
        assert quota.check("u1", now=day1).ok is False

        status = quota.check("u1", now=day2)
        assert status.ok is True
        assert status.left == 2
        assert quota.usage_for("u1").day_key == "2024-03-02"

    def test_increment_returns_running_total(self):
        quota = DailyQuota(limit=5)
        now = datetime(2024, 3, 1, 9, tzinfo=TAIPEI)
        assert quota.increment("u1", now=now) == 1
        assert quota.increment("u1", now=now) == 2
