"""Tests for focus-time totals and day streaks (flowblock/actions/stats.py)."""

import pytest

from flowblock.actions.stats import StatsAggregator
from flowblock.models import FocusSession, SessionType


@pytest.fixture()
def aggregator(repo):
    return StatsAggregator(repo)


def _session(start: float, minutes: float, duration: float = 25, type=SessionType.FOCUS):
    return FocusSession(
        id=f"s-{start}",
        start_time=start,
        duration=duration,
        type=type,
        end_time=start + minutes * 60,
        completed=True,
    )


class TestStreaks:
    def test_consecutive_days_then_a_gap(self, aggregator, clock):
        day = 86400
        today = clock.now

        aggregator.record_completion(_session(today, 25))
        stats = aggregator.record_completion(_session(today + day, 25))
        assert stats.current_streak == 2

        stats = aggregator.record_completion(_session(today + 3 * day, 25))
        assert stats.current_streak == 1
        assert stats.longest_streak == 2

    def test_same_day_does_not_extend(self, aggregator, clock):
        aggregator.record_completion(_session(clock.now, 25))
        stats = aggregator.record_completion(_session(clock.now + 3600, 25))
        assert stats.current_streak == 1
        assert stats.sessions_completed == 2

    def test_first_session_starts_streak(self, aggregator, clock):
        stats = aggregator.record_completion(_session(clock.now, 25))
        assert stats.current_streak == 1
        assert stats.longest_streak == 1
        assert stats.last_session_date == "2024-06-12"


class TestFocusTime:
    def test_credits_actual_elapsed_minutes(self, aggregator, clock):
        stats = aggregator.record_completion(_session(clock.now, minutes=24, duration=25))
        assert stats.total_focus_time == 24

    def test_elapsed_is_rounded(self, aggregator, clock):
        stats = aggregator.record_completion(_session(clock.now, minutes=24.6, duration=25))
        assert stats.total_focus_time == 25

    def test_break_sessions_are_ignored(self, aggregator, repo, clock):
        aggregator.record_completion(_session(clock.now, 5, duration=5, type=SessionType.BREAK))
        stats = repo.get_stats()
        assert stats.sessions_completed == 0
        assert stats.total_focus_time == 0
        assert stats.current_streak == 0

    def test_early_end_through_timer(self, service, clock):
        session = service.timer.start(25)
        clock.advance(minutes=24)
        service.timer.end(session.id, completed=True)
        assert service.repo.get_stats().total_focus_time == 24
