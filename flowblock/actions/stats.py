"""
Stats/Streak Aggregator — folds each completed focus session into the lifetime
counters and the consecutive-day streak.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from ..models import FocusSession, SessionType, Stats
from ..storage.repository import Repository

logger = logging.getLogger(__name__)


class StatsAggregator:

    def __init__(self, repo: Repository):
        self._repo = repo

    def record_completion(self, session: FocusSession) -> Stats:
        """
        Credit the actual elapsed minutes (end - start, rounded) and advance the
        streak. Same-day sessions leave the streak alone; a session the day after
        the previous one extends it; any longer gap restarts it at 1.
        Break sessions are ignored.
        """
        stats = self._repo.get_stats()
        if session.type is not SessionType.FOCUS or session.end_time is None:
            return stats

        today = date.fromtimestamp(session.end_time)
        last = date.fromisoformat(stats.last_session_date) if stats.last_session_date else None

        if last != today:
            if last is not None and last == today - timedelta(days=1):
                stats.current_streak += 1
            else:
                stats.current_streak = 1

        stats.total_focus_time += session.elapsed_minutes()
        stats.sessions_completed += 1
        stats.longest_streak = max(stats.longest_streak, stats.current_streak)
        stats.last_session_date = today.isoformat()
        self._repo.save_stats(stats)

        logger.info(
            "Focus session %s credited %d min (streak %d)",
            session.id, session.elapsed_minutes(), stats.current_streak,
        )
        return stats
