"""
Read-only analytics over the session history and blocklist counters.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List

from .blocking.schedule import weekday
from .models import BlockedSite, FocusSession, SessionType
from .storage.repository import Repository

WEEK_SECONDS = 7 * 24 * 3600
DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@dataclass
class DailyFocus:
    day: str                    # "Sun" … "Sat"
    minutes: float


class Analytics:

    def __init__(self, repo: Repository, clock: Callable[[], float] = time.time):
        self._repo = repo
        self._clock = clock

    def weekly_focus_sessions(self) -> List[FocusSession]:
        """Completed focus sessions started in the last 7 days."""
        since = self._clock() - WEEK_SECONDS
        return [
            s for s in self._repo.get_focus_sessions()
            if s.start_time > since and s.type is SessionType.FOCUS and s.completed
        ]

    def daily_focus_time(self) -> List[DailyFocus]:
        """Scheduled focus minutes per weekday over the last 7 days, Sunday first."""
        totals: Dict[int, float] = {i: 0.0 for i in range(7)}
        for s in self.weekly_focus_sessions():
            totals[weekday(datetime.fromtimestamp(s.start_time))] += s.duration
        return [DailyFocus(day=name, minutes=totals[i]) for i, name in enumerate(DAY_NAMES)]

    def weekly_total_focus(self) -> float:
        return sum(s.duration for s in self.weekly_focus_sessions())

    def top_blocked_sites(self, limit: int = 5) -> List[BlockedSite]:
        sites = self._repo.get_blocked_sites()
        return sorted(sites, key=lambda s: s.block_count, reverse=True)[:limit]
