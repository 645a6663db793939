"""
FlowBlock service — wires the engine components over one state store and exposes
the entry points the adapters call:

    on_navigation(url)        navigation interceptor, once per top-level navigation
    on_alarm(name)            scheduled-alarm callback
    on_startup()              process (re)start
    on_command(type, payload) UI command surface

Nothing is held in memory between calls; every operation reads the store,
computes and writes back.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

from .actions.alarms import AlarmService
from .actions.notifications import NotificationSink
from .actions.pomodoro import PomodoroController
from .actions.stats import StatsAggregator
from .actions.timer import SessionTimer, TimerState
from .analytics import Analytics
from .blocking import domains, schedule
from .blocking.breaks import BreakRegistry
from .blocking.engine import BlockingEngine, Verdict
from .commands import dispatch
from .config import config
from .errors import InvalidUrl
from .models import BlockedSite, FocusSession, ScheduleSlot, WeeklySchedule, generate_id
from .premium import activate_premium, can_add_more_sites, premium_status
from .storage.kv import KeyValueStore
from .storage.repository import Repository, clean_domain

logger = logging.getLogger(__name__)

# Loop timers and the wall clock drift apart slightly; resumed sessions also round
# their remaining time to whole seconds.
ALARM_TOLERANCE_SECONDS = 1.0


@dataclass
class NavigationResult:
    verdict: Verdict
    reason: str
    domain: Optional[str] = None
    redirect_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "verdict": self.verdict.value,
            "reason": self.reason,
            "domain": self.domain,
            "redirect_url": self.redirect_url,
        }


class FlowBlockService:

    def __init__(
        self,
        store: KeyValueStore,
        alarms: AlarmService,
        notifier: NotificationSink,
        clock: Callable[[], float] = time.time,
        alarm_name: str = config.alarm_name,
        blocked_page_url: str = config.blocked_page_url,
    ):
        self._alarms = alarms
        self._notifier = notifier
        self._clock = clock
        self.alarm_name = alarm_name
        self.blocked_page_url = blocked_page_url

        self.repo = Repository(store, clock)
        self.breaks = BreakRegistry(self.repo, clock)
        self.engine = BlockingEngine(self.repo, self.breaks, clock)
        self.stats = StatsAggregator(self.repo)
        self.timer = SessionTimer(self.repo, alarms, self.stats, alarm_name, clock)
        self.pomodoro = PomodoroController(self.repo, self.timer)
        self.analytics = Analytics(self.repo, clock)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def on_navigation(self, url: str) -> NavigationResult:
        """Allow/deny a navigation. Any internal failure allows it."""
        if url.startswith(self.blocked_page_url):
            return NavigationResult(Verdict.ALLOW, "internal_page")
        try:
            decision = self.engine.decide(url)
        except Exception:
            logger.exception("Navigation check failed for %s; allowing", url)
            return NavigationResult(Verdict.ALLOW, "error")

        redirect = None
        if decision.denied:
            redirect = f"{self.blocked_page_url}?url={quote(url, safe='')}"
        return NavigationResult(decision.verdict, decision.reason, decision.domain, redirect)

    def on_alarm(self, name: str) -> Optional[Dict[str, Any]]:
        """Session-end wake-up: complete the session, then advance Pomodoro if enabled."""
        if name != self.alarm_name:
            return None
        session = self.timer.current()
        if session is None or self.timer.state() is TimerState.PAUSED:
            # stale alarm: the session was ended or paused after it fired
            return None
        now = self._clock()
        if now < session.scheduled_end - ALARM_TOLERANCE_SECONDS:
            # stale alarm for a session that has since been replaced or resumed
            logger.info("Ignoring early alarm for session %s", session.id)
            return None

        ended = self.timer.end(
            session.id, completed=True, ended_at=min(now, session.scheduled_end)
        )
        settings = self.repo.get_settings()
        transition = self.pomodoro.on_session_elapsed()

        if transition is not None:
            title = "Break Time! ☕" if transition.state.is_on_break else "Focus Time! 🎯"
            message = transition.message
        else:
            title = "Focus Session Complete! 🎉"
            message = (
                f"Great work! You stayed focused for {_fmt_minutes(ended.duration)} minutes. "
                "Time for a break!"
            )
        if settings["notifications_enabled"]:
            self._notify(title, message)

        return {
            "ended_session": ended.to_dict(),
            "transition": transition.to_dict() if transition else None,
            "message": message,
        }

    def on_startup(self) -> Optional[FocusSession]:
        """Finalise a session that ran out while offline, or re-arm a surviving one."""
        recovered = self.timer.recover()
        if recovered is not None:
            if self.repo.get_settings()["notifications_enabled"]:
                self._notify(
                    "Focus Session Completed",
                    "Your focus session completed while you were away. Great work!",
                )
            return recovered

        if self.timer.state() is TimerState.RUNNING:
            self._alarms.schedule(self.alarm_name, self.timer.remaining() / 60)
        return None

    def on_command(self, operation: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        return dispatch(self, operation, payload or {})

    # ------------------------------------------------------------------
    # Status and settings
    # ------------------------------------------------------------------

    def status(self) -> Dict[str, Any]:
        settings = self.repo.get_settings()
        current = self.timer.current()
        return {
            "enabled": settings["enabled"],
            "current_session": current.to_dict() if current else None,
            "timer_state": self.timer.state().value,
            "stats": self.repo.get_stats().to_dict(),
            "blocked_sites": [s.to_dict() for s in self.repo.get_blocked_sites()],
            "settings": settings,
        }

    def toggle_blocking(self) -> bool:
        enabled = not self.repo.get_settings()["enabled"]
        self.repo.update_settings({"enabled": enabled})
        logger.info("Blocking %s", "enabled" if enabled else "disabled")
        return enabled

    def update_settings(self, patch: Dict[str, Any]) -> Dict[str, Any]:
        return self.repo.update_settings(patch)

    # ------------------------------------------------------------------
    # Blocklist and breaks
    # ------------------------------------------------------------------

    def add_site(self, domain: str, category: Optional[str] = None) -> BlockedSite:
        return self.repo.add_blocked_site(domain, category)

    def remove_site(self, site_id: str) -> bool:
        return self.repo.remove_blocked_site(site_id)

    def can_add_more_sites(self) -> bool:
        return can_add_more_sites(self.repo)

    def export_sites(self) -> List[Dict[str, Any]]:
        return [{"domain": s.domain, "category": s.category} for s in self.repo.get_blocked_sites()]

    def import_sites(self, sites: List[Dict[str, Any]], replace: bool = True) -> List[BlockedSite]:
        if replace:
            self.repo.save_blocked_sites([])
        return [self.repo.add_blocked_site(s["domain"], s.get("category")) for s in sites]

    def grant_break(self, target: str, duration_seconds: Optional[float] = None) -> Tuple[str, float]:
        """Exempt a domain (or the domain of a URL) for a while. Returns (domain, expiry)."""
        if "://" in target:
            domain = domains.normalize(target)
        else:
            domain = clean_domain(target)
            if not domain:
                raise InvalidUrl(target)
        if duration_seconds is None:
            duration_seconds = config.default_break_seconds
        return domain, self.breaks.grant(domain, duration_seconds)

    # ------------------------------------------------------------------
    # Weekly schedule
    # ------------------------------------------------------------------

    def get_weekly_schedule(self) -> WeeklySchedule:
        return self.repo.get_weekly_schedule()

    def update_weekly_schedule(
        self, enabled: Optional[bool] = None, slots: Optional[List[Dict[str, Any]]] = None
    ) -> WeeklySchedule:
        current = self.repo.get_weekly_schedule()
        if enabled is not None:
            current.enabled = enabled
        if slots is not None:
            current.slots = [
                ScheduleSlot(
                    id=s.get("id") or generate_id(),
                    day=int(s["day"]),
                    start_time=schedule.normalize_hhmm(s["start_time"]),
                    end_time=schedule.normalize_hhmm(s["end_time"]),
                    enabled=bool(s.get("enabled", True)),
                )
                for s in slots
            ]
        return self.repo.save_weekly_schedule(current)

    def add_schedule_slot(self, day: int, start_time: str, end_time: str) -> ScheduleSlot:
        return self.repo.add_schedule_slot(
            day,
            schedule.normalize_hhmm(start_time),
            schedule.normalize_hhmm(end_time),
        )

    def remove_schedule_slot(self, slot_id: str) -> bool:
        return self.repo.remove_schedule_slot(slot_id)

    def toggle_schedule_slot(self, slot_id: str) -> Optional[ScheduleSlot]:
        return self.repo.toggle_schedule_slot(slot_id)

    def schedule_active(self) -> Dict[str, bool]:
        current = self.repo.get_weekly_schedule()
        return {
            "active": schedule.is_active(current, datetime.fromtimestamp(self._clock())),
            "schedule_enabled": current.enabled,
        }

    # ------------------------------------------------------------------
    # Analytics and premium
    # ------------------------------------------------------------------

    def analytics_summary(self, top: int = 5) -> Dict[str, Any]:
        return {
            "weekly_sessions": [s.to_dict() for s in self.analytics.weekly_focus_sessions()],
            "daily_focus": [
                {"day": d.day, "minutes": d.minutes} for d in self.analytics.daily_focus_time()
            ],
            "weekly_total_minutes": self.analytics.weekly_total_focus(),
            "top_blocked_sites": [s.to_dict() for s in self.analytics.top_blocked_sites(top)],
            "stats": self.repo.get_stats().to_dict(),
        }

    def premium_status(self) -> Dict[str, Any]:
        return premium_status(self.repo)

    def activate_premium(self, license_key: str) -> bool:
        return activate_premium(self.repo, license_key, self._clock)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _notify(self, title: str, message: str) -> None:
        try:
            self._notifier.notify(title, message)
        except Exception:
            logger.warning("Notification sink failed for %r", title, exc_info=True)


def _fmt_minutes(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"
