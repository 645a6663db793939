"""
Typed access to the logical state keys.

Every method reads from or writes to the store directly; nothing is cached, so two
Repository instances over the same store always agree.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from ..models import (
    BlockedSite,
    FocusSession,
    PausedSession,
    PomodoroState,
    ScheduleSlot,
    Stats,
    WeeklySchedule,
    generate_id,
)
from ..settings import get_settings, update_settings
from .kv import KeyValueStore

logger = logging.getLogger(__name__)


class Keys:
    BLOCKED_SITES = "blocked_sites"
    STATS = "stats"
    FOCUS_SESSIONS = "focus_sessions"
    CURRENT_SESSION = "current_session"
    PAUSED_SESSION = "paused_session"
    POMODORO_STATE = "pomodoro_state"
    WEEKLY_SCHEDULE = "weekly_schedule"
    TEMPORARY_BREAKS = "temporary_breaks"


def clean_domain(raw: str) -> str:
    """Normalise user input for the blocklist: lower-case, no scheme, no www., no path."""
    domain = raw.strip().lower()
    for prefix in ("https://", "http://"):
        if domain.startswith(prefix):
            domain = domain[len(prefix):]
            break
    if domain.startswith("www."):
        domain = domain[4:]
    return domain.split("/", 1)[0]


class Repository:

    def __init__(self, store: KeyValueStore, clock: Callable[[], float] = time.time):
        self.store = store
        self._clock = clock

    # ------------------------------------------------------------------
    # Blocked sites
    # ------------------------------------------------------------------

    def get_blocked_sites(self) -> List[BlockedSite]:
        return [BlockedSite.from_dict(s) for s in self.store.get(Keys.BLOCKED_SITES) or []]

    def save_blocked_sites(self, sites: List[BlockedSite]) -> None:
        self.store.set(Keys.BLOCKED_SITES, [s.to_dict() for s in sites])

    def add_blocked_site(self, domain: str, category: Optional[str] = None) -> BlockedSite:
        sites = self.get_blocked_sites()
        site = BlockedSite(
            id=generate_id(),
            domain=clean_domain(domain),
            category=category,
            created_at=self._clock(),
        )
        sites.append(site)
        self.save_blocked_sites(sites)
        return site

    def remove_blocked_site(self, site_id: str) -> bool:
        sites = self.get_blocked_sites()
        kept = [s for s in sites if s.id != site_id]
        self.save_blocked_sites(kept)
        return len(kept) < len(sites)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_settings(self) -> Dict[str, Any]:
        return get_settings(self.store)

    def update_settings(self, patch: Dict[str, Any]) -> Dict[str, Any]:
        return update_settings(self.store, patch)

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def get_stats(self) -> Stats:
        return Stats.from_dict(self.store.get(Keys.STATS))

    def save_stats(self, stats: Stats) -> None:
        self.store.set(Keys.STATS, stats.to_dict())

    # ------------------------------------------------------------------
    # Session history, current and paused session
    # ------------------------------------------------------------------

    def get_focus_sessions(self) -> List[FocusSession]:
        return [FocusSession.from_dict(s) for s in self.store.get(Keys.FOCUS_SESSIONS) or []]

    def save_focus_session(self, session: FocusSession) -> None:
        """Upsert *session* into the history list by id."""
        history = self.store.get(Keys.FOCUS_SESSIONS) or []
        record = session.to_dict()
        for i, existing in enumerate(history):
            if existing.get("id") == session.id:
                history[i] = record
                break
        else:
            history.append(record)
        self.store.set(Keys.FOCUS_SESSIONS, history)

    def get_current_session(self) -> Optional[FocusSession]:
        data = self.store.get(Keys.CURRENT_SESSION)
        return FocusSession.from_dict(data) if data else None

    def set_current_session(self, session: FocusSession) -> None:
        self.store.set(Keys.CURRENT_SESSION, session.to_dict())

    def get_paused_session(self) -> Optional[PausedSession]:
        data = self.store.get(Keys.PAUSED_SESSION)
        return PausedSession.from_dict(data) if data else None

    def set_paused_session(self, paused: PausedSession) -> None:
        self.store.set(Keys.PAUSED_SESSION, paused.to_dict())

    def clear_paused_session(self) -> None:
        self.store.remove(Keys.PAUSED_SESSION)

    def clear_current_session(self) -> None:
        self.store.remove(Keys.CURRENT_SESSION, Keys.PAUSED_SESSION)

    # ------------------------------------------------------------------
    # Pomodoro
    # ------------------------------------------------------------------

    def get_pomodoro_state(self) -> PomodoroState:
        return PomodoroState.from_dict(self.store.get(Keys.POMODORO_STATE))

    def update_pomodoro_state(self, **changes: Any) -> PomodoroState:
        state = self.get_pomodoro_state()
        for k, v in changes.items():
            if hasattr(state, k):
                setattr(state, k, v)
        self.store.set(Keys.POMODORO_STATE, state.to_dict())
        return state

    # ------------------------------------------------------------------
    # Weekly schedule
    # ------------------------------------------------------------------

    def get_weekly_schedule(self) -> WeeklySchedule:
        raw = self.store.get(Keys.WEEKLY_SCHEDULE)
        try:
            return WeeklySchedule.from_dict(raw)
        except (KeyError, TypeError, ValueError, AttributeError):
            # A broken schedule must never suspend blocking
            logger.warning("Malformed weekly schedule in store; using the default")
            return WeeklySchedule()

    def save_weekly_schedule(self, schedule: WeeklySchedule) -> WeeklySchedule:
        self.store.set(Keys.WEEKLY_SCHEDULE, schedule.to_dict())
        return schedule

    def add_schedule_slot(self, day: int, start_time: str, end_time: str,
                          enabled: bool = True) -> ScheduleSlot:
        schedule = self.get_weekly_schedule()
        slot = ScheduleSlot(
            id=generate_id(),
            day=day,
            start_time=start_time,
            end_time=end_time,
            enabled=enabled,
        )
        schedule.slots.append(slot)
        self.save_weekly_schedule(schedule)
        return slot

    def remove_schedule_slot(self, slot_id: str) -> bool:
        schedule = self.get_weekly_schedule()
        before = len(schedule.slots)
        schedule.slots = [s for s in schedule.slots if s.id != slot_id]
        self.save_weekly_schedule(schedule)
        return len(schedule.slots) < before

    def toggle_schedule_slot(self, slot_id: str) -> Optional[ScheduleSlot]:
        schedule = self.get_weekly_schedule()
        for slot in schedule.slots:
            if slot.id == slot_id:
                slot.enabled = not slot.enabled
                self.save_weekly_schedule(schedule)
                return slot
        return None

    # ------------------------------------------------------------------
    # Temporary breaks
    # ------------------------------------------------------------------

    def get_temporary_breaks(self) -> Dict[str, float]:
        return dict(self.store.get(Keys.TEMPORARY_BREAKS) or {})

    def save_temporary_breaks(self, breaks: Dict[str, float]) -> None:
        self.store.set(Keys.TEMPORARY_BREAKS, breaks)
