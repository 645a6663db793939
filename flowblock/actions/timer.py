"""
Session timer — the single current focus/break session and its wake-up alarm.

Remaining time is always recomputed from wall-clock start time and duration, never
counted down, so a suspended or restarted process picks up where it left off.

    Idle ──start──▶ Running ──pause──▶ Paused
      ▲               │  ▲               │
      └──────end──────┘  └────resume─────┘
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional

from ..errors import NoActiveSession, NotPaused, SessionAlreadyEnded, SessionNotFound
from ..models import FocusSession, PausedSession, SessionType, generate_id
from ..storage.repository import Repository
from .alarms import AlarmService
from .stats import StatsAggregator

logger = logging.getLogger(__name__)


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class SessionTimer:

    def __init__(
        self,
        repo: Repository,
        alarms: AlarmService,
        stats: StatsAggregator,
        alarm_name: str,
        clock: Callable[[], float] = time.time,
    ):
        self._repo = repo
        self._alarms = alarms
        self._stats = stats
        self.alarm_name = alarm_name
        self._clock = clock

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def current(self) -> Optional[FocusSession]:
        return self._repo.get_current_session()

    def state(self) -> TimerState:
        if self._repo.get_current_session() is None:
            return TimerState.IDLE
        if self._repo.get_paused_session() is not None:
            return TimerState.PAUSED
        return TimerState.RUNNING

    def remaining(self, now: Optional[float] = None) -> int:
        """Seconds left in the current session; 0 when idle."""
        session = self._repo.get_current_session()
        if session is None:
            return 0
        paused = self._repo.get_paused_session()
        if paused is not None:
            return paused.remaining_seconds
        now = self._clock() if now is None else now
        return max(0, round(session.duration * 60 - (now - session.start_time)))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(
        self, duration_minutes: float, session_type: SessionType = SessionType.FOCUS
    ) -> FocusSession:
        """
        Start a new session. Any session already in flight is closed out as
        abandoned (completed=False) in history before it is replaced, unless its
        time had already run out, in which case it is credited as completed.
        """
        self.recover()
        now = self._clock()
        existing = self._repo.get_current_session()
        if existing is not None:
            existing.end_time = now
            existing.completed = False
            self._repo.save_focus_session(existing)
            self._repo.clear_current_session()
            self._alarms.cancel(self.alarm_name)
            logger.info("Session %s superseded by a new start", existing.id)

        session = FocusSession(
            id=generate_id(),
            start_time=now,
            duration=duration_minutes,
            type=session_type,
        )
        self._alarms.schedule(self.alarm_name, duration_minutes)
        self._repo.set_current_session(session)
        self._repo.save_focus_session(session)
        logger.info("Started %s session %s (%s min)", session_type.value, session.id, duration_minutes)
        return session

    def end(
        self, session_id: str, completed: bool, ended_at: Optional[float] = None
    ) -> FocusSession:
        session = self._repo.get_current_session()
        if session is None or session.id != session_id:
            raise SessionNotFound(f"Session {session_id!r} not found or not active")
        if self._ran_out(session):
            # a missed end, not an abandonment
            completed = True
            if ended_at is None:
                ended_at = session.scheduled_end

        session.end_time = self._clock() if ended_at is None else ended_at
        session.completed = completed
        self._repo.save_focus_session(session)
        self._alarms.cancel(self.alarm_name)
        self._repo.clear_current_session()
        logger.info(
            "Ended %s session %s (%s)",
            session.type.value, session.id, "completed" if completed else "abandoned",
        )

        if completed:
            self._stats.record_completion(session)
        return session

    def pause(self) -> PausedSession:
        session = self._repo.get_current_session()
        if session is None:
            raise NoActiveSession("No active session to pause")

        existing = self._repo.get_paused_session()
        if existing is not None:
            return existing

        remaining = self.remaining()
        if remaining <= 0:
            self.recover()
            raise SessionAlreadyEnded("Session has already ended")

        paused = PausedSession(paused_at=self._clock(), remaining_seconds=remaining)
        self._alarms.cancel(self.alarm_name)
        self._repo.set_paused_session(paused)
        logger.info("Paused session %s with %ds left", session.id, remaining)
        return paused

    def resume(self) -> FocusSession:
        session = self._repo.get_current_session()
        if session is None:
            raise NoActiveSession("No active session to resume")
        paused = self._repo.get_paused_session()
        if paused is None:
            raise NotPaused("Session is not paused")

        self._alarms.schedule(self.alarm_name, paused.remaining_seconds / 60)
        # Shift the start forward by the time spent paused so remaining() stays
        # consistent without the paused record.
        session.start_time += self._clock() - paused.paused_at
        self._repo.set_current_session(session)
        self._repo.clear_paused_session()
        logger.info("Resumed session %s with %ds left", session.id, paused.remaining_seconds)
        return session

    def recover(self) -> Optional[FocusSession]:
        """
        Finalise a running session whose end passed without its alarm being
        handled (process down, alarm lost). Called on startup and before any
        transition. Returns the finalised session, or None if nothing needed
        recovering. Paused sessions are frozen and left alone.
        """
        session = self._repo.get_current_session()
        if session is None or not self._ran_out(session):
            return None
        logger.info("Recovering session %s whose end was missed", session.id)
        # Credit the scheduled length, not the time the process was down
        return self.end(session.id, completed=True, ended_at=session.scheduled_end)

    def _ran_out(self, session: FocusSession) -> bool:
        if self._repo.get_paused_session() is not None:
            return False
        return self._clock() >= session.scheduled_end
