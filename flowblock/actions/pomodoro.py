"""
Pomodoro Cycle Controller — alternates focus and break sessions on top of the
session timer, with a long break every N completed focus sessions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..errors import NoActiveSession
from ..models import FocusSession, PomodoroState, SessionType
from ..storage.repository import Repository
from .timer import SessionTimer

logger = logging.getLogger(__name__)

TUNABLE_FIELDS = (
    "work_duration",
    "break_duration",
    "long_break_duration",
    "sessions_until_long_break",
)


@dataclass
class PomodoroTransition:
    next_session: FocusSession
    state: PomodoroState
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "next_session": self.next_session.to_dict(),
            "pomodoro_state": self.state.to_dict(),
            "message": self.message,
        }


class PomodoroController:

    def __init__(self, repo: Repository, timer: SessionTimer):
        self._repo = repo
        self._timer = timer

    def get_state(self) -> PomodoroState:
        return self._repo.get_pomodoro_state()

    def update_settings(self, patch: Dict[str, Any]) -> PomodoroState:
        """Change durations / long-break cadence; cycle counters are untouched."""
        changes = {k: v for k, v in patch.items() if k in TUNABLE_FIELDS and v is not None}
        return self._repo.update_pomodoro_state(**changes)

    def start(
        self, work: int = 25, brk: int = 5, long_break: int = 15
    ) -> Tuple[FocusSession, PomodoroState]:
        state = self._repo.update_pomodoro_state(
            enabled=True,
            work_duration=work,
            break_duration=brk,
            long_break_duration=long_break,
            current_cycle=1,
            is_on_break=False,
            total_cycles_completed=0,
        )
        session = self._timer.start(work, SessionType.FOCUS)
        logger.info("Pomodoro started: %d/%d/%d min", work, brk, long_break)
        return session, state

    def stop(self) -> PomodoroState:
        session = self._timer.current()
        if session is not None:
            self._timer.end(session.id, completed=False)
        return self._repo.update_pomodoro_state(enabled=False, is_on_break=False)

    def on_session_elapsed(self) -> Optional[PomodoroTransition]:
        """
        Pick and start the next session after the current one ended.
        Returns None when Pomodoro mode is off.
        """
        state = self._repo.get_pomodoro_state()
        if not state.enabled:
            return None

        if state.is_on_break:
            next_type = SessionType.FOCUS
            next_duration = state.work_duration
            message = f"Break over! Starting work session {state.current_cycle}"
            changes: Dict[str, Any] = {"is_on_break": False}
        else:
            completed = state.total_cycles_completed + 1
            long_break = completed % max(1, state.sessions_until_long_break) == 0
            next_type = SessionType.BREAK
            if long_break:
                next_duration = state.long_break_duration
                message = (
                    f"Great work! You've completed {completed} sessions. "
                    f"Enjoy a {state.long_break_duration} minute break!"
                )
            else:
                next_duration = state.break_duration
                message = (
                    f"Session {state.current_cycle} complete! "
                    f"Take a {state.break_duration} minute break."
                )
            changes = {
                "is_on_break": True,
                "current_cycle": state.current_cycle + 1,
                "total_cycles_completed": completed,
            }

        updated = self._repo.update_pomodoro_state(**changes)
        next_session = self._timer.start(next_duration, next_type)
        logger.info("Pomodoro → %s for %s min", next_type.value, next_duration)
        return PomodoroTransition(next_session, updated, message)

    def skip(self) -> Optional[PomodoroTransition]:
        """Abandon the current session and advance the cycle immediately."""
        session = self._timer.current()
        state = self._repo.get_pomodoro_state()
        if session is None or not state.enabled:
            raise NoActiveSession("No active Pomodoro session")
        self._timer.end(session.id, completed=False)
        return self.on_session_elapsed()
