"""
/pomodoro — automatic focus/break cycling.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ...api.schemas import (
    FocusSessionOut,
    PomodoroSettingsPatch,
    PomodoroStartIn,
    PomodoroStartOut,
    PomodoroStateOut,
    PomodoroTransitionOut,
)

router = APIRouter(prefix="/pomodoro", tags=["pomodoro"])


def _get_service(request: Request):
    return request.app.state.service


@router.get("", response_model=PomodoroStateOut)
def get_pomodoro(service=Depends(_get_service)):
    return PomodoroStateOut.model_validate(service.pomodoro.get_state().to_dict())


@router.post("/start", response_model=PomodoroStartOut)
def start_pomodoro(req: PomodoroStartIn, service=Depends(_get_service)):
    session, state = service.pomodoro.start(
        req.work_duration, req.break_duration, req.long_break_duration
    )
    return PomodoroStartOut(
        session=FocusSessionOut.model_validate(session.to_dict()),
        pomodoro_state=PomodoroStateOut.model_validate(state.to_dict()),
    )


@router.post("/stop", response_model=PomodoroStateOut)
def stop_pomodoro(service=Depends(_get_service)):
    return PomodoroStateOut.model_validate(service.pomodoro.stop().to_dict())


@router.post("/skip", response_model=PomodoroTransitionOut)
def skip_to_next(service=Depends(_get_service)):
    """Abandon the current session and move straight to the next one in the cycle."""
    transition = service.pomodoro.skip()
    return PomodoroTransitionOut.model_validate(transition.to_dict())


@router.put("/settings", response_model=PomodoroStateOut)
def update_pomodoro_settings(patch: PomodoroSettingsPatch, service=Depends(_get_service)):
    state = service.pomodoro.update_settings(patch.model_dump(exclude_none=True))
    return PomodoroStateOut.model_validate(state.to_dict())
