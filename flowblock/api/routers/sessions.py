"""
/sessions — start, end, pause and resume the current focus/break session.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from ...api.schemas import (
    FocusSessionOut,
    PausedSessionOut,
    RemainingOut,
    SessionEndIn,
    SessionStartIn,
)
from ...models import SessionType

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _get_service(request: Request):
    return request.app.state.service


@router.post("/start", response_model=FocusSessionOut)
def start_session(req: SessionStartIn, service=Depends(_get_service)):
    """Start a session; one already running is closed out as abandoned."""
    session = service.timer.start(req.duration, SessionType(req.type))
    return FocusSessionOut.model_validate(session.to_dict())


@router.post("/end", response_model=FocusSessionOut)
def end_session(req: SessionEndIn, service=Depends(_get_service)):
    session = service.timer.end(req.session_id, req.completed)
    return FocusSessionOut.model_validate(session.to_dict())


@router.post("/pause", response_model=PausedSessionOut)
def pause_session(service=Depends(_get_service)):
    return PausedSessionOut.model_validate(service.timer.pause().to_dict())


@router.post("/resume", response_model=FocusSessionOut)
def resume_session(service=Depends(_get_service)):
    return FocusSessionOut.model_validate(service.timer.resume().to_dict())


@router.get("/current", response_model=Optional[FocusSessionOut])
def current_session(service=Depends(_get_service)):
    session = service.timer.current()
    return FocusSessionOut.model_validate(session.to_dict()) if session else None


@router.get("/remaining", response_model=RemainingOut)
def remaining(service=Depends(_get_service)):
    return RemainingOut(remaining=service.timer.remaining(), state=service.timer.state().value)
