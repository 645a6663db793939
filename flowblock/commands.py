"""
Command surface — one named operation per UI request.

Payloads are validated with the same pydantic models the HTTP routes use; results
are plain JSON-ready dicts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict

from .api.schemas import (
    BreakGrantIn,
    LicenseIn,
    PomodoroSettingsPatch,
    PomodoroStartIn,
    ScheduleSlotIn,
    SessionEndIn,
    SessionStartIn,
    SettingsPatch,
    SiteIdIn,
    SiteIn,
    SitesImportIn,
    SlotIdIn,
    WeeklyScheduleIn,
)
from .errors import UnknownOperation
from .models import SessionType

if TYPE_CHECKING:
    from .service import FlowBlockService

Handler = Callable[["FlowBlockService", Dict[str, Any]], Any]


def _get_status(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    return svc.status()


def _toggle_blocking(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    return {"enabled": svc.toggle_blocking()}


def _update_settings(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    patch = SettingsPatch.model_validate(payload)
    return {"settings": svc.update_settings(patch.model_dump(exclude_none=True))}


# ── sessions ──

def _start_session(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    req = SessionStartIn.model_validate(payload)
    session = svc.timer.start(req.duration, SessionType(req.type))
    return {"session": session.to_dict()}


def _end_session(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    req = SessionEndIn.model_validate(payload)
    svc.timer.end(req.session_id, req.completed)
    return {"success": True}


def _pause_session(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    return {"paused": svc.timer.pause().to_dict()}


def _resume_session(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    return {"session": svc.timer.resume().to_dict()}


def _get_time_remaining(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    return {"remaining": svc.timer.remaining(), "state": svc.timer.state().value}


# ── pomodoro ──

def _start_pomodoro(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    req = PomodoroStartIn.model_validate(payload)
    session, state = svc.pomodoro.start(
        req.work_duration, req.break_duration, req.long_break_duration
    )
    return {"session": session.to_dict(), "pomodoro_state": state.to_dict()}


def _stop_pomodoro(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    svc.pomodoro.stop()
    return {"success": True}


def _skip_to_next(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    transition = svc.pomodoro.skip()
    return transition.to_dict() if transition else None


def _get_pomodoro_state(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    return {"pomodoro_state": svc.pomodoro.get_state().to_dict()}


def _update_pomodoro_settings(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    patch = PomodoroSettingsPatch.model_validate(payload)
    state = svc.pomodoro.update_settings(patch.model_dump(exclude_none=True))
    return {"pomodoro_state": state.to_dict()}


# ── blocklist / breaks ──

def _add_site(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    req = SiteIn.model_validate(payload)
    site = svc.add_site(req.domain, req.category)
    return {"site": site.to_dict(), "can_add_more": svc.can_add_more_sites()}


def _remove_site(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    req = SiteIdIn.model_validate(payload)
    return {"success": svc.remove_site(req.id)}


def _export_sites(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    return {"sites": svc.export_sites()}


def _import_sites(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    req = SitesImportIn.model_validate(payload)
    sites = svc.import_sites([s.model_dump() for s in req.sites], replace=req.replace)
    return {"sites": [s.to_dict() for s in sites]}


def _grant_break(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    req = BreakGrantIn.model_validate(payload)
    domain, expiry = svc.grant_break(req.domain, req.duration_seconds)
    return {"domain": domain, "expires_at": expiry}


# ── weekly schedule ──

def _get_weekly_schedule(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    return {"weekly_schedule": svc.get_weekly_schedule().to_dict()}


def _update_weekly_schedule(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    req = WeeklyScheduleIn.model_validate(payload)
    slots = [s.model_dump() for s in req.slots] if req.slots is not None else None
    return {"weekly_schedule": svc.update_weekly_schedule(req.enabled, slots).to_dict()}


def _add_schedule_slot(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    req = ScheduleSlotIn.model_validate(payload)
    return {"slot": svc.add_schedule_slot(req.day, req.start_time, req.end_time).to_dict()}


def _remove_schedule_slot(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    req = SlotIdIn.model_validate(payload)
    return {"success": svc.remove_schedule_slot(req.slot_id)}


def _toggle_schedule_slot(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    req = SlotIdIn.model_validate(payload)
    slot = svc.toggle_schedule_slot(req.slot_id)
    return {"slot": slot.to_dict() if slot else None}


def _is_schedule_active(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    return svc.schedule_active()


# ── analytics / premium ──

def _get_analytics(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    return svc.analytics_summary(int(payload.get("top", 5)))


def _get_premium_status(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    return svc.premium_status()


def _activate_premium(svc: FlowBlockService, payload: Dict[str, Any]) -> Any:
    req = LicenseIn.model_validate(payload)
    return {"success": svc.activate_premium(req.license_key)}


COMMANDS: Dict[str, Handler] = {
    "get_status": _get_status,
    "toggle_blocking": _toggle_blocking,
    "update_settings": _update_settings,
    "start_session": _start_session,
    "end_session": _end_session,
    "pause_session": _pause_session,
    "resume_session": _resume_session,
    "get_time_remaining": _get_time_remaining,
    "start_pomodoro": _start_pomodoro,
    "stop_pomodoro": _stop_pomodoro,
    "skip_to_next": _skip_to_next,
    "get_pomodoro_state": _get_pomodoro_state,
    "update_pomodoro_settings": _update_pomodoro_settings,
    "add_site": _add_site,
    "remove_site": _remove_site,
    "export_sites": _export_sites,
    "import_sites": _import_sites,
    "grant_break": _grant_break,
    "get_weekly_schedule": _get_weekly_schedule,
    "update_weekly_schedule": _update_weekly_schedule,
    "add_schedule_slot": _add_schedule_slot,
    "remove_schedule_slot": _remove_schedule_slot,
    "toggle_schedule_slot": _toggle_schedule_slot,
    "is_schedule_active": _is_schedule_active,
    "get_analytics": _get_analytics,
    "get_premium_status": _get_premium_status,
    "activate_premium": _activate_premium,
}


def dispatch(svc: FlowBlockService, operation: str, payload: Dict[str, Any]) -> Any:
    handler = COMMANDS.get(operation)
    if handler is None:
        raise UnknownOperation(operation)
    return handler(svc, payload)
