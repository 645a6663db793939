"""
/schedule — weekly blocking windows.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from ...api.schemas import (
    ScheduleActiveOut,
    ScheduleSlotIn,
    ScheduleSlotOut,
    WeeklyScheduleIn,
    WeeklyScheduleOut,
)

router = APIRouter(prefix="/schedule", tags=["schedule"])


def _get_service(request: Request):
    return request.app.state.service


@router.get("", response_model=WeeklyScheduleOut)
def get_schedule(service=Depends(_get_service)):
    return WeeklyScheduleOut.model_validate(service.get_weekly_schedule().to_dict())


@router.put("", response_model=WeeklyScheduleOut)
def update_schedule(req: WeeklyScheduleIn, service=Depends(_get_service)):
    """Partial update: `enabled` and/or the full slot list."""
    slots = [s.model_dump() for s in req.slots] if req.slots is not None else None
    updated = service.update_weekly_schedule(req.enabled, slots)
    return WeeklyScheduleOut.model_validate(updated.to_dict())


@router.post("/slots", response_model=ScheduleSlotOut, status_code=201)
def add_slot(slot: ScheduleSlotIn, service=Depends(_get_service)):
    added = service.add_schedule_slot(slot.day, slot.start_time, slot.end_time)
    return ScheduleSlotOut.model_validate(added.to_dict())


@router.delete("/slots/{slot_id}")
def remove_slot(slot_id: str, service=Depends(_get_service)):
    if not service.remove_schedule_slot(slot_id):
        raise HTTPException(status_code=404, detail="Slot not found")
    return {"status": "removed"}


@router.post("/slots/{slot_id}/toggle", response_model=ScheduleSlotOut)
def toggle_slot(slot_id: str, service=Depends(_get_service)):
    slot = service.toggle_schedule_slot(slot_id)
    if slot is None:
        raise HTTPException(status_code=404, detail="Slot not found")
    return ScheduleSlotOut.model_validate(slot.to_dict())


@router.get("/active", response_model=ScheduleActiveOut)
def schedule_active(service=Depends(_get_service)):
    """Whether blocking applies right now under the weekly schedule."""
    return ScheduleActiveOut.model_validate(service.schedule_active())
