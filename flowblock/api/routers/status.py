"""
/status — overall snapshot for the popup, and the global blocking switch.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ...api.schemas import StatusOut

router = APIRouter(prefix="/status", tags=["status"])


def _get_service(request: Request):
    return request.app.state.service


@router.get("", response_model=StatusOut)
def get_status(service=Depends(_get_service)):
    """Settings, current session, stats and blocklist in one call."""
    return StatusOut.model_validate(service.status())


@router.post("/toggle")
def toggle_blocking(service=Depends(_get_service)):
    return {"enabled": service.toggle_blocking()}
