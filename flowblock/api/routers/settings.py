"""
/settings — read and update user settings.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ...api.schemas import SettingsPatch
from ...settings import DEFAULTS

router = APIRouter(prefix="/settings", tags=["settings"])


def _get_service(request: Request):
    return request.app.state.service


@router.get("")
def read_settings(service=Depends(_get_service)):
    """Return current settings with their defaults for reference."""
    return {"settings": service.repo.get_settings(), "defaults": DEFAULTS}


@router.put("")
def write_settings(patch: SettingsPatch, service=Depends(_get_service)):
    """Apply a partial update; omitted keys keep their current value."""
    data = {k: v for k, v in patch.model_dump().items() if v is not None}
    return {"settings": service.update_settings(data)}
