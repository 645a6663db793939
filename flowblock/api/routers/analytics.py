"""
/analytics and /premium — weekly focus summary, top blocked sites, premium flag.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from ...api.schemas import AnalyticsOut, LicenseIn, PremiumStatusOut

router = APIRouter(tags=["analytics"])


def _get_service(request: Request):
    return request.app.state.service


@router.get("/analytics/summary", response_model=AnalyticsOut)
def analytics_summary(
    top: int = Query(default=5, ge=1, le=50, description="Number of top blocked sites"),
    service=Depends(_get_service),
):
    """Completed focus sessions of the last 7 days, per-weekday minutes and block leaders."""
    return AnalyticsOut.model_validate(service.analytics_summary(top))


@router.get("/premium", response_model=PremiumStatusOut)
def get_premium(service=Depends(_get_service)):
    return PremiumStatusOut.model_validate(service.premium_status())


@router.post("/premium/activate")
def activate(req: LicenseIn, service=Depends(_get_service)):
    return {"success": service.activate_premium(req.license_key)}
