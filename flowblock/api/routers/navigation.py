"""
/navigation — verdicts for the navigation interceptor, the blocked-page
placeholder it redirects to, and temporary breaks granted from that page.
"""

from __future__ import annotations

from html import escape
from typing import Dict

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from ...api.schemas import BreakGrantIn, BreakOut, NavigationCheckIn, NavigationOut

router = APIRouter(tags=["navigation"])


def _get_service(request: Request):
    return request.app.state.service


@router.post("/navigation/check", response_model=NavigationOut)
def check_navigation(req: NavigationCheckIn, service=Depends(_get_service)):
    """
    Called once per top-level navigation. On "deny" the caller must send the user
    to redirect_url, which carries the original URL.
    """
    return NavigationOut.model_validate(service.on_navigation(req.url).to_dict())


@router.get("/blocked", response_class=HTMLResponse)
def blocked_page(url: str = Query(default="")):
    target = escape(url)
    return (
        "<!doctype html><html><head><title>Blocked by FlowBlock</title></head>"
        f"<body><h1>Stay focused</h1><p>{target} is blocked right now.</p></body></html>"
    )


@router.post("/breaks", response_model=BreakOut, status_code=201)
def grant_break(req: BreakGrantIn, service=Depends(_get_service)):
    """Exempt one domain from blocking for a few minutes (default 5)."""
    domain, expiry = service.grant_break(req.domain, req.duration_seconds)
    return BreakOut(domain=domain, expires_at=expiry)


@router.get("/breaks", response_model=Dict[str, float])
def list_breaks(service=Depends(_get_service)):
    """Unexpired temporary breaks: domain → expiry timestamp."""
    return service.breaks.active()
