"""
/sites — manage the blocklist.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from ...api.schemas import BlockedSiteOut, SiteIn, SitesImportIn

router = APIRouter(prefix="/sites", tags=["sites"])


def _get_service(request: Request):
    return request.app.state.service


@router.get("", response_model=List[BlockedSiteOut])
def list_sites(service=Depends(_get_service)):
    return [BlockedSiteOut.model_validate(s.to_dict()) for s in service.repo.get_blocked_sites()]


@router.post("", response_model=BlockedSiteOut, status_code=201)
def add_site(site: SiteIn, service=Depends(_get_service)):
    """Add a domain or wildcard pattern (e.g. "*.reddit.com"); scheme and www. are stripped."""
    added = service.add_site(site.domain, site.category)
    return BlockedSiteOut.model_validate(added.to_dict())


@router.delete("/{site_id}")
def remove_site(site_id: str, service=Depends(_get_service)):
    if not service.remove_site(site_id):
        raise HTTPException(status_code=404, detail="Site not found")
    return {"status": "removed"}


@router.get("/export")
def export_sites(service=Depends(_get_service)):
    return service.export_sites()


@router.post("/import", response_model=List[BlockedSiteOut])
def import_sites(req: SitesImportIn, service=Depends(_get_service)):
    sites = service.import_sites([s.model_dump() for s in req.sites], replace=req.replace)
    return [BlockedSiteOut.model_validate(s.to_dict()) for s in sites]
