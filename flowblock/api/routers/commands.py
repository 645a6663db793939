"""
/commands — generic request/response surface: one call, one named operation.

Failures come back as {"error": "..."} so a UI can show them as a toast.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ...api.schemas import CommandIn
from ...errors import FlowBlockError
from ..errors import error_status

router = APIRouter(prefix="/commands", tags=["commands"])


def _get_service(request: Request):
    return request.app.state.service


@router.post("")
def run_command(cmd: CommandIn, service=Depends(_get_service)):
    try:
        return service.on_command(cmd.type, cmd.payload)
    except FlowBlockError as exc:
        return JSONResponse(status_code=error_status(exc), content={"error": str(exc)})
    except ValidationError as exc:
        return JSONResponse(
            status_code=422,
            content={
                "error": f"Invalid payload for {cmd.type!r}",
                "detail": exc.errors(include_url=False, include_context=False),
            },
        )
