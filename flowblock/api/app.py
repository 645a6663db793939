"""
FastAPI application — local FlowBlock API.
Runs on http://127.0.0.1:8766 by default.

The service and its collaborators live on app.state, so each call to create_app()
produces a fully independent instance with no shared module-level globals.
Collaborators can be injected, which is how the tests run without a disk or a
real timer.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..actions.alarms import AlarmService, AsyncioAlarmService
from ..actions.notifications import DesktopNotifier, LogNotifier, NotificationSink
from ..config import config
from ..errors import FlowBlockError
from ..service import FlowBlockService
from ..storage.kv import KeyValueStore, SqliteStore
from .errors import error_status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan: initialises and tears down all per-app state
# ---------------------------------------------------------------------------

def _lifespan(
    store: Optional[KeyValueStore],
    alarms: Optional[AlarmService],
    notifier: Optional[NotificationSink],
    clock: Optional[Callable[[], float]],
):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        own_alarms = None
        alarm_service = alarms
        if alarm_service is None:
            alarm_service = own_alarms = AsyncioAlarmService(asyncio.get_running_loop())
        if notifier is not None:
            sink = notifier
        else:
            sink = DesktopNotifier() if config.desktop_notifications else LogNotifier()

        service = FlowBlockService(
            store=store if store is not None else SqliteStore(config.state_db_path),
            alarms=alarm_service,
            notifier=sink,
            clock=clock or time.time,
        )
        register = getattr(alarm_service, "register_listener", None)
        if register is not None:
            register(service.on_alarm)

        app.state.service = service
        service.on_startup()
        logger.info("FlowBlock service ready")

        yield

        if own_alarms is not None:
            own_alarms.shutdown()

    return lifespan


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(
    store: Optional[KeyValueStore] = None,
    alarms: Optional[AlarmService] = None,
    notifier: Optional[NotificationSink] = None,
    clock: Optional[Callable[[], float]] = None,
) -> FastAPI:
    app = FastAPI(
        title="FlowBlock",
        description="Local site blocker with focus sessions and Pomodoro cycles",
        version="0.1.0",
        lifespan=_lifespan(store, alarms, notifier, clock),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000", "null"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(FlowBlockError)
    async def _flowblock_error(request: Request, exc: FlowBlockError):
        return JSONResponse(status_code=error_status(exc), content={"detail": str(exc)})

    from .routers import (
        analytics,
        commands,
        navigation,
        pomodoro,
        schedule,
        sessions,
        settings,
        sites,
        status,
    )

    app.include_router(status.router)
    app.include_router(navigation.router)
    app.include_router(sessions.router)
    app.include_router(pomodoro.router)
    app.include_router(sites.router)
    app.include_router(settings.router)
    app.include_router(schedule.router)
    app.include_router(analytics.router)
    app.include_router(commands.router)

    @app.get("/health")
    def health(request: Request):
        service = getattr(request.app.state, "service", None)
        timer_state = service.timer.state().value if service else "unknown"
        return {"status": "ok", "version": "0.1.0", "timer": timer_state}

    return app


app = create_app()
