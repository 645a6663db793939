"""
Scheduled wake-ups — one-shot named alarms on the asyncio event loop.

Scheduling a name that is already pending replaces it, so there is never more than
one pending alarm per name. Listeners run in the default executor, off the loop.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Callable, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class AlarmService(Protocol):

    def schedule(self, name: str, delay_minutes: float) -> None: ...

    def cancel(self, name: str) -> None: ...


class AsyncioAlarmService:
    """
    Thread-safe: schedule()/cancel() may be called from request worker threads;
    the actual timer handles are only touched on the loop thread.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop
        self._handles: Dict[str, asyncio.TimerHandle] = {}
        self._due: Dict[str, float] = {}
        self._lock = threading.Lock()
        self._listeners: list[Callable[[str], object]] = []
        self._tasks: set[asyncio.Task] = set()

    def register_listener(self, fn: Callable[[str], object]) -> None:
        """Register a callback(name) invoked when an alarm fires."""
        self._listeners.append(fn)

    def schedule(self, name: str, delay_minutes: float) -> None:
        delay_s = max(0.0, delay_minutes * 60.0)
        with self._lock:
            self._due[name] = time.time() + delay_s
        self._loop.call_soon_threadsafe(self._arm, name, delay_s)
        logger.debug("Alarm %s armed for %.1fs", name, delay_s)

    def cancel(self, name: str) -> None:
        with self._lock:
            self._due.pop(name, None)
        self._loop.call_soon_threadsafe(self._disarm, name)
        logger.debug("Alarm %s cancelled", name)

    def pending(self) -> Dict[str, float]:
        """name → due timestamp for every alarm not yet fired or cancelled."""
        with self._lock:
            return dict(self._due)

    def shutdown(self) -> None:
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()
        with self._lock:
            self._due.clear()

    # ------------------------------------------------------------------
    # Loop-thread internals
    # ------------------------------------------------------------------

    def _arm(self, name: str, delay_s: float) -> None:
        self._disarm(name)
        with self._lock:
            if name not in self._due:
                return  # cancelled before it was armed
        self._handles[name] = self._loop.call_later(delay_s, self._fire, name)

    def _disarm(self, name: str) -> None:
        handle = self._handles.pop(name, None)
        if handle is not None:
            handle.cancel()

    def _fire(self, name: str) -> None:
        self._handles.pop(name, None)
        with self._lock:
            self._due.pop(name, None)
        task = self._loop.create_task(self._dispatch(name))
        # the loop only keeps weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _dispatch(self, name: str) -> None:
        for listener in self._listeners:
            try:
                await self._loop.run_in_executor(None, listener, name)
            except Exception:
                logger.exception("Alarm listener failed for %s", name)


class ManualAlarmService:
    """Alarm service that only fires when told to — for scripts and embedding without a loop."""

    def __init__(self):
        self._due: Dict[str, float] = {}
        self._listeners: list[Callable[[str], object]] = []

    def register_listener(self, fn: Callable[[str], object]) -> None:
        self._listeners.append(fn)

    def schedule(self, name: str, delay_minutes: float) -> None:
        self._due[name] = delay_minutes

    def cancel(self, name: str) -> None:
        self._due.pop(name, None)

    def pending(self) -> Dict[str, float]:
        """name → requested delay in minutes."""
        return dict(self._due)

    def fire(self, name: str) -> Optional[object]:
        if self._due.pop(name, None) is None:
            return None
        result = None
        for listener in self._listeners:
            result = listener(name)
        return result
