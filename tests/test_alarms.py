"""
Tests for the asyncio-backed alarm service (flowblock/actions/alarms.py).
These run on the test's event loop with sub-second delays.
"""

from __future__ import annotations

import asyncio
import logging
import threading

import pytest_asyncio

from flowblock.actions.alarms import AsyncioAlarmService
from flowblock.models import SessionType
from flowblock.service import FlowBlockService

ALARM = "flowblock-session-end"
SOON = 0.001  # minutes, about 60 ms


async def _wait_for(predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        assert loop.time() < deadline, "timed out waiting for alarm"
        await asyncio.sleep(0.01)


@pytest_asyncio.fixture()
async def alarm_service():
    svc = AsyncioAlarmService(asyncio.get_running_loop())
    yield svc
    svc.shutdown()


@pytest_asyncio.fixture()
async def fired(alarm_service):
    names = []
    alarm_service.register_listener(names.append)
    return names


class TestScheduling:
    async def test_fires_once_after_delay(self, alarm_service, fired):
        alarm_service.schedule(ALARM, SOON)
        assert ALARM in alarm_service.pending()

        await _wait_for(lambda: fired)
        await _wait_for(lambda: not alarm_service._tasks)

        assert fired == [ALARM]
        assert alarm_service.pending() == {}

    async def test_cancel_after_arming(self, alarm_service, fired):
        alarm_service.schedule(ALARM, SOON)
        await asyncio.sleep(0)
        assert ALARM in alarm_service._handles

        alarm_service.cancel(ALARM)
        await asyncio.sleep(0.2)

        assert fired == []
        assert alarm_service.pending() == {}
        assert alarm_service._handles == {}

    async def test_cancel_before_arming(self, alarm_service, fired):
        # both calls queue onto the loop; the arm step runs after the cancel
        alarm_service.schedule(ALARM, SOON)
        alarm_service.cancel(ALARM)
        await asyncio.sleep(0.2)

        assert fired == []
        assert alarm_service._handles == {}

    async def test_reschedule_sooner_replaces(self, alarm_service, fired):
        alarm_service.schedule(ALARM, 10)
        alarm_service.schedule(ALARM, SOON)

        await _wait_for(lambda: fired)
        await asyncio.sleep(0.1)

        assert fired == [ALARM]
        assert alarm_service.pending() == {}

    async def test_reschedule_later_replaces(self, alarm_service, fired):
        alarm_service.schedule(ALARM, SOON)
        alarm_service.schedule(ALARM, 10)
        await asyncio.sleep(0.2)

        assert fired == []
        assert list(alarm_service.pending()) == [ALARM]

    async def test_schedule_from_worker_thread(self, alarm_service, fired):
        await asyncio.to_thread(alarm_service.schedule, ALARM, SOON)
        await _wait_for(lambda: fired)
        assert fired == [ALARM]

    async def test_shutdown_drops_pending(self, alarm_service, fired):
        alarm_service.schedule(ALARM, 10)
        await asyncio.sleep(0)

        alarm_service.shutdown()

        assert alarm_service.pending() == {}
        assert alarm_service._handles == {}


class TestListeners:
    async def test_failing_listener_is_logged_and_others_still_run(self, caplog):
        svc = AsyncioAlarmService(asyncio.get_running_loop())
        names = []

        def broken(name):
            raise RuntimeError("listener down")

        svc.register_listener(broken)
        svc.register_listener(names.append)

        with caplog.at_level(logging.ERROR, logger="flowblock.actions.alarms"):
            svc.schedule(ALARM, SOON)
            await _wait_for(lambda: names)

        assert names == [ALARM]
        assert f"Alarm listener failed for {ALARM}" in caplog.text
        svc.shutdown()

    async def test_skip_while_alarm_is_dispatching(self, alarm_service, store, clock, notifier):
        entered = threading.Event()
        release = threading.Event()
        results = []

        def gate(name):
            entered.set()
            release.wait(timeout=2)

        alarm_service.register_listener(gate)
        service = FlowBlockService(store=store, alarms=alarm_service, notifier=notifier, clock=clock)
        alarm_service.register_listener(lambda name: results.append(service.on_alarm(name)))

        service.pomodoro.start(25, 5, 15)
        clock.advance(minutes=25)
        alarm_service.schedule(ALARM, SOON)
        await _wait_for(entered.is_set)

        # the alarm has already left the pending set when the user skips
        service.pomodoro.skip()
        release.set()
        await _wait_for(lambda: results)

        state = service.pomodoro.get_state()
        assert results == [None]
        assert service.timer.current().type is SessionType.BREAK
        assert state.is_on_break is True
        assert state.total_cycles_completed == 1
