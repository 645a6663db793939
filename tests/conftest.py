"""
Shared pytest fixtures and configuration.

Every fixture is function-scoped: each test gets an empty in-memory store, a
clock it can move by hand and an alarm service that only fires when told to.
"""

from datetime import datetime

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from flowblock.actions.alarms import ManualAlarmService
from flowblock.api.app import create_app
from flowblock.service import FlowBlockService
from flowblock.storage.kv import MemoryStore
from flowblock.storage.repository import Repository

# Wednesday 12 June 2024, 10:00 local time
WEDNESDAY_10AM = datetime(2024, 6, 12, 10, 0).timestamp()


class FakeClock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float = 0, minutes: float = 0, days: float = 0) -> float:
        self.now += seconds + minutes * 60 + days * 86400
        return self.now


class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    def notify(self, title: str, message: str) -> bool:
        self.sent.append((title, message))
        return True

    @property
    def titles(self) -> list[str]:
        return [t for t, _ in self.sent]


@pytest.fixture()
def clock():
    return FakeClock(WEDNESDAY_10AM)


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def repo(store, clock):
    return Repository(store, clock)


@pytest.fixture()
def alarms():
    return ManualAlarmService()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def service(store, alarms, notifier, clock):
    svc = FlowBlockService(store=store, alarms=alarms, notifier=notifier, clock=clock)
    alarms.register_listener(svc.on_alarm)
    return svc


@pytest.fixture()
def app(store, alarms, notifier, clock):
    """A fresh app per test, wired to the same fakes the unit fixtures use."""
    return create_app(store=store, alarms=alarms, notifier=notifier, clock=clock)


@pytest_asyncio.fixture()
async def client(app):
    """Async HTTP client wired directly to the ASGI app (no server needed)."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
