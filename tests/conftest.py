"""
Shared fixtures and fakes for the liveness monitor tests.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from config.settings import AlertSettings, DatabaseSettings, ProbeSettings, Settings


# ============================================================
# FAKE DATABASE
# ============================================================

class FakeConnection:
    """Stands in for ``TargetConnection``."""

    def __init__(
        self,
        ping_error: Optional[BaseException] = None,
        ping_delay: float = 0.0,
        close_error: Optional[BaseException] = None,
        close_delay: float = 0.0,
    ):
        self.ping_error = ping_error
        self.ping_delay = ping_delay
        self.close_error = close_error
        self.close_delay = close_delay
        self.ping_calls = 0
        self.closed = False

    async def ping_admin(self) -> None:
        self.ping_calls += 1
        if self.ping_delay:
            await asyncio.sleep(self.ping_delay)
        if self.ping_error is not None:
            raise self.ping_error

    async def close(self) -> None:
        self.closed = True
        if self.close_delay:
            await asyncio.sleep(self.close_delay)
        if self.close_error is not None:
            raise self.close_error


class FakeTarget:
    """Stands in for ``DatabaseTarget``; hands out ``FakeConnection``s."""

    def __init__(
        self,
        connect_error: Optional[BaseException] = None,
        connect_delay: float = 0.0,
        ping_error: Optional[BaseException] = None,
        ping_delay: float = 0.0,
        close_error: Optional[BaseException] = None,
        close_delay: float = 0.0,
    ):
        self.connect_error = connect_error
        self.connect_delay = connect_delay
        self.ping_error = ping_error
        self.ping_delay = ping_delay
        self.close_error = close_error
        self.close_delay = close_delay
        self.connections: List[FakeConnection] = []

    async def connect(self) -> FakeConnection:
        if self.connect_delay:
            await asyncio.sleep(self.connect_delay)
        if self.connect_error is not None:
            raise self.connect_error
        connection = FakeConnection(
            ping_error=self.ping_error,
            ping_delay=self.ping_delay,
            close_error=self.close_error,
            close_delay=self.close_delay,
        )
        self.connections.append(connection)
        return connection


class TickingClock:
    """Clock that advances one second every time it is read."""

    def __init__(self, start: Optional[datetime] = None):
        self.current = start or datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.reads: List[datetime] = []

    def __call__(self) -> datetime:
        value = self.current
        self.reads.append(value)
        self.current = self.current + timedelta(seconds=1)
        return value


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def probe_settings() -> ProbeSettings:
    """Short budgets so timeout tests stay fast."""
    return ProbeSettings(interval=50, timeout=50, verbose=True, show_errors=True)


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def sqlite_settings() -> Settings:
    """Settings pointing at an in-memory SQLite database, alerts disabled."""
    return Settings(
        web_host="127.0.0.1",
        database=DatabaseSettings(uri="sqlite+aiosqlite:///:memory:"),
        probe=ProbeSettings(interval=50, timeout=1000),
        alert=AlertSettings(token=None),
    )
