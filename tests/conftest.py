from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, milliseconds: float) -> None:
        self._now += timedelta(milliseconds=milliseconds)

    def set_hour(self, hour: int) -> None:
        self._now = self._now.replace(hour=hour)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 10, 12, 0, tzinfo=ZoneInfo("Europe/Istanbul")))
