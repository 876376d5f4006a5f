"""Shared test fixtures for blocwatch."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from blocwatch.config import WatchConfig
from blocwatch.observer import Observer

_EPOCH = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock: each call advances by ``step``."""

    def __init__(self, start: datetime = _EPOCH, step: timedelta = timedelta(milliseconds=10)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def observer(clock: FakeClock) -> Observer:
    """Observer with capacity 5 and a deterministic clock."""
    return Observer(WatchConfig(max_records=5), clock=clock)
