from __future__ import annotations

from datetime import datetime

import pytest

from core.config import Settings
from core.services.demo_data import build_state


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.current = now

    def __call__(self) -> datetime:
        return self.current


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 17, 9, 30, 0))


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path)


@pytest.fixture
def state(settings, clock):
    return build_state(settings, clock=clock)


@pytest.fixture
def events(state):
    seen = []
    state.subscribe(seen.append)
    return seen


@pytest.fixture
def find(state):
    def _find(prefix: str):
        return next(m for m in state.medicines if m.name.startswith(prefix))

    return _find
