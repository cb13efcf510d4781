# tests/conftest.py
import os
import random
import sys
from datetime import date

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from candlesim.config import SimulatorConfig  # noqa: E402
from candlesim.events import EventDispatcher  # noqa: E402
from candlesim.marketdata import Candle  # noqa: E402
from candlesim.scheduling import Scheduler  # noqa: E402


START_DATE = date(2025, 3, 3)


def make_candle(day: date = START_DATE, open=100.0, high=None, low=None, close=101.0) -> Candle:
    """Build a valid candle; high/low default to 1.0 outside the body."""
    if high is None:
        high = max(open, close) + 1.0
    if low is None:
        low = min(open, close) - 1.0
    return Candle(date=day, open=open, high=high, low=low, close=close)


class ScriptedRandom:
    """Random source that replays fixed values, for exact arithmetic checks.

    ``uniform(a, b)`` returns ``a + (b - a) * r`` for the next scripted ``r``.
    """

    def __init__(self, values):
        self._values = list(values)
        self.calls = 0

    def random(self) -> float:
        return self._next()

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self._next()

    def _next(self) -> float:
        value = self._values[self.calls % len(self._values)]
        self.calls += 1
        return value


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def scheduler():
    return Scheduler()


@pytest.fixture
def dispatcher():
    return EventDispatcher()


@pytest.fixture
def config():
    return SimulatorConfig()


@pytest.fixture
def candle_factory():
    return make_candle


@pytest.fixture
def scripted_random():
    return ScriptedRandom
