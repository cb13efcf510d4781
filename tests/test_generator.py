"""Tests for the price-walk generator."""

import math
import random
from datetime import date, timedelta

import pytest

from candlesim.config import SimulatorConfig
from candlesim.generator import generate_initial_series, generate_path
from candlesim.marketdata import Candle, PRICE_FLOOR

D = date(2025, 6, 2)


def _start(close: float, day: date = D) -> Candle:
    return Candle(date=day, open=close, high=close + 1, low=max(PRICE_FLOOR, close - 1), close=close)


def _assert_well_formed(candles: list[Candle]) -> None:
    for c in candles:
        assert c.high >= max(c.open, c.close)
        assert c.low <= min(c.open, c.close)
        for price in (c.open, c.high, c.low, c.close):
            assert price >= PRICE_FLOOR
        assert round(c.open, 2) != round(c.close, 2)
    for prev, cur in zip(candles, candles[1:]):
        assert cur.date - prev.date == timedelta(days=1)


# ---------------------------------------------------------------------------
# generate_path
# ---------------------------------------------------------------------------

def test_example_scenario_up_120():
    path = generate_path(_start(100.0), 120.0, 5, rng=random.Random(7))
    assert len(path) == 5
    assert [c.date for c in path] == [D + timedelta(days=i) for i in range(1, 6)]
    assert path[-1].close == 120.0


@pytest.mark.parametrize("seed", range(25))
@pytest.mark.parametrize(
    "start_close,target,steps",
    [
        (100.0, 120.0, 5),
        (100.0, 80.0, 5),
        (25.0, 5.0, 3),
        (0.5, 0.01, 4),
        (100.0, 100.0, 1),
        (40.0, 140.0, 12),
        (3.0, 23.0, 1),
    ],
)
def test_path_properties_hold_for_many_seeds(seed, start_close, target, steps):
    path = generate_path(_start(start_close), target, steps, rng=random.Random(seed))
    assert len(path) == steps
    assert path[-1].close == target
    assert path[0].date == D + timedelta(days=1)
    _assert_well_formed(path)


def test_each_open_is_previous_close():
    path = generate_path(_start(100.0), 130.0, 6, rng=random.Random(3))
    assert path[0].open == 100.0
    for prev, cur in zip(path, path[1:]):
        assert cur.open == prev.close


def test_same_seed_same_path():
    a = generate_path(_start(100.0), 80.0, 5, rng=random.Random(99))
    b = generate_path(_start(100.0), 80.0, 5, rng=random.Random(99))
    assert a == b


def test_drift_is_fixed_from_total_distance(scripted_random):
    # midpoint draws: no random move, wicks of 2.5
    path = generate_path(_start(100.0), 140.0, 4, rng=scripted_random([0.5]))
    assert [c.close for c in path] == [115.0, 130.0, 145.0, 140.0]
    assert path[0].high == 117.5
    assert path[0].low == 97.5


def test_down_direction_subtracts_drift(scripted_random):
    path = generate_path(_start(100.0), 80.0, 2, rng=scripted_random([0.5]))
    assert [c.close for c in path] == [85.0, 80.0]
    assert path[0].is_bearish


def test_random_move_is_added_to_drift(scripted_random):
    # first draw 1.0 -> +8 random move, then wicks of 0
    path = generate_path(_start(100.0), 120.0, 2, rng=scripted_random([1.0, 0.0, 0.0]))
    assert path[0].close == pytest.approx(100.0 + 15.0 + 8.0)


def test_zero_height_body_is_nudged(scripted_random):
    path = generate_path(_start(100.0), 100.0, 2, rng=scripted_random([0.5]))
    # no drift, no random move -> close == open -> nudged down by 0.3
    assert path[0].close == pytest.approx(99.7)
    assert path[-1].close == 100.0


def test_pinned_final_step_nudges_open_instead_of_close(scripted_random):
    path = generate_path(_start(100.0), 100.0, 1, rng=scripted_random([0.5]))
    assert path[0].close == 100.0
    assert path[0].open == pytest.approx(99.7)
    assert path[0].open != _start(100.0).close
    _assert_well_formed(path)


def test_nudge_goes_up_near_price_floor(scripted_random):
    path = generate_path(_start(0.05), 0.05, 2, rng=scripted_random([0.5]))
    assert path[0].close == pytest.approx(0.35)


def test_prices_are_floored(scripted_random):
    # a huge random drop would take the close below zero
    cfg = SimulatorConfig(random_move_range=500.0)
    path = generate_path(_start(5.0), 1.0, 3, rng=scripted_random([0.0]), config=cfg)
    _assert_well_formed(path)
    assert path[-1].close == 1.0


@pytest.mark.parametrize("steps", [0, -3])
def test_rejects_non_positive_steps(steps):
    with pytest.raises(ValueError, match="steps"):
        generate_path(_start(100.0), 120.0, steps)


@pytest.mark.parametrize("target", [math.nan, math.inf, -math.inf, 0.0, -5.0])
def test_rejects_invalid_target(target):
    with pytest.raises(ValueError, match="target_price"):
        generate_path(_start(100.0), target, 5)


def test_default_random_source_is_used_when_none_given():
    path = generate_path(_start(100.0), 120.0, 5)
    assert len(path) == 5
    assert path[-1].close == 120.0


# ---------------------------------------------------------------------------
# generate_initial_series
# ---------------------------------------------------------------------------

class TestInitialSeries:

    def test_dates_end_on_end_date(self):
        candles = generate_initial_series(60, 100.0, end_date=D, rng=random.Random(1))
        assert len(candles) == 60
        assert candles[-1].date == D
        assert candles[0].date == D - timedelta(days=59)
        _assert_well_formed(candles)

    def test_defaults_to_today(self):
        candles = generate_initial_series(3, 100.0, rng=random.Random(1))
        assert candles[-1].date == date.today()

    def test_exact_walk(self, scripted_random):
        # +5 move, wick of 0 above and 5 below, every day
        candles = generate_initial_series(3, 100.0, end_date=D, rng=scripted_random([1.0, 0.0, 1.0]))
        assert [c.open for c in candles] == [100.0, 105.0, 110.0]
        assert [c.close for c in candles] == [105.0, 110.0, 115.0]
        assert [c.high for c in candles] == [105.0, 110.0, 115.0]
        assert [c.low for c in candles] == [95.0, 100.0, 105.0]

    def test_running_close_is_held_at_minimum(self, scripted_random):
        # every day drops by 5 with zero-length wicks
        candles = generate_initial_series(3, 12.0, end_date=D, rng=scripted_random([0.0]))
        assert [c.open for c in candles] == [12.0, 10.0, 10.0]
        assert [c.close for c in candles] == [7.0, 5.0, 5.0]

    @pytest.mark.parametrize("seed", range(10))
    def test_well_formed_for_many_seeds(self, seed):
        candles = generate_initial_series(60, 15.0, end_date=D, rng=random.Random(seed))
        _assert_well_formed(candles)

    def test_zero_count_is_empty(self):
        assert generate_initial_series(0, 100.0, end_date=D) == []

    def test_rejects_negative_count(self):
        with pytest.raises(ValueError, match="count"):
            generate_initial_series(-1, 100.0)

    @pytest.mark.parametrize("price", [0.0, -1.0, math.nan])
    def test_rejects_bad_starting_price(self, price):
        with pytest.raises(ValueError, match="starting_price"):
            generate_initial_series(5, price)
