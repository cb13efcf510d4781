"""Stochastic price walks.

Two generators share the same candle construction rules:

* ``generate_initial_series`` builds the historical run shown on first load.
* ``generate_path`` builds a forward run that drifts toward a target price
  and lands on it exactly on the final step.

All randomness is drawn from an injectable ``RandomSource`` so that a seeded
source reproduces a sequence exactly.
"""

import math
import random
from datetime import date, timedelta
from typing import Optional, Protocol

from candlesim.config import SimulatorConfig
from candlesim.marketdata import Candle

__all__ = [
    "RandomSource",
    "default_random_source",
    "generate_initial_series",
    "generate_path",
]

ONE_DAY = timedelta(days=1)
_NUDGE_MIN = 0.1
_NUDGE_MAX = 0.5


class RandomSource(Protocol):
    """Minimal random-number interface (satisfied by ``random.Random``)."""

    def random(self) -> float: ...

    def uniform(self, a: float, b: float) -> float: ...


def default_random_source() -> RandomSource:
    return random.Random()


def _wicks(open_: float, close: float, rng: RandomSource, wick_range: float) -> tuple[float, float]:
    high = max(open_, close) + rng.uniform(0, wick_range)
    low = min(open_, close) - rng.uniform(0, wick_range)
    return high, low


def _same_at_cents(a: float, b: float) -> bool:
    return round(a, 2) == round(b, 2)


def _nudge(value: float, rng: RandomSource, floor: float) -> float:
    """Move ``value`` by 0.1-0.5 in a random direction, upward if down would hit the floor."""
    amount = rng.uniform(_NUDGE_MIN, _NUDGE_MAX)
    sign = 1 if rng.random() > 0.5 else -1
    if sign < 0 and value - amount < floor + _NUDGE_MIN:
        sign = 1
    return value + sign * amount


def generate_initial_series(
    count: int,
    starting_price: float,
    *,
    end_date: Optional[date] = None,
    rng: Optional[RandomSource] = None,
    config: Optional[SimulatorConfig] = None,
) -> list[Candle]:
    """
    Generate ``count`` daily candles ending on ``end_date`` (default today).

    Each day opens at the previous close and moves by a uniform random amount
    in ``[-initial_move_range, initial_move_range]``, with the same zero-body
    guard as ``generate_path``. The running close is held
    at or above ``min_running_close`` so the series cannot drift to zero.

    Raises:
        ValueError: on a negative count or a non-positive starting price
    """
    cfg = config or SimulatorConfig()
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    if not math.isfinite(starting_price) or starting_price <= 0:
        raise ValueError(f"starting_price must be a positive finite number, got {starting_price}")

    rng = rng or default_random_source()
    end = end_date or date.today()
    floor = cfg.price_floor

    candles: list[Candle] = []
    last_close = float(starting_price)
    for i in range(count):
        day = end - (count - 1 - i) * ONE_DAY
        open_ = last_close
        close = max(floor, open_ + rng.uniform(-cfg.initial_move_range, cfg.initial_move_range))
        if _same_at_cents(open_, close):
            close = _nudge(close, rng, floor)
        high, low = _wicks(open_, close, rng, cfg.wick_range)
        candles.append(
            Candle(
                date=day,
                open=max(floor, open_),
                high=max(floor, high),
                low=max(floor, low),
                close=max(floor, close),
            )
        )
        last_close = max(cfg.min_running_close, close)

    return candles


def generate_path(
    start: Candle,
    target_price: float,
    steps: int,
    *,
    rng: Optional[RandomSource] = None,
    config: Optional[SimulatorConfig] = None,
) -> list[Candle]:
    """
    Generate ``steps`` daily candles walking from ``start`` to ``target_price``.

    The drift per step is computed once from the total distance and scaled by
    ``drift_multiplier`` so the walk overshoots on average, then a uniform
    random move is added each day. The final close is pinned to the target.

    Bodies never collapse to zero height at cent precision: intermediate
    closes are nudged, and on the pinned final step the open is nudged
    instead so the target is still hit exactly. That final open is then not
    the previous close; it is off by 0.1-0.5.

    Raises:
        ValueError: if steps < 1 or target_price is not a positive finite number
    """
    cfg = config or SimulatorConfig()
    if steps < 1:
        raise ValueError(f"steps must be >= 1, got {steps}")
    if not math.isfinite(target_price) or target_price < cfg.price_floor:
        raise ValueError(f"target_price must be a finite price >= {cfg.price_floor}, got {target_price}")

    rng = rng or default_random_source()
    floor = cfg.price_floor

    total_change = target_price - start.close
    direction = 1 if total_change > 0 else -1
    drift = abs(total_change / steps * cfg.drift_multiplier)

    candles: list[Candle] = []
    prev_date = start.date
    prev_close = start.close
    for i in range(steps):
        day = prev_date + ONE_DAY
        open_ = prev_close
        random_move = rng.uniform(-cfg.random_move_range, cfg.random_move_range)

        if i == steps - 1:
            close = target_price
            if _same_at_cents(open_, close):
                open_ = max(floor, _nudge(open_, rng, floor))
        else:
            close = max(floor, open_ + direction * drift + random_move)
            if _same_at_cents(open_, close):
                close = _nudge(close, rng, floor)

        high, low = _wicks(open_, close, rng, cfg.wick_range)
        candle = Candle(
            date=day,
            open=max(floor, open_),
            high=max(floor, high),
            low=max(floor, low),
            close=max(floor, close),
        )
        candles.append(candle)
        prev_date = day
        prev_close = candle.close

    return candles
