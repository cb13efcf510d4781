"""Value-axis domain and the scales that map candles onto the plot area."""

import math
from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from candlesim.marketdata import PRICE_FLOOR, Candle

__all__ = [
    "BandScale",
    "Domain",
    "LinearScale",
    "ScaleMapping",
    "compute_domain",
]


class Domain(NamedTuple):
    """``[min_price, max_price]`` mapped to the chart's vertical extent."""
    min_price: float
    max_price: float

    @property
    def span(self) -> float:
        return self.max_price - self.min_price

    def contains(self, candle: Candle) -> bool:
        """True when the candle's whole wick fits inside the domain."""
        return self.min_price <= candle.low and candle.high <= self.max_price


def compute_domain(candles: Iterable[Candle], padding: float = 0.1) -> Domain:
    """
    Derive a padded price domain from a set of candles.

    Pass the visible window together with the not-yet-revealed forward path
    so the axis already covers the animation target and never rescales
    mid-run.

    Raises:
        ValueError: if no candles are supplied
    """
    items = list(candles)
    if not items:
        raise ValueError("cannot compute a domain from an empty candle set")
    lows = np.array([c.low for c in items], dtype=np.float64)
    highs = np.array([c.high for c in items], dtype=np.float64)
    lowest = float(lows.min())
    highest = float(highs.max())
    pad = (highest - lowest) * padding
    return Domain(max(PRICE_FLOOR, lowest - pad), highest + pad)


def _tick_step(start: float, stop: float, count: int) -> float:
    """Nice step of 1, 2 or 5 x 10^k giving roughly ``count`` intervals."""
    raw = abs(stop - start) / max(1, count)
    power = 10 ** math.floor(math.log10(raw))
    error = raw / power
    if error >= math.sqrt(50):
        power *= 10
    elif error >= math.sqrt(10):
        power *= 5
    elif error >= math.sqrt(2):
        power *= 2
    return power


class LinearScale:
    """Continuous mapping from a price domain onto a pixel range."""

    def __init__(self, domain: Sequence[float], range_: Sequence[float]):
        self.d0, self.d1 = float(domain[0]), float(domain[1])
        self.r0, self.r1 = float(range_[0]), float(range_[1])

    @property
    def domain(self) -> tuple[float, float]:
        return (self.d0, self.d1)

    @property
    def range(self) -> tuple[float, float]:
        return (self.r0, self.r1)

    def __call__(self, value: float) -> float:
        if self.d1 == self.d0:
            return (self.r0 + self.r1) / 2
        t = (value - self.d0) / (self.d1 - self.d0)
        return self.r0 + t * (self.r1 - self.r0)

    def invert(self, pixel: float) -> float:
        if self.r1 == self.r0:
            return self.d0
        t = (pixel - self.r0) / (self.r1 - self.r0)
        return self.d0 + t * (self.d1 - self.d0)

    def ticks(self, count: int = 10) -> list[float]:
        """Evenly spaced round values inside the domain."""
        lo, hi = min(self.d0, self.d1), max(self.d0, self.d1)
        if count <= 0 or not (math.isfinite(lo) and math.isfinite(hi)):
            return []
        if lo == hi:
            return [lo]
        step = _tick_step(lo, hi, count)
        if step >= 1:
            first, last = math.ceil(lo / step), math.floor(hi / step)
            return [i * step for i in range(first, last + 1)]
        inv = round(1 / step)
        first, last = math.ceil(lo * inv), math.floor(hi * inv)
        return [i / inv for i in range(first, last + 1)]


class BandScale:
    """Ordinal scale dividing a pixel range into equal bands, one per key."""

    def __init__(self, keys: Iterable[Hashable], range_: Sequence[float], padding: float = 0.3, align: float = 0.5):
        self.keys = list(keys)
        self.r0, self.r1 = float(range_[0]), float(range_[1])
        self.padding = padding
        self._index = {k: i for i, k in enumerate(self.keys)}

        n = len(self.keys)
        width = self.r1 - self.r0
        self.step = width / max(1.0, n - padding + padding * 2)
        self.start = self.r0 + (width - self.step * (n - padding)) * align
        self.bandwidth = self.step * (1 - padding)

    def __call__(self, key: Hashable) -> float | None:
        """Left edge of the key's band, or None for an unknown key."""
        i = self._index.get(key)
        if i is None:
            return None
        return self.start + self.step * i

    def __contains__(self, key: Hashable) -> bool:
        return key in self._index

    def __len__(self) -> int:
        return len(self.keys)


@dataclass(frozen=True)
class ScaleMapping:
    """Scales for one render: dates along x, prices along y."""
    x: BandScale
    y: LinearScale
    inner_width: float
    inner_height: float

    @classmethod
    def build(
        cls,
        candles: Iterable[Candle],
        domain: Sequence[float],
        inner_width: float,
        inner_height: float,
        *,
        padding: float = 0.3,
    ) -> "ScaleMapping":
        x = BandScale([c.date for c in candles], (0, inner_width), padding=padding)
        y = LinearScale(domain, (inner_height, 0))
        return cls(x=x, y=y, inner_width=inner_width, inner_height=inner_height)
