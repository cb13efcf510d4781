from collections.abc import Iterable, Iterator
from typing import Optional

import numpy as np

from candlesim.marketdata.candle import Candle

DEFAULT_CAPACITY = 60


class CandleWindow:
    """
    Bounded, chronologically ordered window of the most recent candles.

    The window is never mutated in place: ``appended`` returns a new window,
    so a renderer holding the previous one still sees a consistent sequence.
    Once the length would exceed ``capacity`` the oldest candles are evicted
    first.

    Example:
        window = CandleWindow(initial_candles, capacity=60)
        window = window.appended(candle)

        highs = window.get_highs()
        closes = window.get_closes(count=20)  # Last 20 candles only
    """

    __slots__ = ("_candles", "capacity")

    def __init__(self, candles: Iterable[Candle] = (), capacity: int = DEFAULT_CAPACITY):
        """
        Initialize the window.

        Args:
            candles: Candles in chronological order; only the newest
                ``capacity`` are retained
            capacity: Maximum number of candles to retain

        Raises:
            ValueError: if capacity < 1 or the dates are not strictly increasing
        """
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        items = tuple(candles)
        for prev, cur in zip(items, items[1:]):
            if cur.date <= prev.date:
                raise ValueError(f"candle dates must be strictly increasing: {prev.date} -> {cur.date}")
        self.capacity = capacity
        self._candles: tuple[Candle, ...] = items[-capacity:]

    def appended(self, candle: Candle) -> "CandleWindow":
        """
        Return a new window with ``candle`` added at the end.

        Evicts the oldest candle when the window is already at capacity.
        """
        latest = self.latest
        if latest is not None and candle.date <= latest.date:
            raise ValueError(f"candle on {candle.date} is not after latest {latest.date}")
        out = CandleWindow.__new__(CandleWindow)
        out.capacity = self.capacity
        out._candles = (self._candles + (candle,))[-self.capacity:]
        return out

    def get_candles(self, count: Optional[int] = None) -> list[Candle]:
        """
        Get candle objects.

        Args:
            count: Number of most recent candles to return (None = all)

        Returns:
            List of Candle objects, oldest first
        """
        if count is None:
            return list(self._candles)
        return list(self._candles[-count:]) if count > 0 else []

    def get_opens(self, count: Optional[int] = None) -> np.ndarray:
        """Get array of opening prices."""
        candles = self.get_candles(count)
        return np.array([c.open for c in candles], dtype=np.float64)

    def get_highs(self, count: Optional[int] = None) -> np.ndarray:
        """Get array of high prices."""
        candles = self.get_candles(count)
        return np.array([c.high for c in candles], dtype=np.float64)

    def get_lows(self, count: Optional[int] = None) -> np.ndarray:
        """Get array of low prices."""
        candles = self.get_candles(count)
        return np.array([c.low for c in candles], dtype=np.float64)

    def get_closes(self, count: Optional[int] = None) -> np.ndarray:
        """Get array of closing prices."""
        candles = self.get_candles(count)
        return np.array([c.close for c in candles], dtype=np.float64)

    def dates(self) -> list:
        return [c.date for c in self._candles]

    @property
    def latest(self) -> Optional[Candle]:
        """Get the most recent candle, or None if empty."""
        return self._candles[-1] if self._candles else None

    def __getitem__(self, index):
        return self._candles[index]

    def __iter__(self) -> Iterator[Candle]:
        return iter(self._candles)

    def __len__(self) -> int:
        """Return number of candles in the window."""
        return len(self._candles)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CandleWindow):
            return NotImplemented
        return self.capacity == other.capacity and self._candles == other._candles

    def __hash__(self) -> int:
        return hash((self.capacity, self._candles))

    def __repr__(self) -> str:
        return f"CandleWindow(candles={len(self)}/{self.capacity})"
