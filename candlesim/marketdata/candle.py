from dataclasses import dataclass
from datetime import date

PRICE_FLOOR = 0.01


@dataclass(frozen=True)
class Candle:
    """
    Represents a single daily OHLC candle.

    Attributes:
        date: Trading day the candle belongs to (unique within a sequence)
        open: Opening price
        high: Highest price during the day
        low: Lowest price during the day
        close: Closing price
    """

    date: date
    open: float
    high: float
    low: float
    close: float

    @property
    def is_bearish(self) -> bool:
        """True when the candle closed below its open (drawn red)."""
        return self.open > self.close

    @property
    def body_top(self) -> float:
        return max(self.open, self.close)

    @property
    def body_bottom(self) -> float:
        return min(self.open, self.close)

    @property
    def range(self) -> float:
        """Calculate candle range (high - low)."""
        return self.high - self.low

    def check_invariants(self) -> None:
        """
        Validate OHLC ordering and the price floor.

        Raises:
            ValueError: if high/low do not enclose the body or any price
                is below the floor
        """
        if self.high < self.body_top:
            raise ValueError(f"high {self.high} below body top {self.body_top} on {self.date}")
        if self.low > self.body_bottom:
            raise ValueError(f"low {self.low} above body bottom {self.body_bottom} on {self.date}")
        for name in ("open", "high", "low", "close"):
            if getattr(self, name) < PRICE_FLOOR:
                raise ValueError(f"{name} below {PRICE_FLOOR} on {self.date}")

    def __repr__(self) -> str:
        return (
            f"Candle(date={self.date.isoformat()}, "
            f"O={self.open:.2f}, H={self.high:.2f}, "
            f"L={self.low:.2f}, C={self.close:.2f})"
        )
