"""Scene graph elements and the resolved, backend-neutral snapshot."""

from dataclasses import dataclass, field
from datetime import date
from typing import Hashable, Optional

from candlesim.config import ChartStyle, Margin
from candlesim.marketdata import Candle
from candlesim.render.transitions import AnimatedAttrs


@dataclass
class CandleMark:
    """Live scene element for one candle: a wick line plus a body rect."""
    key: date
    candle: Candle
    color: str
    attrs: AnimatedAttrs = field(default_factory=AnimatedAttrs)
    exiting: bool = False

    def shape(self, now: float) -> "CandleShape":
        v = self.attrs.resolve(now)
        return CandleShape(
            key=self.key,
            x=v["x"],
            width=v["width"],
            wick_x=v["x"] + v["width"] / 2,
            wick_y1=v["wick_y1"],
            wick_y2=v["wick_y2"],
            body_y=v["body_y"],
            body_height=v["body_height"],
            color=self.color,
            opacity=v.get("opacity", 1.0),
        )


@dataclass
class TickMark:
    """Live scene element for one axis tick (and its gridline on the value axis)."""
    key: Hashable
    label: str
    attrs: AnimatedAttrs = field(default_factory=AnimatedAttrs)
    exiting: bool = False

    def shape(self, now: float) -> "TickShape":
        v = self.attrs.resolve(now)
        return TickShape(key=self.key, position=v["position"], label=self.label, opacity=v.get("opacity", 1.0))


@dataclass(frozen=True)
class CandleShape:
    key: date
    x: float
    width: float
    wick_x: float
    wick_y1: float
    wick_y2: float
    body_y: float
    body_height: float
    color: str
    opacity: float


@dataclass(frozen=True)
class TickShape:
    key: Hashable
    position: float
    label: str
    opacity: float


@dataclass(frozen=True)
class CrosshairShape:
    """Guide lines through (x, y) in plot coordinates plus the price label."""
    x: float
    y: float
    price: float
    label: str
    label_x: float


@dataclass(frozen=True)
class SceneSnapshot:
    """Every scene element resolved at one clock time, in plot coordinates.

    Plot coordinates start at the top-left corner of the plot area; add the
    margin to get container coordinates.
    """
    time_ms: float
    width: float
    height: float
    margin: Margin
    inner_width: float
    inner_height: float
    style: ChartStyle
    candles: tuple[CandleShape, ...] = ()
    value_ticks: tuple[TickShape, ...] = ()
    time_ticks: tuple[TickShape, ...] = ()
    crosshair: Optional[CrosshairShape] = None

    @property
    def gridlines(self) -> tuple[float, ...]:
        """Vertical positions of the horizontal gridlines."""
        return tuple(t.position for t in self.value_ticks)

    def candle(self, key: date) -> Optional[CandleShape]:
        for shape in self.candles:
            if shape.key == key:
                return shape
        return None
