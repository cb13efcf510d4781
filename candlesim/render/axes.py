import math
from collections.abc import Callable, Hashable, Sequence
from datetime import date
from typing import Optional

from candlesim.render.diff import keyed_diff
from candlesim.render.scene import TickMark, TickShape
from candlesim.scale import BandScale, LinearScale
from candlesim.scheduling import Scheduler


def format_price(value: float) -> str:
    return f"${value:.0f}"


def format_day(day: date) -> str:
    return day.strftime("%b %d")


def value_tick_positions(y: LinearScale, count: int = 8) -> list[tuple[float, float, str]]:
    """(value, pixel, label) for roughly ``count`` round prices."""
    return [(round(v, 10), y(v), format_price(v)) for v in y.ticks(count)]


def time_tick_positions(x: BandScale, count: int = 8) -> list[tuple[date, float, str]]:
    """
    (date, pixel, label) for every ``ceil(n / count)``-th date.

    Positions are band centres so labels sit under their candles.
    """
    n = len(x)
    if n == 0:
        return []
    every = math.ceil(n / count)
    out = []
    for i, key in enumerate(x.keys):
        if i % every == 0:
            out.append((key, x(key) + x.bandwidth / 2, format_day(key)))
    return out


class AxisLayer:
    """
    Ticks of one axis, keyed by tick value.

    When the scale changes, surviving ticks slide to their new positions,
    new ticks fade in from where the old scale would have put them, and
    dropped ticks fade out and are then removed.
    """

    def __init__(self, scheduler: Scheduler, duration_ms: float = 300.0):
        self.scheduler = scheduler
        self.duration_ms = duration_ms
        self.ticks: dict[Hashable, TickMark] = {}
        self._exiting: dict[Hashable, TickMark] = {}

    def update(
        self,
        ticks: Sequence[tuple[Hashable, float, str]],
        *,
        old_position: Optional[Callable[[Hashable], Optional[float]]] = None,
        new_position: Optional[Callable[[Hashable], Optional[float]]] = None,
        animate: bool = True,
    ) -> None:
        now = self.scheduler.now
        join = keyed_diff(self.ticks.keys(), ticks, key=lambda t: t[0])

        for key in join.exiting:
            mark = self.ticks.pop(key)
            if not animate:
                continue
            mark.exiting = True
            self._exiting[key] = mark
            self.scheduler.call_later(self.duration_ms, self._remover(key, mark))
            targets = {"opacity": 0.0}
            pos = new_position(key) if new_position is not None else None
            if pos is not None:
                targets["position"] = pos
            mark.attrs.animate(targets, now, self.duration_ms)

        for key, pos, label in join.updating:
            mark = self.ticks[key]
            mark.label = label
            if animate:
                mark.attrs.animate({"position": pos, "opacity": 1.0}, now, self.duration_ms)
            else:
                mark.attrs.set({"position": pos, "opacity": 1.0})

        for key, pos, label in join.entering:
            self._exiting.pop(key, None)
            mark = TickMark(key=key, label=label)
            start = old_position(key) if (animate and old_position is not None) else None
            if start is None or not animate:
                mark.attrs.set({"position": pos, "opacity": 1.0})
            else:
                mark.attrs.set({"position": start, "opacity": 0.0})
                mark.attrs.animate({"position": pos, "opacity": 1.0}, now, self.duration_ms)
            self.ticks[key] = mark

    def _remover(self, key: Hashable, mark: TickMark) -> Callable[[], None]:
        def remove() -> None:
            if self._exiting.get(key) is mark:
                del self._exiting[key]

        return remove

    def shapes(self, now: float) -> tuple[TickShape, ...]:
        live = [m.shape(now) for m in self.ticks.values()]
        fading = [m.shape(now) for m in self._exiting.values()]
        return tuple(sorted(live + fading, key=lambda s: s.position))
