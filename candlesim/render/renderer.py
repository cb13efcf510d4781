"""Candlestick chart scene with keyed enter/update/exit reconciliation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from candlesim.config import ChartStyle, Margin
from candlesim.marketdata import Candle
from candlesim.render.axes import AxisLayer, time_tick_positions, value_tick_positions
from candlesim.render.diff import DataJoin, keyed_diff
from candlesim.render.scene import CandleMark, CrosshairShape, SceneSnapshot
from candlesim.scale import ScaleMapping
from candlesim.scheduling import Scheduler

if TYPE_CHECKING:
    from candlesim.config import SimulatorConfig

log = logging.getLogger(__name__)

__all__ = ["ChartRenderer", "RendererState"]

_LABEL_HALF_WIDTH = 30


class RendererState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    RENDERING = "rendering"


class ChartRenderer:
    """
    Owns the chart scene: candle marks, both axes, gridlines and the crosshair.

    The scene is created once and then reconciled against the current window
    on every ``render`` call. Candle marks are keyed by date:

      - exiting marks fade out over ``exit_duration_ms`` and are then removed
      - updating marks move to the new scales in place
      - entering marks appear at full size, or with ``animate=True`` grow from
        their open price over ``enter_duration_ms``

    Nothing here draws pixels; ``snapshot`` resolves the scene at a clock
    time and a backend (see ``PlotlyBackend``) draws the result.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        style: Optional[ChartStyle] = None,
        enter_duration_ms: float = 400.0,
        exit_duration_ms: float = 200.0,
        axis_duration_ms: float = 300.0,
    ):
        self.scheduler = scheduler
        self.style = style or ChartStyle()
        self.enter_duration_ms = enter_duration_ms
        self.exit_duration_ms = exit_duration_ms
        self.axis_duration_ms = axis_duration_ms

        self.state = RendererState.UNINITIALIZED
        self.width = 0.0
        self.height = 0.0
        self.margin = Margin()
        self.mapping: Optional[ScaleMapping] = None

        self._marks: dict[date, CandleMark] = {}
        self._exiting: dict[date, CandleMark] = {}
        self._value_axis = AxisLayer(scheduler, axis_duration_ms)
        self._time_axis = AxisLayer(scheduler, axis_duration_ms)
        self._pointer: Optional[tuple[float, float]] = None
        self._crosshair: Optional[CrosshairShape] = None

    @classmethod
    def from_config(cls, config: SimulatorConfig, scheduler: Scheduler) -> ChartRenderer:
        return cls(
            scheduler,
            style=config.style,
            enter_duration_ms=config.enter_duration_ms,
            exit_duration_ms=config.exit_duration_ms,
            axis_duration_ms=config.axis_duration_ms,
        )

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @property
    def settle_ms(self) -> float:
        """Longest transition; this long after the last render every mark is at rest."""
        return max(self.enter_duration_ms, self.exit_duration_ms, self.axis_duration_ms)

    @property
    def inner_width(self) -> float:
        return self.width - self.margin.left - self.margin.right

    @property
    def inner_height(self) -> float:
        return self.height - self.margin.top - self.margin.bottom

    def resize(self, width: float, height: float, margin: Optional[Margin] = None) -> None:
        """Record the container size; takes effect on the next ``render``."""
        self.width = float(width)
        self.height = float(height)
        if margin is not None:
            self.margin = margin

    def initialize(self) -> None:
        """Create the empty scene. Only the first call has any effect."""
        if self.state is not RendererState.UNINITIALIZED:
            return
        self._marks.clear()
        self._exiting.clear()
        self.state = RendererState.INITIALIZED
        log.info("Chart scene initialised at %.0fx%.0f", self.width, self.height)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, candles: Sequence[Candle], domain: Sequence[float], *, animate: bool = False) -> Optional[DataJoin]:
        """
        Reconcile the scene against ``candles`` using a fixed price ``domain``.

        Returns:
            The data join that was applied, or None when the render was
            skipped (no data yet, or a container with no plot area)
        """
        if not candles or self.inner_width <= 0 or self.inner_height <= 0:
            log.debug(
                "Render skipped: %d candles, plot area %.0fx%.0f",
                len(candles), self.inner_width, self.inner_height,
            )
            return None

        self.initialize()
        self.state = RendererState.RENDERING
        for mark in self._marks.values():
            mark.attrs.settle(self.scheduler.now)

        previous = self.mapping
        mapping = ScaleMapping.build(
            candles, domain, self.inner_width, self.inner_height, padding=self.style.band_padding
        )
        self.mapping = mapping

        self._update_axes(previous, mapping)
        join = keyed_diff(self._marks.keys(), candles, key=lambda c: c.date)
        self._exit(join.exiting)
        self._update(join.updating, mapping)
        self._enter(join.entering, mapping, animate=animate)
        self._refresh_crosshair()

        log.debug("Rendered %s", join)
        return join

    def _geometry(self, candle: Candle, mapping: ScaleMapping) -> dict[str, float]:
        y = mapping.y
        body_top = y(candle.body_top)
        body_height = max(self.style.min_body_height, abs(y(candle.open) - y(candle.close)))
        return {
            "x": mapping.x(candle.date),
            "width": mapping.x.bandwidth,
            "wick_y1": y(candle.high),
            "wick_y2": y(candle.low),
            "body_y": body_top,
            "body_height": body_height,
            "opacity": 1.0,
        }

    def _exit(self, keys: Sequence[date]) -> None:
        now = self.scheduler.now
        for key in keys:
            mark = self._marks.pop(key)
            mark.exiting = True
            self._exiting[key] = mark
            mark.attrs.animate({"opacity": 0.0}, now, self.exit_duration_ms)
            self.scheduler.call_later(self.exit_duration_ms, self._remover(key, mark))

    def _remover(self, key: date, mark: CandleMark) -> Callable[[], None]:
        def remove() -> None:
            if self._exiting.get(key) is mark:
                del self._exiting[key]

        return remove

    def _update(self, candles: Sequence[Candle], mapping: ScaleMapping) -> None:
        for candle in candles:
            mark = self._marks[candle.date]
            mark.candle = candle
            mark.color = self.style.candle_color(candle.is_bearish)
            mark.attrs.set(self._geometry(candle, mapping))

    def _enter(self, candles: Sequence[Candle], mapping: ScaleMapping, *, animate: bool) -> None:
        now = self.scheduler.now
        for candle in candles:
            # a key that re-enters while still fading out gets a fresh mark
            self._exiting.pop(candle.date, None)
            mark = CandleMark(
                key=candle.date,
                candle=candle,
                color=self.style.candle_color(candle.is_bearish),
            )
            final = self._geometry(candle, mapping)
            if animate:
                y_open = mapping.y(candle.open)
                mark.attrs.set({
                    **final,
                    "wick_y1": y_open,
                    "wick_y2": y_open,
                    "body_y": y_open,
                    "body_height": 0.0,
                })
                mark.attrs.animate(
                    {k: final[k] for k in ("wick_y1", "wick_y2", "body_y", "body_height")},
                    now,
                    self.enter_duration_ms,
                )
            else:
                mark.attrs.set(final)
            self._marks[candle.date] = mark

    def _update_axes(self, previous: Optional[ScaleMapping], mapping: ScaleMapping) -> None:
        animate = previous is not None
        self._value_axis.update(
            value_tick_positions(mapping.y, self.style.value_tick_count),
            old_position=(lambda v: previous.y(v)) if previous is not None else None,
            new_position=lambda v: mapping.y(v),
            animate=animate,
        )

        def band_centre(scale_mapping: ScaleMapping, key: date) -> Optional[float]:
            left = scale_mapping.x(key)
            return None if left is None else left + scale_mapping.x.bandwidth / 2

        self._time_axis.update(
            time_tick_positions(mapping.x, self.style.time_tick_count),
            old_position=(lambda k: band_centre(previous, k)) if previous is not None else None,
            new_position=lambda k: band_centre(mapping, k),
            animate=animate,
        )

    # ------------------------------------------------------------------
    # Crosshair
    # ------------------------------------------------------------------

    def pointer_move(self, x: float, y: float) -> None:
        """
        Track the pointer, given in container coordinates.

        Inside the plot area the crosshair follows the pointer and labels the
        price under it; anywhere else it is hidden.
        """
        self._pointer = (x - self.margin.left, y - self.margin.top)
        self._refresh_crosshair()

    def pointer_leave(self) -> None:
        self._pointer = None
        self._crosshair = None

    def _refresh_crosshair(self) -> None:
        if self._pointer is None or self.mapping is None:
            self._crosshair = None
            return
        px, py = self._pointer
        if not (0 <= px <= self.inner_width and 0 <= py <= self.inner_height):
            self._crosshair = None
            return
        price = self.mapping.y.invert(py)
        label_x = min(self.inner_width - _LABEL_HALF_WIDTH, max(_LABEL_HALF_WIDTH, px))
        self._crosshair = CrosshairShape(x=px, y=py, price=price, label=f"{price:.2f}", label_x=label_x)

    @property
    def crosshair(self) -> Optional[CrosshairShape]:
        return self._crosshair

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def keys(self) -> list[date]:
        """Dates of the live (non-exiting) candle marks, in window order."""
        return list(self._marks)

    def exiting_keys(self) -> list[date]:
        return list(self._exiting)

    def snapshot(self, now: Optional[float] = None) -> SceneSnapshot:
        """Resolve every element of the scene at clock time ``now`` (default: scheduler time)."""
        t = self.scheduler.now if now is None else now
        shapes = [m.shape(t) for m in self._exiting.values()] + [m.shape(t) for m in self._marks.values()]
        return SceneSnapshot(
            time_ms=t,
            width=self.width,
            height=self.height,
            margin=self.margin,
            inner_width=self.inner_width,
            inner_height=self.inner_height,
            style=self.style,
            candles=tuple(shapes),
            value_ticks=self._value_axis.shapes(t),
            time_ticks=self._time_axis.shapes(t),
            crosshair=self._crosshair,
        )
