"""Wires user triggers to the generator, sequencer and renderer."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date
from typing import Optional

from candlesim.config import Margin, SimulatorConfig
from candlesim.events import EventDispatcher, get_dispatcher
from candlesim.generator import RandomSource, default_random_source, generate_initial_series, generate_path
from candlesim.marketdata import Candle, CandleWindow
from candlesim.marketdata.events import (
    CandleRevealedEvent,
    SimulationCompletedEvent,
    SimulationIgnoredEvent,
    SimulationStartedEvent,
)
from candlesim.render import ChartRenderer, SceneSnapshot
from candlesim.scale import Domain, compute_domain
from candlesim.scheduling import Scheduler
from candlesim.sequencer import AnimationSequencer
from candlesim.types import Direction

log = logging.getLogger(__name__)


class SimulatorController:
    """
    Owns the visible window and the price domain for one chart.

    The window and domain are only replaced at run start (domain) or inside
    reveal callbacks (window), both on the scheduler's single execution
    context. A trigger while a run is animating is dropped.

    Example:
        controller = SimulatorController(SimulatorConfig(), rng=random.Random(7))
        controller.resize(800, 400)
        controller.trigger_simulation("up")
        controller.scheduler.run_until_idle()
    """

    def __init__(
        self,
        config: Optional[SimulatorConfig] = None,
        *,
        rng: Optional[RandomSource] = None,
        scheduler: Optional[Scheduler] = None,
        renderer: Optional[ChartRenderer] = None,
        dispatcher: Optional[EventDispatcher] = None,
        initial_candles: Optional[Iterable[Candle]] = None,
        end_date: Optional[date] = None,
    ):
        self.config = config or SimulatorConfig()
        self.rng = rng or default_random_source()
        self.scheduler = scheduler or Scheduler()
        self.renderer = renderer or ChartRenderer.from_config(self.config, self.scheduler)
        self.dispatcher = dispatcher or get_dispatcher()
        self.sequencer = AnimationSequencer(self.scheduler, self.config.step_delay_ms)

        if initial_candles is None:
            initial_candles = generate_initial_series(
                self.config.history_length,
                self.config.starting_price,
                end_date=end_date,
                rng=self.rng,
                config=self.config,
            )
        self._window = CandleWindow(initial_candles, capacity=self.config.window_capacity)
        self._domain: Optional[Domain] = (
            compute_domain(self._window, self.config.domain_padding) if len(self._window) else None
        )
        self._direction: Optional[Direction] = None
        self._revealed = 0

    @property
    def data(self) -> CandleWindow:
        return self._window

    @property
    def domain(self) -> Optional[Domain]:
        return self._domain

    @property
    def is_animating(self) -> bool:
        return self.sequencer.is_animating

    def target_price(self, direction: Direction | str) -> float:
        """Price a run in ``direction`` would converge on from the latest close."""
        d = Direction.parse(direction)
        latest = self._window.latest
        if latest is None:
            raise ValueError("cannot simulate from an empty window")
        change = self.config.price_change
        if d is Direction.UP:
            return latest.close + change
        return max(self.config.price_floor, latest.close - change)

    def trigger_simulation(self, direction: Direction | str) -> bool:
        """
        Start a run toward the next target in ``direction``.

        Returns:
            True if a run was started, False if one is already animating
        """
        d = Direction.parse(direction)
        if self.sequencer.is_animating:
            log.debug("Ignoring %s trigger: run in progress", d.value)
            self.dispatcher.publish(SimulationIgnoredEvent(direction=d))
            return False

        latest = self._window.latest
        if latest is None:
            raise ValueError("cannot simulate from an empty window")

        target = self.target_price(d)
        path = generate_path(
            latest, target, self.config.simulation_steps, rng=self.rng, config=self.config
        )
        lookback = self._window.get_candles(self.config.domain_lookback)
        self._domain = compute_domain([*lookback, *path], self.config.domain_padding)
        self._direction = d
        self._revealed = 0

        self.sequencer.run(path, self._on_reveal)
        log.info(
            "Simulating %s move %.2f -> %.2f over %d steps (domain %.2f-%.2f)",
            d.value, latest.close, target, len(path), *self._domain,
        )
        self.dispatcher.publish(
            SimulationStartedEvent(
                direction=d, target_price=target, steps=len(path), domain=tuple(self._domain)
            )
        )
        # the axis moves to the new domain before the first reveal
        self.render()
        return True

    def _on_reveal(self, candle: Candle, is_last: bool) -> None:
        self._window = self._window.appended(candle)
        index = self._revealed
        self._revealed += 1
        log.debug("Revealed %r (%d, last=%s)", candle, index, is_last)
        self.dispatcher.publish(CandleRevealedEvent(candle=candle, index=index, is_last=is_last))
        self.render(animate=True)

        if is_last:
            log.info("Simulation complete at %.2f", candle.close)
            self.dispatcher.publish(
                SimulationCompletedEvent(direction=self._direction, final_close=candle.close)
            )

    # ------------------------------------------------------------------
    # Host view hooks
    # ------------------------------------------------------------------

    def render(self, *, animate: bool = False):
        if self._domain is None:
            return None
        return self.renderer.render(self._window.get_candles(), self._domain, animate=animate)

    def resize(self, width: float, height: float, margin: Optional[Margin] = None) -> None:
        self.renderer.resize(width, height, margin or self.config.margin)
        self.render()

    def pointer_move(self, x: float, y: float) -> None:
        self.renderer.pointer_move(x, y)

    def pointer_leave(self) -> None:
        self.renderer.pointer_leave()

    def snapshot(self, now: Optional[float] = None) -> SceneSnapshot:
        return self.renderer.snapshot(now)
