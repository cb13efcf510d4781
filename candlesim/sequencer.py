import logging
from collections.abc import Sequence
from typing import Callable, Optional

from candlesim.marketdata import Candle
from candlesim.scheduling import Scheduler

log = logging.getLogger(__name__)

RevealCallback = Callable[[Candle, bool], None]


class AnimationSequencer:
    """
    Reveals a generated path one candle at a time.

    Reveal ``i`` is scheduled ``(i + 1) * step_delay_ms`` after ``run`` is
    called, so the first candle appears after one full delay. Only one run
    may be active; a ``run`` call while animating is dropped, not queued.
    Runs always complete once started.
    """

    def __init__(self, scheduler: Scheduler, step_delay_ms: float = 400.0):
        if step_delay_ms < 0:
            raise ValueError(f"step_delay_ms must be >= 0, got {step_delay_ms}")
        self.scheduler = scheduler
        self.step_delay_ms = float(step_delay_ms)
        self._animating = False
        self._runs = 0

    @property
    def is_animating(self) -> bool:
        return self._animating

    def run(
        self,
        path: Sequence[Candle],
        on_reveal: RevealCallback,
        step_delay_ms: Optional[float] = None,
    ) -> bool:
        """
        Schedule the staggered reveal of ``path``.

        Args:
            path: Candles to reveal, in order
            on_reveal: Called with ``(candle, is_last)`` for each reveal
            step_delay_ms: Override of the per-step delay for this run

        Returns:
            True if the run was scheduled, False if it was dropped
        """
        if self._animating:
            log.debug("Run dropped: %d-candle run requested while animating", len(path))
            return False
        if not path:
            return False

        delay = self.step_delay_ms if step_delay_ms is None else float(step_delay_ms)
        if delay < 0:
            raise ValueError(f"step_delay_ms must be >= 0, got {delay}")

        self._animating = True
        self._runs += 1
        run_id = self._runs
        last = len(path) - 1
        for i, candle in enumerate(path):
            self.scheduler.call_later(
                (i + 1) * delay,
                self._make_reveal(candle, i == last, on_reveal),
                label=f"run {run_id} reveal {i + 1}/{len(path)}",
            )
        return True

    def _make_reveal(self, candle: Candle, is_last: bool, on_reveal: RevealCallback) -> Callable[[], None]:
        def reveal() -> None:
            if is_last:
                self._animating = False
            on_reveal(candle, is_last)

        return reveal
