# examples/simulate.py
"""Drive the simulator programmatically and print each revealed candle."""
import logging
import random

from candlesim import SimulatorConfig, SimulatorController
from candlesim.events import get_dispatcher
from candlesim.marketdata.events import CandleRevealedEvent, SimulationCompletedEvent
from candlesim.render import PlotlyBackend
from candlesim.runner import configure_logging

log = logging.getLogger(__name__)


def on_revealed(event: CandleRevealedEvent):
    log.info("%d: %r", event.index, event.candle)


def on_completed(event: SimulationCompletedEvent):
    log.info("%s run finished at %.2f", event.direction.value, event.final_close)


if __name__ == "__main__":
    configure_logging("INFO")

    dispatcher = get_dispatcher()
    dispatcher.subscribe(CandleRevealedEvent, on_revealed)
    dispatcher.subscribe(SimulationCompletedEvent, on_completed)

    config = SimulatorConfig(simulation_steps=8, price_change=30.0)
    controller = SimulatorController(config, rng=random.Random(2024))
    controller.resize(1000, 480)

    for direction in ("up", "up", "down"):
        controller.trigger_simulation(direction)
        controller.scheduler.run_until_idle()

    # hover halfway down the plot so the exported chart shows the crosshair
    controller.pointer_move(500, 240)
    PlotlyBackend().write_html(controller.snapshot(), "simulate.html")
