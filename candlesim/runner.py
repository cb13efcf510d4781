"""
Simulation driving and the demo command line.
"""

import argparse
import asyncio
import logging
import random
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from candlesim.config import SimulatorConfig
from candlesim.controller import SimulatorController
from candlesim.render import PlotlyBackend
from candlesim.scheduling import run_realtime
from candlesim.types import Direction


log = logging.getLogger(__name__)


__all__ = [
    "configure_logging",
    "main",
    "play",
    "play_realtime",
]


def configure_logging(level: str = "INFO", force: bool = False) -> None:
    """
    Configure root logger with console output.

    By default, this is non-destructive: if the root logger already has handlers,
    it will do nothing (assuming the application has configured logging).

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        force: If True, clear existing handlers and force this configuration
    """
    root_logger = logging.getLogger()

    if root_logger.hasHandlers() and not force:
        return

    root_logger.setLevel(level.upper())

    if force:
        root_logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def _idle() -> None:
    pass


def play(controller: SimulatorController, directions: Sequence[Direction | str]) -> int:
    """
    Run each direction to completion on the controller's virtual clock.

    Each run is followed by enough idle clock time for every transition to
    finish, so a snapshot taken afterwards shows the settled scene.

    Returns:
        Number of runs started
    """
    started = 0
    for direction in directions:
        if controller.trigger_simulation(direction):
            started += 1
        controller.scheduler.run_until_idle()
        controller.scheduler.advance(controller.renderer.settle_ms)
    return started


async def play_realtime(
    controller: SimulatorController,
    directions: Sequence[Direction | str],
    *,
    speed: float = 1.0,
) -> int:
    """Same as ``play`` but paced in wall-clock time on the running event loop."""
    started = 0
    for direction in directions:
        if controller.trigger_simulation(direction):
            started += 1
        await run_realtime(controller.scheduler, speed=speed)
        controller.scheduler.call_later(controller.renderer.settle_ms, _idle, label="settle")
        await run_realtime(controller.scheduler, speed=speed)
    return started


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="candlesim",
        description="Simulate price runs on a synthetic candlestick chart and export the final scene.",
    )
    parser.add_argument(
        "--direction", "-d", action="append", choices=[d.value for d in Direction],
        help="Run direction; repeat for several consecutive runs (default: up)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible walk")
    parser.add_argument("--width", type=int, default=900)
    parser.add_argument("--height", type=int, default=420)
    parser.add_argument("--realtime", action="store_true", help="Pace the runs in wall-clock time")
    parser.add_argument("--speed", type=float, default=1.0, help="Clock multiplier with --realtime")
    parser.add_argument("--out", type=Path, default=Path("chart.html"), help="HTML file to write")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level)

    controller = SimulatorController(SimulatorConfig(), rng=random.Random(args.seed))
    controller.resize(args.width, args.height)
    directions = args.direction or [Direction.UP.value]

    if args.realtime:
        started = asyncio.run(play_realtime(controller, directions, speed=args.speed))
    else:
        started = play(controller, directions)

    path = PlotlyBackend().write_html(controller.snapshot(), args.out)
    log.info("Completed %d run%s, wrote %s", started, "s" if started != 1 else "", path)
    return 0
