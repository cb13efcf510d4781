"""
candlesim - synthetic candlestick price walks with an animated chart scene.

Provides a seedable price-walk generator, a stable value-axis scale, a keyed
chart renderer with timed transitions, and a sequencer that reveals
generated runs one candle at a time on an injectable clock.
"""

from .config import ChartStyle, Margin, SimulatorConfig
from .controller import SimulatorController
from .generator import RandomSource, generate_initial_series, generate_path
from .marketdata import Candle, CandleWindow
from .render import ChartRenderer, PlotlyBackend, SceneSnapshot
from .scale import Domain, compute_domain
from .scheduling import Scheduler, run_realtime
from .sequencer import AnimationSequencer
from .types import Direction

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AnimationSequencer",
    "Candle",
    "CandleWindow",
    "ChartRenderer",
    "ChartStyle",
    "Direction",
    "Domain",
    "Margin",
    "PlotlyBackend",
    "RandomSource",
    "SceneSnapshot",
    "Scheduler",
    "SimulatorConfig",
    "SimulatorController",
    "compute_domain",
    "generate_initial_series",
    "generate_path",
    "run_realtime",
]
