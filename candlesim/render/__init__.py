from .diff import DataJoin, keyed_diff
from .plotly_backend import PlotlyBackend
from .renderer import ChartRenderer, RendererState
from .scene import CandleShape, CrosshairShape, SceneSnapshot, TickShape

__all__ = [
    "CandleShape",
    "ChartRenderer",
    "CrosshairShape",
    "DataJoin",
    "PlotlyBackend",
    "RendererState",
    "SceneSnapshot",
    "TickShape",
    "keyed_diff",
]
