from .candle import PRICE_FLOOR, Candle
from .window import DEFAULT_CAPACITY, CandleWindow

__all__ = [
    "Candle",
    "CandleWindow",
    "DEFAULT_CAPACITY",
    "PRICE_FLOOR",
]
