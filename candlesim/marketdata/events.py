from candlesim.events import DomainEvent, event
from candlesim.types import Direction

from .candle import Candle

__all__ = [
    "CandleRevealedEvent",
    "SimulationCompletedEvent",
    "SimulationIgnoredEvent",
    "SimulationStartedEvent",
]


@event
class SimulationStartedEvent(DomainEvent):
    """Emitted when a run has been generated and scheduled."""

    direction: Direction
    target_price: float
    steps: int
    domain: tuple[float, float]


@event
class CandleRevealedEvent(DomainEvent):
    candle: Candle
    index: int
    is_last: bool


@event
class SimulationCompletedEvent(DomainEvent):
    direction: Direction
    final_close: float


@event
class SimulationIgnoredEvent(DomainEvent):
    """Emitted when a trigger arrives while a run is still animating."""

    direction: Direction
