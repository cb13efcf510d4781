from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Callable

Easing = Callable[[float], float]


def ease_cubic_in_out(t: float) -> float:
    t *= 2
    if t <= 1:
        return t * t * t / 2
    t -= 2
    return (t * t * t + 2) / 2


def ease_linear(t: float) -> float:
    return t


@dataclass
class Transition:
    """Numeric interpolation of a set of attributes over a time span (ms)."""
    start: dict[str, float]
    end: dict[str, float]
    begin_ms: float
    duration_ms: float
    ease: Easing = ease_cubic_in_out

    def progress(self, now: float) -> float:
        if self.duration_ms <= 0:
            return 1.0
        return min(1.0, max(0.0, (now - self.begin_ms) / self.duration_ms))

    def finished(self, now: float) -> bool:
        return self.progress(now) >= 1.0

    def value_at(self, now: float) -> dict[str, float]:
        k = self.ease(self.progress(now))
        return {
            name: self.start[name] + (self.end[name] - self.start[name]) * k
            for name in self.end
        }


@dataclass
class AnimatedAttrs:
    """
    Attribute values of one scene element, with at most one running transition.

    Writing a value that is under transition retargets the transition's end
    value and keeps its timing, so a growing candle that gets repositioned
    keeps growing toward its new geometry.

    Starting a new transition freezes whatever the previous one was moving
    at its current value, so a candle that exits mid-growth fades out at
    its partial height.
    """
    values: dict[str, float] = field(default_factory=dict)
    transition: Transition | None = None

    def set(self, new_values: Mapping[str, float]) -> None:
        for name, value in new_values.items():
            if self.transition is not None and name in self.transition.end:
                self.transition.end[name] = float(value)
            self.values[name] = float(value)

    def animate(self, targets: Mapping[str, float], now: float, duration_ms: float, ease: Easing = ease_cubic_in_out) -> None:
        """Start a transition from the current (possibly mid-flight) values to ``targets``."""
        current = self.resolve(now)
        start = {name: current.get(name, float(value)) for name, value in targets.items()}
        # attributes only the replaced transition was moving stop where they are
        self.values.update(current)
        self.transition = Transition(
            start=start,
            end={name: float(value) for name, value in targets.items()},
            begin_ms=now,
            duration_ms=duration_ms,
            ease=ease,
        )
        self.values.update(self.transition.end)

    def resolve(self, now: float) -> dict[str, float]:
        """Attribute values as seen at clock time ``now``."""
        out = dict(self.values)
        if self.transition is not None:
            out.update(self.transition.value_at(now))
        return out

    def settle(self, now: float) -> None:
        """Drop the transition once it has finished."""
        if self.transition is not None and self.transition.finished(now):
            self.transition = None
