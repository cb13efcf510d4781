from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from candlesim.marketdata.candle import PRICE_FLOOR


@dataclass(frozen=True)
class Margin:
    """Space reserved around the plot area, in pixels."""
    top: float = 20
    right: float = 60
    bottom: float = 40
    left: float = 60

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any] | None) -> Margin:
        if raw is None:
            return cls()
        try:
            return cls(**{k: float(v) for k, v in raw.items()})
        except (TypeError, ValueError) as exc:
            raise ValueError(f"margin must map top/right/bottom/left to numbers, got {raw!r}") from exc


@dataclass(frozen=True)
class ChartStyle:
    up_color: str = "#22c55e"
    down_color: str = "#ef4444"
    background: str = "#111827"
    axis_text_color: str = "#9ca3af"
    grid_color: str = "rgba(255, 255, 255, 0.1)"
    crosshair_color: str = "#6b7280"
    label_background: str = "#1f2937"
    label_text_color: str = "white"
    font_size: int = 12
    band_padding: float = 0.3
    value_tick_count: int = 8
    time_tick_count: int = 8
    min_body_height: float = 1.0

    def candle_color(self, is_bearish: bool) -> str:
        return self.down_color if is_bearish else self.up_color


@dataclass(frozen=True)
class SimulatorConfig:
    """Tunable constants for generation, animation and rendering.

    Durations are in milliseconds of scheduler time.
    """
    history_length: int = 60
    starting_price: float = 100.0
    simulation_steps: int = 5
    price_change: float = 20.0
    random_move_range: float = 8.0
    drift_multiplier: float = 1.5
    initial_move_range: float = 5.0
    wick_range: float = 5.0
    min_running_close: float = 10.0
    price_floor: float = PRICE_FLOOR
    step_delay_ms: float = 400.0
    window_capacity: int = 60
    domain_padding: float = 0.1
    domain_lookback: int = 50
    enter_duration_ms: float = 400.0
    exit_duration_ms: float = 200.0
    axis_duration_ms: float = 300.0
    margin: Margin = field(default_factory=Margin)
    style: ChartStyle = field(default_factory=ChartStyle)

    def __post_init__(self) -> None:
        if self.history_length < 1:
            raise ValueError("history_length must be >= 1")
        if self.simulation_steps < 1:
            raise ValueError("simulation_steps must be >= 1")
        if self.window_capacity < 1:
            raise ValueError("window_capacity must be >= 1")
        if not math.isfinite(self.starting_price) or self.starting_price <= 0:
            raise ValueError("starting_price must be a positive finite number")
        if self.step_delay_ms < 0:
            raise ValueError("step_delay_ms must be >= 0")
        if self.price_floor <= 0:
            raise ValueError("price_floor must be > 0")

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> SimulatorConfig:
        """Validate and construct from a raw config dict.

        Unknown keys are rejected. Raises ``ValueError`` with a clear message
        on bad values instead of letting ``TypeError`` propagate.
        """
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(raw) - set(known))
        if unknown:
            raise ValueError(f"unknown simulator config keys: {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        for name, value in raw.items():
            if name == "margin":
                kwargs[name] = Margin.from_raw(value)
                continue
            if name == "style":
                try:
                    kwargs[name] = ChartStyle(**dict(value))
                except TypeError as exc:
                    raise ValueError(f"style is not a valid chart style: {value!r}") from exc
                continue
            try:
                number = float(value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{name} is not numeric: {value!r}") from exc
            if isinstance(known[name].default, int):
                if not number.is_integer():
                    raise ValueError(f"{name} is not an integer: {value!r}")
                number = int(number)
            kwargs[name] = number

        return cls(**kwargs)
