"""Simulation-agnostic shared types."""

from enum import Enum


class Direction(str, Enum):
    """Direction of a simulated price move.

    A run moves the price either UP (toward ``last close + price change``)
    or DOWN (toward ``last close - price change``, floored at the minimum
    price).
    """
    UP = "up"
    DOWN = "down"

    def opposite(self) -> "Direction":
        """Return the opposite direction."""
        return Direction.DOWN if self is Direction.UP else Direction.UP

    @property
    def sign(self) -> int:
        """+1 for UP, -1 for DOWN."""
        return 1 if self is Direction.UP else -1

    @classmethod
    def parse(cls, value: "str | Direction") -> "Direction":
        """
        Accept either a Direction or its string value (case-insensitive).

        Raises:
            ValueError: if the value is not "up" or "down"
        """
        if isinstance(value, Direction):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unsupported direction: {value!r}") from exc
