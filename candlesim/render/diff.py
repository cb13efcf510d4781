"""Keyed reconciliation of a live scene against a new data array."""

from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")

__all__ = ["DataJoin", "keyed_diff"]


@dataclass(frozen=True)
class DataJoin(Generic[K, T]):
    """
    Result of joining new data to the keys currently on screen.

    Attributes:
        entering: Items whose key is not on screen yet, in data order
        updating: Items whose key is already on screen, in data order
        exiting: Keys on screen that are absent from the new data, in screen order
    """
    entering: list[T]
    updating: list[T]
    exiting: list[K]

    @property
    def is_noop(self) -> bool:
        return not self.entering and not self.exiting

    def __repr__(self) -> str:
        return (
            f"DataJoin(enter={len(self.entering)}, "
            f"update={len(self.updating)}, exit={len(self.exiting)})"
        )


def keyed_diff(previous_keys: Iterable[K], items: Iterable[T], key: Callable[[T], K]) -> DataJoin[K, T]:
    """
    Split ``items`` into entering/updating sets and find the exiting keys.

    The three sets are disjoint. The diff does not know how anything is
    drawn, so any backend can consume it.

    Raises:
        ValueError: if two items share a key
    """
    previous = list(previous_keys)
    on_screen = set(previous)

    entering: list[T] = []
    updating: list[T] = []
    seen: set[K] = set()
    for item in items:
        k = key(item)
        if k in seen:
            raise ValueError(f"duplicate key in data: {k!r}")
        seen.add(k)
        (updating if k in on_screen else entering).append(item)

    exiting = [k for k in previous if k not in seen]
    return DataJoin(entering=entering, updating=updating, exiting=exiting)
