"""Wall-clock and randomness seams injected into the ranking services."""
import random
from datetime import datetime, timezone
from typing import Callable, Protocol

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RandomSource(Protocol):
    """Source of uniform floats in [0, 1)."""

    def random(self) -> float:
        ...


class SystemRandomSource:
    """Production random source backed by a private PRNG."""

    def __init__(self, seed=None) -> None:
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()


class FixedRandomSource:
    """Always returns the same value. Used to make ranking deterministic."""

    def __init__(self, value: float = 0.0) -> None:
        if not 0.0 <= value < 1.0:
            raise ValueError("value must be in [0, 1)")
        self._value = value

    def random(self) -> float:
        return self._value
