"""Shared test helpers."""
from datetime import datetime, timedelta, timezone

from foryou.models.schemas import RankingWeights

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, hours: float) -> None:
        self.now = self.now + timedelta(hours=hours)


def zero_weights(**overrides) -> RankingWeights:
    """Weights with every term switched off, for isolating one signal."""
    base = dict(
        completion=0.0,
        likes=0.0,
        recency=0.0,
        replay=0.0,
        velocity=0.0,
        authority=0.0,
        follow_boost=0.0,
        jitter_max=0.0,
    )
    base.update(overrides)
    return RankingWeights(**base)
