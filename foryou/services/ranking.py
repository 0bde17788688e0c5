"""
Scoring for the For You feed.
Each term of the linear formula is a ScoringStrategy; the Scorer sums them.
"""
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

from foryou.core.clock import FixedRandomSource, RandomSource
from foryou.models.schemas import (
    AffinityState,
    Candidate,
    RankingWeights,
    ScoredCandidate,
    SignalBundle,
    SuppressionState,
)

logger = logging.getLogger(__name__)

COOLDOWN_STEP = 0.05
COOLDOWN_CAP = 0.2


@dataclass
class ScoringContext:
    """Everything about the request that scoring depends on besides the candidate."""

    weights: RankingWeights
    now: datetime
    followed_creators: Set[str] = field(default_factory=set)
    suppression: SuppressionState = field(default_factory=SuppressionState)
    affinity: AffinityState = field(default_factory=AffinityState)
    rng: RandomSource = field(default_factory=FixedRandomSource)


# =============================================================================
# Scoring Strategy (Strategy Pattern)
# =============================================================================


class ScoringStrategy(ABC):
    """One additive term of the score."""

    @abstractmethod
    def calculate(
        self,
        candidate: Candidate,
        signals: SignalBundle,
        context: ScoringContext,
    ) -> Tuple[float, str]:
        """
        Calculate this term's contribution.

        Returns:
            Tuple of (contribution, term_name)
        """
        pass


class CompletionScoring(ScoringStrategy):
    """Share of views that reached the end."""

    def calculate(
        self,
        candidate: Candidate,
        signals: SignalBundle,
        context: ScoringContext,
    ) -> Tuple[float, str]:
        total_views = signals.engagement.total_views or candidate.view_count
        rate = signals.engagement.completions / total_views if total_views > 0 else 0.0
        return context.weights.completion * rate, "completion"


class LikesScoring(ScoringStrategy):
    """Like count, saturating around 50 likes."""

    def calculate(
        self,
        candidate: Candidate,
        signals: SignalBundle,
        context: ScoringContext,
    ) -> Tuple[float, str]:
        return context.weights.likes * math.tanh(signals.like_count / 50), "likes"


class RecencyScoring(ScoringStrategy):
    """Linear decay from 1 to 0 over the freshness window."""

    def calculate(
        self,
        candidate: Candidate,
        signals: SignalBundle,
        context: ScoringContext,
    ) -> Tuple[float, str]:
        age_hours = max(0.0, (context.now - candidate.published_at).total_seconds() / 3600)
        recency = max(0.0, 1.0 - age_hours / context.weights.freshness_hours)
        return context.weights.recency * recency, "recency"


class ReplayScoring(ScoringStrategy):
    """Viewers who replayed the story, saturating around 20."""

    def calculate(
        self,
        candidate: Candidate,
        signals: SignalBundle,
        context: ScoringContext,
    ) -> Tuple[float, str]:
        return context.weights.replay * math.tanh(signals.engagement.replay_users / 20), "replay"


class VelocityScoring(ScoringStrategy):
    """48h engagement, weighted by how deliberate the action is."""

    def calculate(
        self,
        candidate: Candidate,
        signals: SignalBundle,
        context: ScoringContext,
    ) -> Tuple[float, str]:
        v = signals.velocity
        velocity = (
            v.likes_48h * 0.4
            + v.comments_48h * 0.6
            + v.shares_48h * 0.8
            + v.completes_48h * 1.0
        ) / 10
        return context.weights.velocity * velocity, "velocity"


class AuthorityScoring(ScoringStrategy):
    """Creator follower reach blended with their average completion rate."""

    def calculate(
        self,
        candidate: Candidate,
        signals: SignalBundle,
        context: ScoringContext,
    ) -> Tuple[float, str]:
        a = signals.authority
        authority = math.tanh(a.follower_count / 1000) * 0.3 + a.avg_completion_rate * 0.7
        return context.weights.authority * authority, "authority"


class FollowScoring(ScoringStrategy):
    """Flat boost for creators the viewer follows."""

    def calculate(
        self,
        candidate: Candidate,
        signals: SignalBundle,
        context: ScoringContext,
    ) -> Tuple[float, str]:
        followed = candidate.creator_id in context.followed_creators
        return (context.weights.follow_boost if followed else 0.0), "follow"


class JitterScoring(ScoringStrategy):
    """Small random lift in [0, jitter_max) for cold-start exploration."""

    def calculate(
        self,
        candidate: Candidate,
        signals: SignalBundle,
        context: ScoringContext,
    ) -> Tuple[float, str]:
        return context.rng.random() * context.weights.jitter_max, "jitter"


class TopicAffinityScoring(ScoringStrategy):
    """Precomputed hashtag affinity for this viewer."""

    def calculate(
        self,
        candidate: Candidate,
        signals: SignalBundle,
        context: ScoringContext,
    ) -> Tuple[float, str]:
        return context.affinity.topic_boost.get(candidate.id, 0.0), "topic"


class CoEngagementScoring(ScoringStrategy):
    """Precomputed lift from viewers with overlapping history."""

    def calculate(
        self,
        candidate: Candidate,
        signals: SignalBundle,
        context: ScoringContext,
    ) -> Tuple[float, str]:
        return context.affinity.co_engagement_boost.get(candidate.id, 0.0), "co_engagement"


class CreatorCooldownScoring(ScoringStrategy):
    """Penalty for creators shown to this viewer in the cool-down window."""

    def calculate(
        self,
        candidate: Candidate,
        signals: SignalBundle,
        context: ScoringContext,
    ) -> Tuple[float, str]:
        seen = context.suppression.creator_recent_exposure_counts.get(candidate.creator_id, 0)
        return -min(COOLDOWN_CAP, COOLDOWN_STEP * seen), "cooldown"


DEFAULT_STRATEGIES: Tuple[type, ...] = (
    CompletionScoring,
    LikesScoring,
    RecencyScoring,
    ReplayScoring,
    VelocityScoring,
    AuthorityScoring,
    FollowScoring,
    JitterScoring,
    TopicAffinityScoring,
    CoEngagementScoring,
    CreatorCooldownScoring,
)


# =============================================================================
# Scorer
# =============================================================================


class Scorer:
    """
    Combines all strategies into a single scalar per candidate.
    Apart from the jitter term, scoring is a pure function of its inputs.
    """

    def __init__(self, scoring_strategies: Optional[List[ScoringStrategy]] = None):
        """
        Initialize scorer with scoring strategies.

        Args:
            scoring_strategies: Terms to sum (default: the full formula)
        """
        self._strategies = scoring_strategies or [cls() for cls in DEFAULT_STRATEGIES]

    def score(
        self,
        candidate: Candidate,
        signals: SignalBundle,
        context: ScoringContext,
    ) -> ScoredCandidate:
        breakdown: Dict[str, float] = {}
        total = 0.0
        for strategy in self._strategies:
            value, name = strategy.calculate(candidate, signals, context)
            breakdown[name] = value
            total += value
        return ScoredCandidate(candidate=candidate, score=total, breakdown=breakdown)

    def rank(
        self,
        candidates: List[Candidate],
        signals: Dict[str, SignalBundle],
        context: ScoringContext,
    ) -> List[ScoredCandidate]:
        """
        Score and sort descending. The sort is stable, so ties keep
        retrieval order.
        """
        scored = [
            self.score(c, signals.get(c.id) or SignalBundle(), context)
            for c in candidates
        ]
        scored.sort(key=lambda s: s.score, reverse=True)
        return scored
