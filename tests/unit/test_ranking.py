"""
Unit tests for the Scorer.
"""
import math
from datetime import timedelta

import pytest

from foryou.core.clock import FixedRandomSource
from foryou.models.schemas import (
    AffinityState,
    AuthoritySignal,
    Candidate,
    EngagementSignal,
    RankingWeights,
    SignalBundle,
    SuppressionState,
    VelocitySignal,
)
from foryou.services.config_provider import default_weights
from foryou.services.ranking import (
    JitterScoring,
    RecencyScoring,
    Scorer,
    ScoringContext,
)
from tests.helpers import NOW, zero_weights


def context(weights=None, **kwargs):
    return ScoringContext(weights=weights or RankingWeights(), now=NOW, **kwargs)


class TestScorer:
    def test_fresher_story_scores_at_least_as_high(self, make_story):
        scorer = Scorer()
        signals = SignalBundle(like_count=10)
        newer = scorer.score(make_story("new", hours_ago=1), signals, context())
        older = scorer.score(make_story("old", hours_ago=30), signals, context())

        assert newer.score >= older.score
        assert newer.breakdown["recency"] > older.breakdown["recency"]

    def test_recency_is_zero_past_freshness_window(self, make_story):
        value, name = RecencyScoring().calculate(
            make_story("s", hours_ago=100), SignalBundle(), context()
        )
        assert name == "recency"
        assert value == 0.0

    def test_missing_signals_score_with_zero_defaults(self, make_story):
        scorer = Scorer()
        story = make_story("s", hours_ago=200)

        scored = scorer.score(story, SignalBundle(), context())

        assert scored.score == 0.0
        assert all(math.isfinite(v) for v in scored.breakdown.values())

    def test_rank_tolerates_candidates_without_signal_entry(self, make_story):
        ranked = Scorer().rank([make_story("s", hours_ago=200)], {}, context())
        assert ranked[0].score == 0.0

    def test_formula_terms(self, make_story):
        weights = RankingWeights(jitter_max=0.0)
        signals = SignalBundle(
            like_count=50,
            engagement=EngagementSignal(total_views=100, completions=50, replay_users=20),
            velocity=VelocitySignal(likes_48h=10, comments_48h=10, shares_48h=10, completes_48h=10),
            authority=AuthoritySignal(follower_count=1000, avg_completion_rate=0.5),
        )
        story = make_story("s", creator_id="c1", hours_ago=36)

        scored = Scorer().score(story, signals, context(weights))
        b = scored.breakdown

        assert b["completion"] == pytest.approx(0.32 * 0.5)
        assert b["likes"] == pytest.approx(0.22 * math.tanh(1))
        assert b["recency"] == pytest.approx(0.12 * 0.5)
        assert b["replay"] == pytest.approx(0.10 * math.tanh(1))
        assert b["velocity"] == pytest.approx(0.14 * 2.8)
        assert b["authority"] == pytest.approx(0.10 * (math.tanh(1) * 0.3 + 0.35))
        assert scored.score == pytest.approx(sum(b.values()))

    def test_lifetime_views_used_when_engagement_missing(self, make_story):
        story = make_story("s", view_count=10)
        signals = SignalBundle(engagement=EngagementSignal(completions=5))

        scored = Scorer().score(story, signals, context(zero_weights(completion=1.0)))

        assert scored.score == pytest.approx(0.5)

    def test_follow_boost_only_for_followed_creator(self, make_story):
        weights = zero_weights(follow_boost=0.5)
        ctx = context(weights, followed_creators={"c1"})

        followed = Scorer().score(make_story("a", creator_id="c1"), SignalBundle(), ctx)
        other = Scorer().score(make_story("b", creator_id="c2"), SignalBundle(), ctx)

        assert followed.score == pytest.approx(0.5)
        assert other.score == 0.0

    def test_affinity_boosts_are_added(self, make_story):
        ctx = context(
            zero_weights(),
            affinity=AffinityState(topic_boost={"s": 0.1}, co_engagement_boost={"s": 0.04}),
        )
        scored = Scorer().score(make_story("s"), SignalBundle(), ctx)
        assert scored.score == pytest.approx(0.14)

    @pytest.mark.parametrize("seen, penalty", [(0, 0.0), (1, 0.05), (3, 0.15), (10, 0.2)])
    def test_creator_cooldown_penalty_is_capped(self, make_story, seen, penalty):
        suppression = SuppressionState(creator_recent_exposure_counts={"c1": seen})
        scored = Scorer().score(
            make_story("s", creator_id="c1", hours_ago=200),
            SignalBundle(),
            context(zero_weights(), suppression=suppression),
        )
        assert scored.score == pytest.approx(-penalty)

    def test_jitter_is_bounded(self, make_story):
        weights = zero_weights(jitter_max=0.05)
        value, _ = JitterScoring().calculate(
            make_story("s"), SignalBundle(), context(weights, rng=FixedRandomSource(0.999))
        )
        assert 0.0 <= value < 0.05

    def test_scoring_is_deterministic_without_jitter(self, make_story):
        signals = SignalBundle(like_count=3, velocity=VelocitySignal(likes_48h=4))
        story = make_story("s", hours_ago=5)
        weights = RankingWeights(jitter_max=0.0)

        first = Scorer().score(story, signals, context(weights))
        second = Scorer().score(story, signals, context(weights))

        assert first.score == second.score

    def test_variant_b_favours_velocity(self, make_story):
        story = make_story("s", hours_ago=200)
        trending = SignalBundle(velocity=VelocitySignal(completes_48h=10))
        completing = SignalBundle(engagement=EngagementSignal(total_views=10, completions=10))

        a = default_weights("A").model_copy(update={"jitter_max": 0.0})
        b = default_weights("B").model_copy(update={"jitter_max": 0.0})
        scorer = Scorer()

        assert scorer.score(story, trending, context(b)).score > scorer.score(story, trending, context(a)).score
        assert scorer.score(story, completing, context(b)).score < scorer.score(story, completing, context(a)).score

    def test_rank_sorts_descending_and_keeps_order_on_ties(self, make_story):
        stories = [make_story("first"), make_story("second"), make_story("best")]
        signals = {"best": SignalBundle(like_count=100)}

        ranked = Scorer().rank(stories, signals, context(zero_weights(likes=1.0)))

        assert [s.candidate.id for s in ranked] == ["best", "first", "second"]

    def test_naive_publish_time_is_treated_as_utc(self):
        story = Candidate(
            id="naive",
            creator_id="c1",
            title="Naive",
            published_at=NOW.replace(tzinfo=None) - timedelta(hours=36),
        )

        value, _ = RecencyScoring().calculate(story, SignalBundle(), context(zero_weights(recency=1.0)))

        assert story.published_at.tzinfo is not None
        assert value == pytest.approx(0.5)
