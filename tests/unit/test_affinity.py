from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from foryou.models.schemas import AffinityState, InteractionRecord, RankingWeights
from foryou.services.affinity import AffinityEngine
from foryou.services.ranking import Scorer, ScoringContext
from tests.helpers import zero_weights

CF_ON = RankingWeights(cf_enabled=True, cf_max_boost=0.3)


def interact(viewer_repo, clock, viewer_id, item_id, hours_ago=1):
    viewer_repo.add_interaction(
        InteractionRecord(
            viewer_id=viewer_id,
            item_id=item_id,
            type="like",
            created_at=clock() - timedelta(hours=hours_ago),
        )
    )


@pytest.fixture
def engine(viewer_repo, story_repo, clock):
    return AffinityEngine(viewer_repo, story_repo, clock=clock)


class TestTopicAffinity:
    @pytest.mark.asyncio
    async def test_matching_tags_are_boosted(self, engine, story_repo, viewer_repo, make_story, clock):
        story_repo.add_story(make_story("seed"), tags=["mystery", "space"])
        story_repo.add_story(make_story("match"), tags=["mystery"])
        story_repo.add_story(make_story("other"), tags=["cooking"])
        interact(viewer_repo, clock, "v1", "seed")
        pool = [make_story("match"), make_story("other")]

        state = await engine.compute_affinity("v1", pool, CF_ON)

        assert state.topic_boost == {"match": pytest.approx(0.02)}

    @pytest.mark.asyncio
    async def test_boost_is_capped(self, engine, story_repo, viewer_repo, make_story, clock):
        for i in range(15):
            story_repo.add_story(make_story(f"seed{i}"), tags=["mystery"])
            interact(viewer_repo, clock, "v1", f"seed{i}")
        story_repo.add_story(make_story("match"), tags=["mystery"])

        state = await engine.compute_affinity("v1", [make_story("match")], CF_ON)

        assert state.topic_boost["match"] == pytest.approx(0.2)

    @pytest.mark.asyncio
    async def test_old_interactions_are_ignored(self, engine, story_repo, viewer_repo, make_story, clock):
        story_repo.add_story(make_story("seed"), tags=["mystery"])
        story_repo.add_story(make_story("match"), tags=["mystery"])
        interact(viewer_repo, clock, "v1", "seed", hours_ago=24 * 31)

        state = await engine.compute_affinity("v1", [make_story("match")], CF_ON)

        assert state == AffinityState()

    @pytest.mark.asyncio
    async def test_malformed_tags_degrade_to_empty(self, viewer_repo, make_story, clock):
        story_repo = AsyncMock()
        story_repo.tags_for.return_value = {"seed": [None], "match": ["mystery"]}
        interact(viewer_repo, clock, "v1", "seed")
        engine = AffinityEngine(viewer_repo, story_repo, clock=clock)

        state = await engine.compute_affinity("v1", [make_story("match")], CF_ON)

        assert state == AffinityState()


class TestCoEngagement:
    @pytest.fixture
    def shared_history(self, story_repo, viewer_repo, make_story, clock):
        for item_id in ("a", "c", "d", "niche"):
            story_repo.add_story(make_story(item_id))
        interact(viewer_repo, clock, "v1", "a")
        for other in ("u1", "u2"):
            interact(viewer_repo, clock, other, "a")
            interact(viewer_repo, clock, other, "c")
        interact(viewer_repo, clock, "u1", "niche")
        interact(viewer_repo, clock, "stranger", "d")

    @pytest.mark.asyncio
    async def test_counts_overlapping_viewers(self, engine, shared_history, make_story):
        pool = [make_story(i) for i in ("a", "c", "d", "niche")]

        state = await engine.compute_affinity("v1", pool, CF_ON)

        assert state.co_engagement_boost == {
            "a": pytest.approx(0.04),
            "c": pytest.approx(0.04),
            "niche": pytest.approx(0.02),
        }

    @pytest.mark.asyncio
    async def test_boost_clamped_to_variant_max(self, engine, shared_history, make_story):
        weights = RankingWeights(cf_enabled=True, cf_max_boost=0.03)

        state = await engine.compute_affinity("v1", [make_story("c")], weights)

        assert state.co_engagement_boost["c"] == pytest.approx(0.03)

    @pytest.mark.asyncio
    async def test_co_engaged_item_outranks_unrelated(self, engine, shared_history, make_story, clock):
        pool = [make_story("d"), make_story("c")]
        weights = zero_weights(cf_enabled=True, cf_max_boost=0.3)

        affinity = await engine.compute_affinity("v1", pool, weights)
        ranked = Scorer().rank(
            pool, {}, ScoringContext(weights=weights, now=clock(), affinity=affinity)
        )

        assert [s.candidate.id for s in ranked] == ["c", "d"]


class TestDisabled:
    @pytest.mark.asyncio
    async def test_cf_disabled(self, engine, story_repo, viewer_repo, make_story, clock):
        story_repo.add_story(make_story("seed"), tags=["mystery"])
        story_repo.add_story(make_story("match"), tags=["mystery"])
        interact(viewer_repo, clock, "v1", "seed")

        state = await engine.compute_affinity("v1", [make_story("match")], RankingWeights())

        assert state == AffinityState()

    @pytest.mark.asyncio
    async def test_anonymous_viewer(self, engine, make_story):
        assert await engine.compute_affinity(None, [make_story("x")], CF_ON) == AffinityState()

    @pytest.mark.asyncio
    async def test_no_history(self, engine, make_story):
        assert await engine.compute_affinity("v1", [make_story("x")], CF_ON) == AffinityState()

    @pytest.mark.asyncio
    async def test_store_failure(self, story_repo, make_story, clock):
        viewer_repo = AsyncMock()
        viewer_repo.recent_interactions.side_effect = ConnectionError("db down")
        engine = AffinityEngine(viewer_repo, story_repo, clock=clock)

        assert await engine.compute_affinity("v1", [make_story("x")], CF_ON) == AffinityState()


class TestSeedStories:
    @pytest.mark.asyncio
    async def test_seed_story_is_boosted_by_co_engagement(
        self, engine, story_repo, viewer_repo, make_story, clock
    ):
        for item_id in ("a", "c"):
            story_repo.add_story(make_story(item_id))
        interact(viewer_repo, clock, "v1", "a")
        for other in ("u1", "u2"):
            interact(viewer_repo, clock, other, "a")
            interact(viewer_repo, clock, other, "c")

        state = await engine.compute_affinity("v1", [make_story("a"), make_story("c")], CF_ON)

        assert state.co_engagement_boost["a"] == pytest.approx(0.04)
        assert state.co_engagement_boost["c"] == pytest.approx(0.04)
