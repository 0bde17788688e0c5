from unittest.mock import AsyncMock

import pytest

from foryou.models.schemas import ExposureRecord, Identity, SuppressionState
from foryou.services.suppression import SuppressionFilter, resolve_identity


def exposure(item_id, created_at, viewer_id=None, session_id=None):
    return ExposureRecord(
        viewer_id=viewer_id,
        session_id=session_id,
        variant="A",
        item_id=item_id,
        position=1,
        created_at=created_at,
    )


class TestResolveIdentity:
    def test_viewer_takes_precedence(self):
        identity = resolve_identity("viewer_1", "session_1")
        assert identity.kind == "viewer"
        assert identity.viewer_id == "viewer_1"
        assert identity.session_id == "session_1"

    def test_session_only(self):
        assert resolve_identity(None, "session_1").kind == "session"

    def test_blank_values_are_anonymous(self):
        identity = resolve_identity("  ", "")
        assert identity.is_anonymous
        assert identity.viewer_id is None
        assert identity.session_id is None


class TestSuppressionFilter:
    @pytest.mark.asyncio
    async def test_anonymous_is_never_suppressed(self, exposure_repo, story_repo, clock):
        await exposure_repo.append([exposure("s1", clock())])
        state = await SuppressionFilter(exposure_repo, story_repo, clock=clock).compute_suppression(
            Identity()
        )
        assert state == SuppressionState()

    @pytest.mark.asyncio
    async def test_excludes_items_seen_in_last_day(self, exposure_repo, story_repo, make_story, clock):
        story_repo.add_story(make_story("s1"))
        await exposure_repo.append([exposure("s1", clock(), viewer_id="v1")])
        suppression = SuppressionFilter(exposure_repo, story_repo, clock=clock)

        state = await suppression.compute_suppression(resolve_identity("v1", None))
        assert state.excluded_item_ids == {"s1"}

        other = await suppression.compute_suppression(resolve_identity("v2", None))
        assert other.excluded_item_ids == set()

        clock.advance(hours=25)
        later = await suppression.compute_suppression(resolve_identity("v1", None))
        assert later.excluded_item_ids == set()

    @pytest.mark.asyncio
    async def test_viewer_lookup_ignores_session_history(self, exposure_repo, story_repo, clock):
        await exposure_repo.append([exposure("s1", clock(), session_id="sess")])
        suppression = SuppressionFilter(exposure_repo, story_repo, clock=clock)

        as_viewer = await suppression.compute_suppression(resolve_identity("v1", "sess"))
        as_session = await suppression.compute_suppression(resolve_identity(None, "sess"))

        assert as_viewer.excluded_item_ids == set()
        assert as_session.excluded_item_ids == {"s1"}

    @pytest.mark.asyncio
    async def test_creator_counts_only_cover_cooldown_window(
        self, exposure_repo, story_repo, make_story, clock
    ):
        story_repo.add_story(make_story("a1", creator_id="ca"))
        story_repo.add_story(make_story("a2", creator_id="ca"))
        story_repo.add_story(make_story("b1", creator_id="cb"))
        now = clock()
        await exposure_repo.append([
            exposure("a1", now.replace(hour=11), viewer_id="v1"),
            exposure("a2", now.replace(hour=10), viewer_id="v1"),
            exposure("b1", now.replace(hour=2), viewer_id="v1"),
        ])

        state = await SuppressionFilter(exposure_repo, story_repo, clock=clock).compute_suppression(
            resolve_identity("v1", None)
        )

        assert state.excluded_item_ids == {"a1", "a2", "b1"}
        assert state.creator_recent_exposure_counts == {"ca": 2}

    @pytest.mark.asyncio
    async def test_lookup_failure_degrades_to_empty(self, story_repo, clock):
        broken = AsyncMock()
        broken.exposures_since.side_effect = RuntimeError("db down")

        state = await SuppressionFilter(broken, story_repo, clock=clock).compute_suppression(
            resolve_identity("v1", None)
        )

        assert state == SuppressionState()

    def test_apply_drops_excluded_and_keeps_order(self, make_story):
        pool = [make_story("a"), make_story("b"), make_story("c")]
        state = SuppressionState(excluded_item_ids={"b"})

        assert [c.id for c in SuppressionFilter.apply(pool, state)] == ["a", "c"]
