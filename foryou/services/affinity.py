"""
Viewer affinity boosts (collaborative-filtering lite).

Two deterministic signals computed from interaction history:

- Topic affinity: hashtags of stories the viewer recently interacted with,
  counted and matched against each candidate's hashtags. The boost is
  ``min(topic_cap, topic_step * matching_frequency)``.
- Co-engagement: other viewers who interacted with the same seed stories
  "vote" for candidates they also interacted with, ``co_engagement_step``
  per voting viewer, capped at the variant's ``cf_max_boost``.
"""
import asyncio
import logging
from collections import Counter, defaultdict
from datetime import timedelta
from typing import Dict, List, Optional, Sequence

from foryou.core.clock import Clock, utc_now
from foryou.models.interfaces import StoryRepository, ViewerRepository
from foryou.models.schemas import AffinityState, Candidate, RankingWeights

logger = logging.getLogger(__name__)


class AffinityEngine:
    """Computes per-candidate topic and co-engagement boosts for one viewer."""

    def __init__(
        self,
        viewer_repo: ViewerRepository,
        story_repo: StoryRepository,
        lookback_days: int = 30,
        seed_limit: int = 50,
        co_engagement_sample_limit: int = 500,
        topic_step: float = 0.02,
        topic_cap: float = 0.2,
        co_engagement_step: float = 0.02,
        timeout_ms: int = 400,
        clock: Clock = utc_now,
    ) -> None:
        self._viewer_repo = viewer_repo
        self._story_repo = story_repo
        self._lookback = timedelta(days=lookback_days)
        self._seed_limit = seed_limit
        self._co_engagement_sample_limit = co_engagement_sample_limit
        self._topic_step = topic_step
        self._topic_cap = topic_cap
        self._co_engagement_step = co_engagement_step
        self._timeout_sec = timeout_ms / 1000
        self._clock = clock

    async def compute_affinity(
        self,
        viewer_id: Optional[str],
        candidates: List[Candidate],
        weights: RankingWeights,
    ) -> AffinityState:
        """
        Boosts for ``candidates``. Never raises.

        Returns an empty state when there is no viewer, collaborative
        filtering is disabled for the variant, or any lookup fails.
        """
        if not viewer_id or not weights.cf_enabled or not candidates:
            return AffinityState()
        try:
            return await asyncio.wait_for(
                self._compute(viewer_id, [c.id for c in candidates], weights.cf_max_boost),
                timeout=self._timeout_sec,
            )
        except Exception as e:
            logger.warning(
                f"Affinity computation failed, using zero boosts: {e!r}",
                extra={"viewer_id": viewer_id},
            )
            return AffinityState()

    async def _compute(
        self,
        viewer_id: str,
        candidate_ids: List[str],
        max_co_engagement: float,
    ) -> AffinityState:
        since = self._clock() - self._lookback
        interactions = await self._viewer_repo.recent_interactions(
            viewer_id, since, self._seed_limit
        )
        seed_ids = list(dict.fromkeys(i.item_id for i in interactions))
        if not seed_ids:
            return AffinityState()

        topic, co_engagement = await asyncio.gather(
            self._topic_boost(seed_ids, candidate_ids),
            self._co_engagement_boost(viewer_id, seed_ids, candidate_ids, max_co_engagement),
        )
        return AffinityState(topic_boost=topic, co_engagement_boost=co_engagement)

    async def _topic_boost(
        self,
        seed_ids: Sequence[str],
        candidate_ids: Sequence[str],
    ) -> Dict[str, float]:
        tags = await self._story_repo.tags_for(list(dict.fromkeys([*seed_ids, *candidate_ids])))

        tag_counts: Counter = Counter()
        for item_id in seed_ids:
            for tag in tags.get(item_id, []):
                if not isinstance(tag, str):
                    raise ValueError(f"malformed tag on {item_id}: {tag!r}")
                tag_counts[tag] += 1

        boosts: Dict[str, float] = {}
        for item_id in candidate_ids:
            frequency = sum(tag_counts[tag] for tag in set(tags.get(item_id, [])))
            if frequency > 0:
                boosts[item_id] = min(self._topic_cap, self._topic_step * frequency)
        return boosts

    async def _co_engagement_boost(
        self,
        viewer_id: str,
        seed_ids: Sequence[str],
        candidate_ids: Sequence[str],
        max_boost: float,
    ) -> Dict[str, float]:
        overlaps = await self._viewer_repo.interactions_on_items(
            seed_ids, exclude_viewer_id=viewer_id, limit=self._co_engagement_sample_limit
        )
        others = sorted({r.viewer_id for r in overlaps if r.viewer_id != viewer_id})
        if not others:
            return {}

        rows = await self._viewer_repo.interactions_by_viewers(others, candidate_ids)
        voters: Dict[str, set] = defaultdict(set)
        for r in rows:
            if r.viewer_id != viewer_id:
                voters[r.item_id].add(r.viewer_id)

        return {
            item_id: min(max_boost, self._co_engagement_step * len(voters[item_id]))
            for item_id in candidate_ids
            if voters.get(item_id)
        }
