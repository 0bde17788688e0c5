"""
For You feed service - ranking request orchestrator.
Resolves identity and variant, gathers candidates and signals, scores,
applies diversity, and records exposures.
Only candidate retrieval can fail the request; every other stage degrades.
"""
import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Dict, Optional

from foryou.core.clock import Clock, RandomSource, SystemRandomSource, utc_now
from foryou.models.interfaces import FeatureFlagService
from foryou.models.schemas import (
    ForYouResponse,
    Identity,
    InspectResponse,
    Pagination,
    Selection,
)
from foryou.services.affinity import AffinityEngine
from foryou.services.config_provider import ConfigProvider
from foryou.services.diversity import DiversitySelector
from foryou.services.exposure import ExposureRecorder
from foryou.services.ranking import Scorer, ScoringContext
from foryou.services.retrieval import CandidateRetriever
from foryou.services.signals import SignalJoiner
from foryou.services.suppression import SuppressionFilter, resolve_identity
from foryou.services.variants import assign_variant

logger = logging.getLogger(__name__)

DEBUG_SAMPLE_SIZE = 5


@dataclass
class RankedPage:
    """One ranking pass, before anything is recorded."""

    identity: Identity
    variant: str
    selection: Selection
    pool_size: int
    eligible_size: int

    @property
    def log_context(self) -> Dict[str, Optional[str]]:
        return {
            "variant": self.variant,
            "viewer_id": self.identity.viewer_id,
            "session_id": self.identity.session_id,
        }


class ForYouService:
    """
    Main For You service.

    Responsibilities:
    - Assign the A/B variant and resolve its weights
    - Fetch the candidate pool (fatal on failure)
    - Fan out signal, suppression, follow, and affinity lookups
    - Score, diversify, paginate
    - Record exposures for the returned page
    - Inspect a page with score breakdowns, without side effects
    """

    def __init__(
            self,
            config_provider: ConfigProvider,
            retriever: CandidateRetriever,
            signal_joiner: SignalJoiner,
            suppression_filter: SuppressionFilter,
            affinity_engine: AffinityEngine,
            exposure_recorder: ExposureRecorder,
            feature_flag_service: FeatureFlagService,
            scorer: Optional[Scorer] = None,
            selector: Optional[DiversitySelector] = None,
            random_source: Optional[RandomSource] = None,
            clock: Clock = utc_now,
    ) -> None:
        self._config_provider = config_provider
        self._retriever = retriever
        self._signal_joiner = signal_joiner
        self._suppression_filter = suppression_filter
        self._affinity_engine = affinity_engine
        self._exposure_recorder = exposure_recorder
        self._feature_flags = feature_flag_service
        self._scorer = scorer or Scorer()
        self._selector = selector or DiversitySelector()
        self._rng = random_source or SystemRandomSource()
        self._clock = clock

    async def get_for_you(
            self,
            page: int = 1,
            limit: int = 20,
            variant: Optional[str] = None,
            viewer_id: Optional[str] = None,
            session_id: Optional[str] = None,
    ) -> ForYouResponse:
        """
        Rank one page of the For You feed.

        Args:
            page: 1-based page number
            limit: Page size
            variant: Explicit A/B variant override
            viewer_id: Authenticated viewer, if any
            session_id: Client session, if any

        Returns:
            ForYouResponse with the page, pagination, and assigned variant

        Raises:
            CandidateRetrievalError: If the candidate pool cannot be fetched
        """
        start_time = time.time()
        ranked = await self._rank_page(page, limit, variant, viewer_id, session_id)
        selection = ranked.selection
        stories = [item.candidate for item in selection.items]

        await self._exposure_recorder.record_exposures(
            ranked.identity, ranked.variant, stories, selection.start
        )

        if logger.isEnabledFor(logging.DEBUG):
            for item in selection.items[:DEBUG_SAMPLE_SIZE]:
                logger.debug(
                    f"Ranked {item.candidate.id} score={item.score:.4f} {item.breakdown}",
                    extra=ranked.log_context,
                )

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"For You page served: page={page}, pool={ranked.pool_size}, "
            f"eligible={ranked.eligible_size}, total={selection.total}, "
            f"items={len(stories)}, elapsed_ms={elapsed_ms:.2f}",
            extra=ranked.log_context,
        )

        return ForYouResponse(
            stories=stories,
            pagination=Pagination(
                page=page,
                limit=limit,
                total=selection.total,
                total_pages=math.ceil(selection.total / limit),
            ),
            assigned_variant=ranked.variant,
        )

    async def inspect(
            self,
            page: int = 1,
            limit: int = 20,
            variant: Optional[str] = None,
            viewer_id: Optional[str] = None,
            session_id: Optional[str] = None,
    ) -> InspectResponse:
        """
        Rank a page exactly as get_for_you would, with score breakdowns.
        Read-only: no exposures are recorded, so inspecting never
        suppresses stories from the real feed.

        Raises:
            CandidateRetrievalError: If the candidate pool cannot be fetched
        """
        ranked = await self._rank_page(page, limit, variant, viewer_id, session_id)
        logger.info(
            f"For You page inspected: page={page}, total={ranked.selection.total}",
            extra=ranked.log_context,
        )
        return InspectResponse(
            total=ranked.selection.total,
            items=ranked.selection.items,
            assigned_variant=ranked.variant,
        )

    async def _rank_page(
            self,
            page: int,
            limit: int,
            variant: Optional[str],
            viewer_id: Optional[str],
            session_id: Optional[str],
    ) -> RankedPage:
        identity = resolve_identity(viewer_id, session_id)
        assigned = assign_variant(identity.viewer_id, variant, self._rng)

        weights = await self._config_provider.get_weights(assigned)
        pool = await self._retriever.fetch_candidate_pool(self._retriever.pool_size(limit))

        personalized = self._feature_flags.is_personalization_enabled(identity.viewer_id)
        personal_viewer = identity.viewer_id if personalized else None

        signals, suppression, followed, affinity = await asyncio.gather(
            self._signal_joiner.attach_signals(pool),
            self._suppression_filter.compute_suppression(identity),
            self._signal_joiner.followed_creators(personal_viewer),
            self._affinity_engine.compute_affinity(personal_viewer, pool, weights),
        )

        eligible = SuppressionFilter.apply(pool, suppression)
        context = ScoringContext(
            weights=weights,
            now=self._clock(),
            followed_creators=followed,
            suppression=suppression,
            affinity=affinity,
            rng=self._rng,
        )
        ranked = self._scorer.rank(eligible, signals, context)
        return RankedPage(
            identity=identity,
            variant=assigned,
            selection=self._selector.select(ranked, limit, page, weights.diversity),
            pool_size=len(pool),
            eligible_size=len(eligible),
        )
