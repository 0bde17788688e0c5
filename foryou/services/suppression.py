"""
Exposure-based suppression.
Hard-excludes stories the viewer (or session) saw in the last day and
counts recent exposures per creator for the cool-down penalty.
"""
import asyncio
import logging
from collections import Counter
from datetime import timedelta
from typing import List, Optional

from foryou.core.clock import Clock, utc_now
from foryou.models.interfaces import ExposureRepository, StoryRepository
from foryou.models.schemas import Candidate, Identity, SuppressionState

logger = logging.getLogger(__name__)


def resolve_identity(viewer_id: Optional[str], session_id: Optional[str]) -> Identity:
    """
    Build the request identity. Blank values count as absent.

    Lookups keyed on the identity use the viewer id when present and the
    session id only otherwise.
    """
    return Identity(
        viewer_id=(viewer_id or "").strip() or None,
        session_id=(session_id or "").strip() or None,
    )


class SuppressionFilter:
    """Reads the exposure log into a per-request SuppressionState."""

    def __init__(
        self,
        exposure_repo: ExposureRepository,
        story_repo: StoryRepository,
        window_hours: int = 24,
        cooldown_hours: int = 4,
        timeout_ms: int = 250,
        clock: Clock = utc_now,
    ) -> None:
        self._exposure_repo = exposure_repo
        self._story_repo = story_repo
        self._window = timedelta(hours=window_hours)
        self._cooldown = timedelta(hours=cooldown_hours)
        self._timeout_sec = timeout_ms / 1000
        self._clock = clock

    async def compute_suppression(self, identity: Identity) -> SuppressionState:
        """Empty state for anonymous requests or when the log can't be read."""
        if identity.is_anonymous:
            return SuppressionState()
        try:
            return await asyncio.wait_for(self._compute(identity), timeout=self._timeout_sec)
        except Exception as e:
            logger.warning(
                f"Suppression lookup failed, serving unsuppressed: {e!r}",
                extra={"viewer_id": identity.viewer_id, "session_id": identity.session_id},
            )
            return SuppressionState()

    async def _compute(self, identity: Identity) -> SuppressionState:
        now = self._clock()
        exposures = await self._exposure_repo.exposures_since(identity, now - self._window)

        cooldown_since = now - self._cooldown
        recent_items = [e.item_id for e in exposures if e.created_at >= cooldown_since]
        creators = await self._story_repo.creators_for(set(recent_items)) if recent_items else {}

        creator_counts = Counter(
            creators[item_id] for item_id in recent_items if item_id in creators
        )
        return SuppressionState(
            excluded_item_ids={e.item_id for e in exposures},
            creator_recent_exposure_counts=dict(creator_counts),
        )

    @staticmethod
    def apply(candidates: List[Candidate], state: SuppressionState) -> List[Candidate]:
        """Drop excluded candidates, keeping retrieval order."""
        if not state.excluded_item_ids:
            return list(candidates)
        return [c for c in candidates if c.id not in state.excluded_item_ids]
