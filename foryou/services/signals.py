"""
Signal joining.
Fans out to every signal source concurrently and left-joins the results
onto the candidate list. A failing or slow source degrades to zeros.
"""
import asyncio
import logging
from typing import Awaitable, Dict, List, Optional, Set, TypeVar

from foryou.models.interfaces import SignalRepository, ViewerRepository
from foryou.models.schemas import (
    AuthoritySignal,
    Candidate,
    EngagementSignal,
    SignalBundle,
    VelocitySignal,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SignalJoiner:
    """Builds one SignalBundle per candidate from the signal tables."""

    def __init__(
        self,
        signal_repo: SignalRepository,
        viewer_repo: ViewerRepository,
        timeout_ms: int = 250,
    ) -> None:
        self._signal_repo = signal_repo
        self._viewer_repo = viewer_repo
        self._timeout_sec = timeout_ms / 1000

    async def _guarded(self, source: str, lookup: Awaitable[T], default: T) -> T:
        try:
            return await asyncio.wait_for(lookup, timeout=self._timeout_sec)
        except Exception as e:
            logger.warning(f"Signal source '{source}' unavailable, using defaults: {e!r}")
            return default

    async def attach_signals(self, candidates: List[Candidate]) -> Dict[str, SignalBundle]:
        """
        Map every candidate id to its SignalBundle.

        Candidates with no row in a source get that source's zero default,
        so the result always has an entry per candidate.
        """
        if not candidates:
            return {}

        item_ids = [c.id for c in candidates]
        creator_ids = list(dict.fromkeys(c.creator_id for c in candidates))

        likes, engagement, velocity, authority = await asyncio.gather(
            self._guarded("likes", self._signal_repo.like_counts(item_ids), {}),
            self._guarded("engagement", self._signal_repo.engagement_metrics(item_ids), {}),
            self._guarded("velocity", self._signal_repo.velocity(item_ids), {}),
            self._guarded("authority", self._signal_repo.creator_authority(creator_ids), {}),
        )

        return {
            c.id: SignalBundle(
                like_count=likes.get(c.id) or 0,
                engagement=engagement.get(c.id) or EngagementSignal(),
                velocity=velocity.get(c.id) or VelocitySignal(),
                authority=authority.get(c.creator_id) or AuthoritySignal(),
            )
            for c in candidates
        }

    async def followed_creators(self, viewer_id: Optional[str]) -> Set[str]:
        """Creators the viewer follows; empty for anonymous viewers or on failure."""
        if not viewer_id:
            return set()
        return await self._guarded("follows", self._viewer_repo.followed_creators(viewer_id), set())
