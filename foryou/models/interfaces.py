"""
Collaborator interfaces (abstractions).
Using Protocol for structural subtyping; the ranking services only
depend on these contracts, never on a concrete store.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Set, runtime_checkable

from foryou.models.schemas import (
    AuthoritySignal,
    Candidate,
    EngagementSignal,
    ExposureRecord,
    Identity,
    InteractionRecord,
    RankingConfigRow,
    VelocitySignal,
)


@runtime_checkable
class StoryRepository(Protocol):
    """
    Published stories and their static attributes.
    Production: relational `stories` and `story_hashtags` tables.
    """

    async def fetch_published(self, limit: int) -> List[Candidate]:
        """Published stories, newest first, at most ``limit``."""
        ...

    async def creators_for(self, item_ids: Iterable[str]) -> Dict[str, str]:
        """Item id -> creator id for the given items."""
        ...

    async def tags_for(self, item_ids: Iterable[str]) -> Dict[str, List[str]]:
        """Item id -> hashtags. Items without tags may be absent."""
        ...


@runtime_checkable
class SignalRepository(Protocol):
    """
    Per-story and per-creator signal tables.
    Each lookup returns only the rows that exist.
    """

    async def like_counts(self, item_ids: Sequence[str]) -> Dict[str, int]:
        ...

    async def engagement_metrics(self, item_ids: Sequence[str]) -> Dict[str, EngagementSignal]:
        ...

    async def velocity(self, item_ids: Sequence[str]) -> Dict[str, VelocitySignal]:
        ...

    async def creator_authority(self, creator_ids: Sequence[str]) -> Dict[str, AuthoritySignal]:
        ...


@runtime_checkable
class ViewerRepository(Protocol):
    """Follows and interaction history."""

    async def followed_creators(self, viewer_id: str) -> Set[str]:
        ...

    async def recent_interactions(
        self,
        viewer_id: str,
        since: datetime,
        limit: int,
    ) -> List[InteractionRecord]:
        """The viewer's interactions since ``since``, newest first."""
        ...

    async def interactions_on_items(
        self,
        item_ids: Iterable[str],
        exclude_viewer_id: str,
        limit: int,
    ) -> List[InteractionRecord]:
        """Other viewers' interactions with the given items."""
        ...

    async def interactions_by_viewers(
        self,
        viewer_ids: Iterable[str],
        item_ids: Iterable[str],
    ) -> List[InteractionRecord]:
        """Interactions of ``viewer_ids`` restricted to ``item_ids``."""
        ...


@runtime_checkable
class ExposureRepository(Protocol):
    """Append-only exposure log."""

    async def exposures_since(self, identity: Identity, since: datetime) -> List[ExposureRecord]:
        """Exposures for the identity's viewer id, else its session id."""
        ...

    async def append(self, records: List[ExposureRecord]) -> None:
        ...

    async def counts_by_variant_day(self, since: datetime) -> Dict[str, Dict[str, int]]:
        """UTC day (YYYY-MM-DD) -> variant -> exposure count, for rows since ``since``."""
        ...


@runtime_checkable
class RankingConfigRepository(Protocol):
    """Admin-managed ranking configuration documents."""

    async def get_config(self, key: str, variant: str) -> Optional[RankingConfigRow]:
        """Active row for (key, variant), or None."""
        ...

    async def list_configs(
        self,
        key: Optional[str] = None,
        variant: Optional[str] = None,
    ) -> List[RankingConfigRow]:
        """Rows newest first, optionally filtered."""
        ...

    async def upsert(self, row: RankingConfigRow) -> None:
        ...


class FeatureFlagService(ABC):
    """
    Abstract base class for feature flag evaluation.
    Gates viewer-specific ranking terms.
    """

    @abstractmethod
    def is_personalization_enabled(self, viewer_id: Optional[str]) -> bool:
        """
        Check if viewer-specific terms apply to this request.

        Args:
            viewer_id: Authenticated viewer, if any

        Returns:
            True if follow boost and affinity should be computed
        """
        pass

    @abstractmethod
    def is_kill_switch_active(self) -> bool:
        pass
