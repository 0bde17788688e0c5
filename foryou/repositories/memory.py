"""
In-memory repository implementations.
Used for prototyping and testing.
Production would replace these with Postgres-backed implementations.
"""
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from foryou.core.clock import Clock, utc_now
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

DEMO_VIEWER_ID = "viewer_demo"


class InMemoryStoryRepository:
    """
    In-memory implementation of StoryRepository.
    Simulates the `stories` and `story_hashtags` tables.
    """

    def __init__(self, seed: bool = True, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._stories: Dict[str, Candidate] = {}
        self._published: Set[str] = set()
        self._tags: Dict[str, List[str]] = {}
        if seed:
            self._initialize_mock_data()

    def _initialize_mock_data(self) -> None:
        """Load demo stories across a handful of creators."""
        now = self._clock()
        hour = timedelta(hours=1)
        demo = [
            ("s_forest", "c_ana", "Lost in the Forest", "adventure", 2, 950, ["forest", "mystery"]),
            ("s_heist", "c_ana", "The Museum Heist", "thriller", 5, 420, ["heist", "mystery"]),
            ("s_lab", "c_ana", "Midnight Lab", "scifi", 9, 210, ["science", "mystery"]),
            ("s_diner", "c_ben", "Choose Your Order", "comedy", 1, 640, ["food", "comedy"]),
            ("s_date", "c_ben", "Blind Date Paths", "romance", 20, 130, ["dating", "comedy"]),
            ("s_orbit", "c_cleo", "Orbit Decision", "scifi", 30, 310, ["space", "science"]),
            ("s_ghost", "c_cleo", "Ghost Hotel", "horror", 48, 160, ["ghost", "mystery"]),
            ("s_chef", "c_dev", "Kitchen Showdown", "comedy", 60, 75, ["food", "competition"]),
        ]
        for item_id, creator_id, title, category, age_hours, views, tags in demo:
            self.add_story(
                Candidate(
                    id=item_id,
                    creator_id=creator_id,
                    title=title,
                    category=category,
                    view_count=views,
                    published_at=now - age_hours * hour,
                ),
                tags=tags,
            )
        self.add_story(
            Candidate(
                id="s_draft",
                creator_id="c_dev",
                title="Unreleased Draft",
                published_at=now,
            ),
            published=False,
        )

    def add_story(
        self,
        candidate: Candidate,
        tags: Iterable[str] = (),
        published: bool = True,
    ) -> None:
        self._stories[candidate.id] = candidate
        if published:
            self._published.add(candidate.id)
        else:
            self._published.discard(candidate.id)
        tag_list = list(tags)
        if tag_list:
            self._tags[candidate.id] = tag_list

    async def fetch_published(self, limit: int) -> List[Candidate]:
        published = [self._stories[item_id] for item_id in self._published]
        published.sort(key=lambda c: c.published_at, reverse=True)
        return published[:limit]

    async def creators_for(self, item_ids: Iterable[str]) -> Dict[str, str]:
        return {
            item_id: self._stories[item_id].creator_id
            for item_id in item_ids
            if item_id in self._stories
        }

    async def tags_for(self, item_ids: Iterable[str]) -> Dict[str, List[str]]:
        return {item_id: list(self._tags[item_id]) for item_id in item_ids if item_id in self._tags}


class InMemorySignalRepository:
    """
    In-memory implementation of SignalRepository.
    Simulates `story_like_counts`, `story_engagement_metrics`,
    `story_velocity` and `creator_authority`.
    """

    def __init__(self, seed: bool = True) -> None:
        self._likes: Dict[str, int] = {}
        self._engagement: Dict[str, EngagementSignal] = {}
        self._velocity: Dict[str, VelocitySignal] = {}
        self._authority: Dict[str, AuthoritySignal] = {}
        if seed:
            self._initialize_mock_data()

    def _initialize_mock_data(self) -> None:
        self._likes.update({"s_forest": 120, "s_heist": 40, "s_diner": 75, "s_orbit": 15})
        self._engagement.update({
            "s_forest": EngagementSignal(total_views=900, completions=540, replay_users=30),
            "s_heist": EngagementSignal(total_views=400, completions=120, replay_users=4),
            "s_diner": EngagementSignal(total_views=600, completions=420, replay_users=12),
            "s_orbit": EngagementSignal(total_views=300, completions=90, replay_users=2),
            "s_ghost": EngagementSignal(total_views=150, completions=30, replay_users=1),
        })
        self._velocity.update({
            "s_forest": VelocitySignal(views_48h=500, likes_48h=60, comments_48h=12, shares_48h=5, completes_48h=200),
            "s_diner": VelocitySignal(views_48h=350, likes_48h=40, comments_48h=20, shares_48h=9, completes_48h=150),
            "s_heist": VelocitySignal(views_48h=80, likes_48h=6, comments_48h=1, completes_48h=20),
        })
        self._authority.update({
            "c_ana": AuthoritySignal(follower_count=12000, avg_completion_rate=0.55),
            "c_ben": AuthoritySignal(follower_count=3000, avg_completion_rate=0.62),
            "c_cleo": AuthoritySignal(follower_count=800, avg_completion_rate=0.3),
        })

    def set_like_count(self, item_id: str, count: int) -> None:
        self._likes[item_id] = count

    def set_engagement(self, item_id: str, signal: EngagementSignal) -> None:
        self._engagement[item_id] = signal

    def set_velocity(self, item_id: str, signal: VelocitySignal) -> None:
        self._velocity[item_id] = signal

    def set_authority(self, creator_id: str, signal: AuthoritySignal) -> None:
        self._authority[creator_id] = signal

    async def like_counts(self, item_ids: Sequence[str]) -> Dict[str, int]:
        return {i: self._likes[i] for i in item_ids if i in self._likes}

    async def engagement_metrics(self, item_ids: Sequence[str]) -> Dict[str, EngagementSignal]:
        return {i: self._engagement[i] for i in item_ids if i in self._engagement}

    async def velocity(self, item_ids: Sequence[str]) -> Dict[str, VelocitySignal]:
        return {i: self._velocity[i] for i in item_ids if i in self._velocity}

    async def creator_authority(self, creator_ids: Sequence[str]) -> Dict[str, AuthoritySignal]:
        return {c: self._authority[c] for c in creator_ids if c in self._authority}


class InMemoryViewerRepository:
    """
    In-memory implementation of ViewerRepository.
    Simulates `user_follows` and `user_interactions`.
    """

    def __init__(self, seed: bool = True, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._follows: Dict[str, Set[str]] = {}
        self._interactions: List[InteractionRecord] = []
        if seed:
            self._initialize_mock_data()

    def _initialize_mock_data(self) -> None:
        now = self._clock()
        self.follow(DEMO_VIEWER_ID, "c_cleo")
        history = [
            (DEMO_VIEWER_ID, "s_ghost", "complete", 3),
            (DEMO_VIEWER_ID, "s_heist", "like", 6),
            ("viewer_sam", "s_ghost", "view", 2),
            ("viewer_sam", "s_lab", "like", 1),
            ("viewer_kai", "s_heist", "complete", 5),
            ("viewer_kai", "s_lab", "complete", 4),
            ("viewer_kai", "s_orbit", "view", 4),
        ]
        for viewer_id, item_id, kind, hours_ago in history:
            self.add_interaction(
                InteractionRecord(
                    viewer_id=viewer_id,
                    item_id=item_id,
                    type=kind,
                    created_at=now - timedelta(hours=hours_ago),
                )
            )

    def follow(self, viewer_id: str, creator_id: str) -> None:
        self._follows.setdefault(viewer_id, set()).add(creator_id)

    def add_interaction(self, record: InteractionRecord) -> None:
        self._interactions.append(record)

    async def followed_creators(self, viewer_id: str) -> Set[str]:
        return set(self._follows.get(viewer_id, set()))

    async def recent_interactions(
        self,
        viewer_id: str,
        since: datetime,
        limit: int,
    ) -> List[InteractionRecord]:
        rows = [
            r for r in self._interactions
            if r.viewer_id == viewer_id and r.created_at >= since
        ]
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return rows[:limit]

    async def interactions_on_items(
        self,
        item_ids: Iterable[str],
        exclude_viewer_id: str,
        limit: int,
    ) -> List[InteractionRecord]:
        wanted = set(item_ids)
        rows = [
            r for r in self._interactions
            if r.item_id in wanted and r.viewer_id != exclude_viewer_id
        ]
        return rows[:limit]

    async def interactions_by_viewers(
        self,
        viewer_ids: Iterable[str],
        item_ids: Iterable[str],
    ) -> List[InteractionRecord]:
        viewers = set(viewer_ids)
        items = set(item_ids)
        return [r for r in self._interactions if r.viewer_id in viewers and r.item_id in items]


class InMemoryExposureRepository:
    """
    In-memory implementation of ExposureRepository.
    Simulates the append-only `feed_exposures` table.
    """

    def __init__(self) -> None:
        self._records: List[ExposureRecord] = []

    @property
    def records(self) -> List[ExposureRecord]:
        return list(self._records)

    async def exposures_since(self, identity: Identity, since: datetime) -> List[ExposureRecord]:
        if identity.viewer_id:
            field, value = "viewer_id", identity.viewer_id
        elif identity.session_id:
            field, value = "session_id", identity.session_id
        else:
            return []
        return [
            r for r in self._records
            if getattr(r, field) == value and r.created_at >= since
        ]

    async def append(self, records: List[ExposureRecord]) -> None:
        self._records.extend(records)

    async def counts_by_variant_day(self, since: datetime) -> Dict[str, Dict[str, int]]:
        counts: Dict[str, Dict[str, int]] = {}
        for r in self._records:
            if r.created_at < since:
                continue
            day = counts.setdefault(r.created_at.date().isoformat(), {})
            day[r.variant] = day.get(r.variant, 0) + 1
        return counts


class InMemoryRankingConfigRepository:
    """
    In-memory implementation of RankingConfigRepository.
    Simulates the `recs_config` table keyed by (key, variant).
    """

    def __init__(self) -> None:
        self._rows: Dict[Tuple[str, str], RankingConfigRow] = {}

    async def get_config(self, key: str, variant: str) -> Optional[RankingConfigRow]:
        row = self._rows.get((key, variant))
        if row is None or not row.active:
            return None
        return row

    async def list_configs(
        self,
        key: Optional[str] = None,
        variant: Optional[str] = None,
    ) -> List[RankingConfigRow]:
        rows = [
            row for row in self._rows.values()
            if (key is None or row.key == key) and (variant is None or row.variant == variant)
        ]
        rows.sort(key=lambda r: r.updated_at, reverse=True)
        return rows

    async def upsert(self, row: RankingConfigRow) -> None:
        self._rows[(row.key, row.variant)] = row
