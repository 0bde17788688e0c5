"""
Domain models using Pydantic.
All data structures for the For You ranking pipeline.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =============================================================================
# Content & Signals
# =============================================================================


class Candidate(BaseModel):
    """
    A published story under consideration for the page.
    Display attributes are passed through untouched.
    """

    id: str = Field(..., description="Story identifier")
    creator_id: str = Field(..., description="Owning creator")
    title: str = Field(..., description="Story title")
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    view_count: int = Field(default=0, ge=0, description="Lifetime views (fallback only)")
    published_at: datetime = Field(..., description="Publication timestamp")
    is_premium: bool = False
    tip_enabled: bool = False
    category: Optional[str] = None

    @field_validator("published_at")
    @classmethod
    def published_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class EngagementSignal(BaseModel):
    total_views: int = Field(default=0, ge=0)
    completions: int = Field(default=0, ge=0)
    replay_users: int = Field(default=0, ge=0)


class VelocitySignal(BaseModel):
    """Activity over the last 48 hours."""

    views_48h: int = Field(default=0, ge=0)
    likes_48h: int = Field(default=0, ge=0)
    comments_48h: int = Field(default=0, ge=0)
    shares_48h: int = Field(default=0, ge=0)
    completes_48h: int = Field(default=0, ge=0)


class AuthoritySignal(BaseModel):
    """Creator-level reputation."""

    follower_count: int = Field(default=0, ge=0)
    avg_completion_rate: float = Field(default=0.0, ge=0.0)


class SignalBundle(BaseModel):
    """
    Signals joined onto one candidate.
    ``SignalBundle()`` is the all-zero default used when a source has no row.
    """

    like_count: int = Field(default=0, ge=0)
    engagement: EngagementSignal = Field(default_factory=EngagementSignal)
    velocity: VelocitySignal = Field(default_factory=VelocitySignal)
    authority: AuthoritySignal = Field(default_factory=AuthoritySignal)


class InteractionRecord(BaseModel):
    viewer_id: str
    item_id: str
    type: str = "view"
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


# =============================================================================
# Per-request State
# =============================================================================


class Identity(BaseModel):
    """Who the ranking request is for. Viewer id wins over session id."""

    model_config = ConfigDict(frozen=True)

    viewer_id: Optional[str] = None
    session_id: Optional[str] = None

    @property
    def kind(self) -> str:
        if self.viewer_id:
            return "viewer"
        if self.session_id:
            return "session"
        return "anonymous"

    @property
    def is_anonymous(self) -> bool:
        return self.kind == "anonymous"


class SuppressionState(BaseModel):
    excluded_item_ids: Set[str] = Field(
        default_factory=set,
        description="Items exposed in the last 24h (hard exclusion)",
    )
    creator_recent_exposure_counts: Dict[str, int] = Field(
        default_factory=dict,
        description="Creator id -> exposures in the last 4h (soft penalty)",
    )


class AffinityState(BaseModel):
    topic_boost: Dict[str, float] = Field(default_factory=dict)
    co_engagement_boost: Dict[str, float] = Field(default_factory=dict)


class ScoredCandidate(BaseModel):
    """Candidate with its final score and per-term breakdown."""

    candidate: Candidate
    score: float
    breakdown: Dict[str, float] = Field(default_factory=dict)


class Selection(BaseModel):
    """Result of diversity-constrained selection."""

    items: List[ScoredCandidate] = Field(default_factory=list)
    total: int = Field(..., ge=0, description="Qualifying candidates across all pages")
    start: int = Field(..., ge=0, description="Absolute offset of the first item")


# =============================================================================
# Ranking Configuration
# =============================================================================


class DiversityRules(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    per_creator_max: int = Field(default=2, ge=1)
    per_category_window: int = Field(default=10, ge=0)
    per_category_max_in_window: int = Field(
        default=5,
        ge=0,
        description="0 disables the category window rule",
    )


class RankingWeights(BaseModel):
    """
    Linear coefficients of the scoring formula for one variant.
    Immutable; passed explicitly through scoring and selection.
    Unknown keys are rejected so a mistyped override cannot be stored.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    completion: float = 0.32
    likes: float = 0.22
    recency: float = 0.12
    replay: float = 0.10
    velocity: float = 0.14
    authority: float = 0.10
    follow_boost: float = 0.5
    freshness_hours: float = Field(default=72.0, gt=0)
    jitter_max: float = Field(default=0.05, ge=0)
    cf_enabled: bool = False
    cf_max_boost: float = Field(default=0.0, ge=0)
    diversity: DiversityRules = Field(default_factory=DiversityRules)


class ExposureRecord(BaseModel):
    """Append-only record of one story shown at one absolute position."""

    viewer_id: Optional[str] = None
    session_id: Optional[str] = None
    variant: str
    item_id: str
    position: int = Field(..., ge=1)
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class RankingConfigRow(BaseModel):
    """Stored weight document keyed by (key, variant)."""

    key: str
    variant: str
    data: Dict[str, Any] = Field(default_factory=dict)
    active: bool = True
    updated_at: datetime


# =============================================================================
# API Models (External)
# =============================================================================


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(..., alias="totalPages")


class ForYouResponse(BaseModel):
    """For You endpoint response."""

    model_config = ConfigDict(populate_by_name=True)

    stories: List[Candidate] = Field(..., description="Ranked page of stories")
    pagination: Pagination
    assigned_variant: str = Field(..., alias="assignedVariant")


class InspectResponse(BaseModel):
    """Ranked page with per-term score breakdowns; no exposures recorded."""

    model_config = ConfigDict(populate_by_name=True)

    total: int
    items: List[ScoredCandidate]
    assigned_variant: str = Field(..., alias="assignedVariant")


class ExposureSummary(BaseModel):
    since: datetime
    counts: Dict[str, Dict[str, int]] = Field(
        default_factory=dict,
        description="UTC day -> variant -> exposures",
    )


class ConfigUpsertRequest(BaseModel):
    key: str = Field(..., min_length=1)
    variant: str = Field(..., min_length=1)
    data: Dict[str, Any]
    active: bool = True


class ConfigListResponse(BaseModel):
    configs: List[RankingConfigRow]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: Dict[str, Any] = Field(..., description="Error details")
