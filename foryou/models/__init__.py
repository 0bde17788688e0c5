"""Models package - domain entities and interfaces."""
from .interfaces import (
    ExposureRepository,
    FeatureFlagService,
    RankingConfigRepository,
    SignalRepository,
    StoryRepository,
    ViewerRepository,
)
from .schemas import (
    AffinityState,
    AuthoritySignal,
    Candidate,
    ConfigListResponse,
    ConfigUpsertRequest,
    DiversityRules,
    EngagementSignal,
    ErrorResponse,
    ExposureRecord,
    ExposureSummary,
    ForYouResponse,
    Identity,
    InspectResponse,
    InteractionRecord,
    Pagination,
    RankingConfigRow,
    RankingWeights,
    ScoredCandidate,
    Selection,
    SignalBundle,
    SuppressionState,
    VelocitySignal,
)

__all__ = [
    # Interfaces
    "ExposureRepository",
    "FeatureFlagService",
    "RankingConfigRepository",
    "SignalRepository",
    "StoryRepository",
    "ViewerRepository",
    # Schemas
    "AffinityState",
    "AuthoritySignal",
    "Candidate",
    "ConfigListResponse",
    "ConfigUpsertRequest",
    "DiversityRules",
    "EngagementSignal",
    "ErrorResponse",
    "ExposureRecord",
    "ExposureSummary",
    "ForYouResponse",
    "Identity",
    "InspectResponse",
    "InteractionRecord",
    "Pagination",
    "RankingConfigRow",
    "RankingWeights",
    "ScoredCandidate",
    "Selection",
    "SignalBundle",
    "SuppressionState",
    "VelocitySignal",
]
