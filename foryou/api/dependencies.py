"""
Dependency injection container.
Creates and wires all application components.
Uses FastAPI's dependency injection system.
"""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from foryou.config import get_settings
from foryou.core.cache import TTLCache
from foryou.core.circuit_breaker import CircuitBreaker
from foryou.core.clock import Clock, RandomSource, SystemRandomSource, utc_now
from foryou.core.exceptions import ForbiddenError
from foryou.repositories.memory import (
    InMemoryExposureRepository,
    InMemoryRankingConfigRepository,
    InMemorySignalRepository,
    InMemoryStoryRepository,
    InMemoryViewerRepository,
)
from foryou.services.affinity import AffinityEngine
from foryou.services.config_provider import ConfigProvider
from foryou.services.exposure import ExposureRecorder
from foryou.services.feature_flags import ConfigBasedFeatureFlagService
from foryou.services.feed import ForYouService
from foryou.services.retrieval import CandidateRetriever
from foryou.services.signals import SignalJoiner
from foryou.services.suppression import SuppressionFilter


# =============================================================================
# Singleton Instances (Application Lifetime)
# =============================================================================


def get_clock() -> Clock:
    return utc_now


@lru_cache()
def get_story_repository() -> InMemoryStoryRepository:
    return InMemoryStoryRepository()


@lru_cache()
def get_signal_repository() -> InMemorySignalRepository:
    return InMemorySignalRepository()


@lru_cache()
def get_viewer_repository() -> InMemoryViewerRepository:
    return InMemoryViewerRepository()


@lru_cache()
def get_exposure_repository() -> InMemoryExposureRepository:
    return InMemoryExposureRepository()


@lru_cache()
def get_ranking_config_repository() -> InMemoryRankingConfigRepository:
    return InMemoryRankingConfigRepository()


@lru_cache()
def get_feature_flag_service() -> ConfigBasedFeatureFlagService:
    return ConfigBasedFeatureFlagService()


@lru_cache()
def get_random_source() -> RandomSource:
    return SystemRandomSource()


@lru_cache()
def get_config_circuit_breaker() -> CircuitBreaker:
    """Get singleton circuit breaker for the ranking config store."""
    settings = get_settings()
    return CircuitBreaker(
        name="ranking_config_store",
        failure_threshold=settings.CIRCUIT_BREAKER_FAILURE_THRESHOLD,
        recovery_timeout_sec=settings.CIRCUIT_BREAKER_RECOVERY_TIMEOUT_SEC,
    )


@lru_cache()
def get_weights_cache() -> TTLCache:
    return TTLCache(ttl_seconds=get_settings().RANKING_CONFIG_TTL_SEC)


# =============================================================================
# Request-Scoped Dependencies (Per-Request Lifetime)
# =============================================================================


def get_viewer_id(
    x_user_id: Optional[str] = Header(
        default=None,
        alias="X-User-Id",
        description="Viewer id resolved by the upstream auth layer",
    ),
) -> Optional[str]:
    """Viewer identity as supplied by the upstream auth collaborator."""
    return x_user_id or None


def require_admin(viewer_id: Optional[str] = Depends(get_viewer_id)) -> str:
    """Viewer id of an admin caller; 403 for everyone else."""
    if not viewer_id or viewer_id not in get_settings().admin_user_ids:
        raise ForbiddenError("admin only")
    return viewer_id


def get_config_provider(
    repository=Depends(get_ranking_config_repository),
    clock: Clock = Depends(get_clock),
) -> ConfigProvider:
    return ConfigProvider(
        repository=repository,
        config_key=get_settings().RANKING_CONFIG_KEY,
        cache=get_weights_cache(),
        circuit_breaker=get_config_circuit_breaker(),
        clock=clock,
    )


def get_exposure_recorder(
    exposure_repo=Depends(get_exposure_repository),
    clock: Clock = Depends(get_clock),
) -> ExposureRecorder:
    return ExposureRecorder(exposure_repo, clock=clock)


def get_for_you_service(
    config_provider: ConfigProvider = Depends(get_config_provider),
    story_repo=Depends(get_story_repository),
    signal_repo=Depends(get_signal_repository),
    viewer_repo=Depends(get_viewer_repository),
    exposure_repo=Depends(get_exposure_repository),
    exposure_recorder: ExposureRecorder = Depends(get_exposure_recorder),
    feature_flags=Depends(get_feature_flag_service),
    random_source=Depends(get_random_source),
    clock: Clock = Depends(get_clock),
) -> ForYouService:
    """
    Get For You service with all dependencies wired.
    This is the main entry point for the feed endpoint.
    """
    settings = get_settings()
    return ForYouService(
        config_provider=config_provider,
        retriever=CandidateRetriever(
            story_repo,
            oversample_factor=settings.POOL_OVERSAMPLE_FACTOR,
            min_pool_size=settings.POOL_MIN_SIZE,
        ),
        signal_joiner=SignalJoiner(
            signal_repo,
            viewer_repo,
            timeout_ms=settings.SIGNAL_JOIN_TIMEOUT_MS,
        ),
        suppression_filter=SuppressionFilter(
            exposure_repo,
            story_repo,
            window_hours=settings.SUPPRESSION_WINDOW_HOURS,
            cooldown_hours=settings.CREATOR_COOLDOWN_WINDOW_HOURS,
            timeout_ms=settings.SUPPRESSION_TIMEOUT_MS,
            clock=clock,
        ),
        affinity_engine=AffinityEngine(
            viewer_repo,
            story_repo,
            lookback_days=settings.AFFINITY_LOOKBACK_DAYS,
            seed_limit=settings.AFFINITY_SEED_LIMIT,
            co_engagement_sample_limit=settings.CO_ENGAGEMENT_SAMPLE_LIMIT,
            timeout_ms=settings.AFFINITY_TIMEOUT_MS,
            clock=clock,
        ),
        exposure_recorder=exposure_recorder,
        feature_flag_service=feature_flags,
        random_source=random_source,
        clock=clock,
    )


# =============================================================================
# Cleanup Functions
# =============================================================================


def clear_caches() -> None:
    """Clear all cached singleton instances (for testing)."""
    get_story_repository.cache_clear()
    get_signal_repository.cache_clear()
    get_viewer_repository.cache_clear()
    get_exposure_repository.cache_clear()
    get_ranking_config_repository.cache_clear()
    get_feature_flag_service.cache_clear()
    get_random_source.cache_clear()
    get_config_circuit_breaker.cache_clear()
    get_weights_cache.cache_clear()
