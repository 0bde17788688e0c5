"""
Pytest configuration and fixtures.
"""
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from foryou.api.dependencies import (
    clear_caches,
    get_exposure_repository,
    get_ranking_config_repository,
    get_signal_repository,
    get_story_repository,
    get_viewer_repository,
)
from foryou.core.clock import FixedRandomSource
from foryou.main import app
from foryou.models.schemas import Candidate
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
from tests.helpers import FrozenClock


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def make_story(clock):
    """Factory for candidates published ``hours_ago`` before the clock."""

    def _make(item_id, creator_id="c1", hours_ago=1.0, category=None, view_count=0):
        return Candidate(
            id=item_id,
            creator_id=creator_id,
            title=f"Story {item_id}",
            category=category,
            view_count=view_count,
            published_at=clock() - timedelta(hours=hours_ago),
        )

    return _make


@pytest.fixture
def story_repo(clock):
    return InMemoryStoryRepository(seed=False, clock=clock)


@pytest.fixture
def signal_repo():
    return InMemorySignalRepository(seed=False)


@pytest.fixture
def viewer_repo(clock):
    return InMemoryViewerRepository(seed=False, clock=clock)


@pytest.fixture
def exposure_repo():
    return InMemoryExposureRepository()


@pytest.fixture
def config_repo():
    return InMemoryRankingConfigRepository()


@pytest.fixture
def make_service(story_repo, signal_repo, viewer_repo, exposure_repo, config_repo, clock):
    """Factory for a fully wired, deterministic ForYouService."""

    def _make(**overrides):
        deps = dict(
            config_provider=ConfigProvider(config_repo, clock=clock),
            retriever=CandidateRetriever(story_repo),
            signal_joiner=SignalJoiner(signal_repo, viewer_repo),
            suppression_filter=SuppressionFilter(exposure_repo, story_repo, clock=clock),
            affinity_engine=AffinityEngine(viewer_repo, story_repo, clock=clock),
            exposure_recorder=ExposureRecorder(exposure_repo, clock=clock),
            feature_flag_service=ConfigBasedFeatureFlagService(),
            random_source=FixedRandomSource(0.0),
            clock=clock,
        )
        deps.update(overrides)
        return ForYouService(**deps)

    return _make


def _provide(value):
    return lambda: value


@pytest.fixture
def seeded_repos():
    """Demo-data repositories as served by the running app."""
    return {
        get_story_repository: InMemoryStoryRepository(),
        get_signal_repository: InMemorySignalRepository(),
        get_viewer_repository: InMemoryViewerRepository(),
        get_exposure_repository: InMemoryExposureRepository(),
        get_ranking_config_repository: InMemoryRankingConfigRepository(),
    }


@pytest.fixture
def test_client(seeded_repos):
    """
    TestClient fixture with dependency overrides.
    Uses fresh in-memory repositories for isolation.
    """
    clear_caches()
    for dependency, repo in seeded_repos.items():
        app.dependency_overrides[dependency] = _provide(repo)

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
    clear_caches()
