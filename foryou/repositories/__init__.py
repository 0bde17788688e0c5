"""Repository implementations package."""
from .memory import (
    DEMO_VIEWER_ID,
    InMemoryExposureRepository,
    InMemoryRankingConfigRepository,
    InMemorySignalRepository,
    InMemoryStoryRepository,
    InMemoryViewerRepository,
)

__all__ = [
    "DEMO_VIEWER_ID",
    "InMemoryExposureRepository",
    "InMemoryRankingConfigRepository",
    "InMemorySignalRepository",
    "InMemoryStoryRepository",
    "InMemoryViewerRepository",
]
