"""
Candidate pool retrieval.
Pulls an oversampled, variant-independent pool of recently published stories.
"""
import logging
from typing import List

from foryou.core.exceptions import CandidateRetrievalError
from foryou.models.interfaces import StoryRepository
from foryou.models.schemas import Candidate

logger = logging.getLogger(__name__)


class CandidateRetriever:
    """Fetches the pool every ranking request starts from."""

    def __init__(
        self,
        story_repo: StoryRepository,
        oversample_factor: int = 3,
        min_pool_size: int = 60,
    ) -> None:
        self._story_repo = story_repo
        self._oversample_factor = oversample_factor
        self._min_pool_size = min_pool_size

    def pool_size(self, limit: int) -> int:
        """Pool large enough to survive suppression and diversity filtering."""
        return max(limit * self._oversample_factor, self._min_pool_size)

    async def fetch_candidate_pool(self, pool_size: int) -> List[Candidate]:
        """
        Published stories, newest first.

        Raises:
            CandidateRetrievalError: If the story store cannot be read
        """
        try:
            return await self._story_repo.fetch_published(pool_size)
        except Exception as e:
            logger.error(f"Candidate retrieval failed: {e}")
            raise CandidateRetrievalError(str(e)) from e
