"""
Diversity-constrained page selection.
"""
import logging
from collections import Counter
from typing import List

from foryou.models.schemas import DiversityRules, ScoredCandidate, Selection

logger = logging.getLogger(__name__)


class DiversitySelector:
    """
    Walks score-sorted candidates and keeps those that respect the caps.

    - per creator: at most ``per_creator_max`` kept items
    - per category: at most ``per_category_max_in_window`` items of one
      category among the last ``per_category_window`` kept items
      (disabled when either is 0; uncategorised items are exempt)

    Skipped items do not take a position. ``total`` counts every item that
    qualified, so pagination can be computed from it.
    """

    def select(
        self,
        ranked: List[ScoredCandidate],
        limit: int,
        page: int,
        rules: DiversityRules,
    ) -> Selection:
        start = (page - 1) * limit
        per_creator: Counter = Counter()
        kept_categories: List[str] = []
        qualifying: List[ScoredCandidate] = []

        for item in ranked:
            creator_id = item.candidate.creator_id
            if per_creator[creator_id] >= rules.per_creator_max:
                continue

            category = item.candidate.category
            if category and not self._category_allows(category, kept_categories, rules):
                continue

            per_creator[creator_id] += 1
            kept_categories.append(category or "")
            qualifying.append(item)

        items = qualifying[start:start + limit]
        logger.debug(
            f"Diversity kept {len(qualifying)} of {len(ranked)} candidates, "
            f"page window [{start}, {start + limit})"
        )
        return Selection(items=items, total=len(qualifying), start=start)

    @staticmethod
    def _category_allows(category: str, kept: List[str], rules: DiversityRules) -> bool:
        if rules.per_category_window <= 0 or rules.per_category_max_in_window <= 0:
            return True
        window = kept[-rules.per_category_window:]
        return window.count(category) < rules.per_category_max_in_window
