from collections import Counter

from foryou.models.schemas import DiversityRules, ScoredCandidate
from foryou.services.diversity import DiversitySelector


def ranked(make_story, rows):
    """rows: list of (item_id, creator_id, category, score), already sorted."""
    return [
        ScoredCandidate(candidate=make_story(i, creator_id=c, category=cat), score=s)
        for i, c, cat, s in rows
    ]


class TestDiversitySelector:
    def test_dominant_creator_is_capped_and_other_creator_included(self, make_story):
        items = ranked(make_story, [
            ("x1", "cx", None, 0.9),
            ("x2", "cx", None, 0.8),
            ("x3", "cx", None, 0.7),
            ("y1", "cy", None, 0.1),
        ])

        selection = DiversitySelector().select(items, limit=4, page=1, rules=DiversityRules(per_creator_max=2))

        ids = [s.candidate.id for s in selection.items]
        assert ids == ["x1", "x2", "y1"]
        assert Counter(s.candidate.creator_id for s in selection.items)["cx"] == 2
        assert selection.total == 3

    def test_no_creator_exceeds_cap(self, make_story):
        rows = [(f"s{i}", f"c{i % 3}", None, 1.0 - i / 100) for i in range(30)]
        rules = DiversityRules(per_creator_max=4)

        selection = DiversitySelector().select(ranked(make_story, rows), limit=20, page=1, rules=rules)

        counts = Counter(s.candidate.creator_id for s in selection.items)
        assert max(counts.values()) <= 4
        assert selection.total == 12

    def test_second_page_continues_after_skips(self, make_story):
        items = ranked(make_story, [
            ("a1", "ca", None, 0.9),
            ("a2", "ca", None, 0.8),
            ("a3", "ca", None, 0.7),
            ("b1", "cb", None, 0.6),
            ("c1", "cc", None, 0.5),
            ("d1", "cd", None, 0.4),
        ])

        selection = DiversitySelector().select(items, limit=2, page=2, rules=DiversityRules(per_creator_max=2))

        assert [s.candidate.id for s in selection.items] == ["b1", "c1"]
        assert selection.start == 2
        assert selection.total == 5

    def test_exhausted_pool_returns_short_page(self, make_story):
        items = ranked(make_story, [("a1", "ca", None, 0.9)])

        selection = DiversitySelector().select(items, limit=10, page=1, rules=DiversityRules())

        assert len(selection.items) == 1
        assert selection.total == 1

    def test_page_past_the_end_is_empty(self, make_story):
        items = ranked(make_story, [("a1", "ca", None, 0.9)])

        selection = DiversitySelector().select(items, limit=10, page=3, rules=DiversityRules())

        assert selection.items == []
        assert selection.total == 1

    def test_category_window(self, make_story):
        rows = [(f"s{i}", f"c{i}", "comedy", 1.0 - i / 10) for i in range(4)]
        rows.append(("d1", "cd", "drama", 0.1))
        rules = DiversityRules(per_creator_max=5, per_category_window=3, per_category_max_in_window=2)

        selection = DiversitySelector().select(ranked(make_story, rows), limit=10, page=1, rules=rules)

        ids = [s.candidate.id for s in selection.items]
        assert ids == ["s0", "s1", "d1"]

    def test_uncategorised_items_are_not_window_limited(self, make_story):
        rows = [(f"s{i}", f"c{i}", None, 1.0 - i / 10) for i in range(5)]
        rules = DiversityRules(per_creator_max=5, per_category_window=3, per_category_max_in_window=1)

        selection = DiversitySelector().select(ranked(make_story, rows), limit=10, page=1, rules=rules)

        assert selection.total == 5

    def test_category_rule_disabled_with_zero(self, make_story):
        rows = [(f"s{i}", f"c{i}", "comedy", 1.0 - i / 10) for i in range(4)]
        rules = DiversityRules(per_creator_max=5, per_category_window=3, per_category_max_in_window=0)

        selection = DiversitySelector().select(ranked(make_story, rows), limit=10, page=1, rules=rules)

        assert selection.total == 4
