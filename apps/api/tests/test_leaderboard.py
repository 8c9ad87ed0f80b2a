"""
Tests for leaderboard ranking and badge tiers
"""
from types import SimpleNamespace
from uuid import uuid4

import pytest

from services.leaderboard import BADGE_TIERS, badge_for_points, newly_earned_tiers, rank_users


def _user(name, points):
    return SimpleNamespace(id=uuid4(), username=name, green_points=points, total_data_used_mb=1.5)


class TestBadgeForPoints:
    @pytest.mark.parametrize("points,name", [
        (0, "Newbie"),
        (249, "Newbie"),
        (250, "Getting Started"),
        (499, "Getting Started"),
        (500, "Digital Minimalist"),
        (750, "Eco Messenger"),
        (999, "Eco Messenger"),
        (1000, "Carbon Saver"),
        (50000, "Carbon Saver"),
    ])
    def test_tier_boundaries(self, points, name):
        assert badge_for_points(points).name == name

    def test_tiers_highest_first(self):
        thresholds = [t.threshold for t in BADGE_TIERS]
        assert thresholds == sorted(thresholds, reverse=True)
        assert thresholds[-1] == 0


class TestRankUsers:
    def test_descending_points(self):
        ranked = rank_users([_user("a", 10), _user("b", 900), _user("c", 300)])
        assert [r.username for r in ranked] == ["b", "c", "a"]
        assert [r.rank for r in ranked] == [1, 2, 3]
        assert ranked[0].badge.name == "Eco Messenger"
        assert ranked[0].total_data_used_mb == 1.5

    def test_ties_keep_input_order(self):
        """Equal points: whoever came first in the input stays first"""
        ranked = rank_users([_user("first", 100), _user("second", 100), _user("top", 200)])
        assert [r.username for r in ranked] == ["top", "first", "second"]
        assert [r.rank for r in ranked] == [1, 2, 3]

    def test_tied_carbon_savers(self):
        users = [_user("x", 1000), _user("y", 1000), _user("z", 500)]
        ranked = rank_users(users)
        assert [r.user_id for r in ranked] == [u.id for u in users]
        assert [r.rank for r in ranked] == [1, 2, 3]
        assert [r.badge.name for r in ranked] == ["Carbon Saver", "Carbon Saver", "Digital Minimalist"]

    def test_empty(self):
        assert rank_users([]) == []


class TestNewlyEarnedTiers:
    def test_crossing_one_threshold(self):
        earned = newly_earned_tiers(200, 260)
        assert [t.name for t in earned] == ["Getting Started"]

    def test_crossing_several_thresholds_ascending(self):
        earned = newly_earned_tiers(0, 800)
        assert [t.name for t in earned] == ["Getting Started", "Digital Minimalist", "Eco Messenger"]

    def test_no_crossing(self):
        assert newly_earned_tiers(260, 300) == []

    def test_starting_tier_never_earned(self):
        assert newly_earned_tiers(0, 0) == []
