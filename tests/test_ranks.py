"""
tests/test_ranks.py — Rank Ladders, Currency Names & Level Formula
===================================================================
Pure-function tests, no database.
"""

from __future__ import annotations

import pytest

from hyperbolic.constants import level_for_xp, next_level_xp
from hyperbolic.engine.ranks import (
    GENERIC_TITLES,
    HIGH_FREQUENCY_THRESHOLDS,
    STANDARD_THRESHOLDS,
    currency_name,
    next_rank,
    rank_for,
    rank_ladder,
)


class TestRankFor:
    def test_zero_xp_is_first_tier(self):
        assert rank_for("gundam", 0) == "Cadet"
        assert rank_for("one_piece", 0) == "East Blue Rookie"

    def test_exact_threshold_reaches_tier(self):
        assert rank_for("gundam", 100) == "Ensign"
        assert rank_for("gundam", 99) == "Cadet"

    def test_high_frequency_ladder_is_steeper(self):
        # 150 XP ranks up a standard game but not One Piece
        assert rank_for("pokemon", 150) == "Trainer"
        assert rank_for("one_piece", 150) == "East Blue Rookie"
        assert rank_for("one_piece", 200) == "Paradise Pirate"

    def test_between_thresholds_floors(self):
        assert rank_for("mtg", 999) == "Sorcerer"
        assert rank_for("mtg", 1000) == "Archmage"

    def test_top_tier_caps(self):
        assert rank_for("gundam", 2500) == "Newtype"
        assert rank_for("gundam", 10**9) == "Newtype"
        assert rank_for("one_piece", 4000) == "Yonko Commander"
        assert rank_for("one_piece", 3999) == "Warlord"

    def test_unknown_game_uses_generic_ladder(self):
        assert rank_for("chess", 0) == "Newcomer"
        assert rank_for("chess", 250) == "Veteran"
        assert rank_for(None, 2500) == "Legend"

    def test_negative_xp_clamped_to_first_tier(self):
        assert rank_for("gundam", -50) == "Cadet"


class TestLadder:
    def test_every_ladder_has_seven_tiers(self):
        for game in ("one_piece", "gundam", "pokemon", "mtg", "lorcana", "unknown"):
            assert len(rank_ladder(game)) == 7

    def test_thresholds_match_frequency(self):
        assert tuple(t.min_xp for t in rank_ladder("one_piece")) == HIGH_FREQUENCY_THRESHOLDS
        assert tuple(t.min_xp for t in rank_ladder("gundam")) == STANDARD_THRESHOLDS

    def test_generic_titles(self):
        assert tuple(t.title for t in rank_ladder("lorcana")) == GENERIC_TITLES

    def test_next_rank(self):
        tier = next_rank("gundam", 120)
        assert tier.min_xp == 250
        assert tier.title == "Lieutenant"

    def test_next_rank_none_at_top(self):
        assert next_rank("gundam", 2500) is None


class TestCurrency:
    @pytest.mark.parametrize("game, expected", [
        ("one_piece", "Berries"),
        ("gundam", "Pilot Points"),
        ("star_wars", "Holopoints"),
        ("lorcana", "Ink Points"),
    ])
    def test_known_games(self, game, expected):
        assert currency_name(game) == expected

    def test_unknown_game_is_xp(self):
        assert currency_name("chess") == "XP"
        assert currency_name(None) == "XP"


class TestLevel:
    @pytest.mark.parametrize("xp, level", [(0, 1), (99, 1), (100, 2), (250, 3), (1999, 20)])
    def test_level_formula(self, xp, level):
        assert level_for_xp(xp) == level

    def test_negative_total_is_level_one(self):
        assert level_for_xp(-10) == 1

    def test_next_level_xp(self):
        assert next_level_xp(0) == 100
        assert next_level_xp(250) == 300
