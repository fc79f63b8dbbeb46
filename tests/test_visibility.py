"""
tests/test_visibility.py — Privacy Projections
===============================================
Uses unsaved ``Player`` instances; no database needed.
"""

from __future__ import annotations

from hyperbolic.database.models import Player
from hyperbolic.engine.visibility import leaderboard_rows, privacy_dict, search_row


def _player(name: str, code: str, **flags) -> Player:
    defaults = {
        "profile_visibility": "public",
        "show_on_leaderboard": True,
        "show_as_anonymous": False,
        "allow_friend_requests": True,
        "avatar_base": "\U0001f60e",
        "avatar_background": "#3b82f6",
        "avatar_frame": "none",
    }
    defaults.update(flags)
    return Player(id=code, short_code=code, display_name=name, **defaults)


class TestLeaderboardRows:
    def test_ranks_are_contiguous_after_opt_out(self):
        rows = leaderboard_rows([
            (_player("Luffy", "HYP-AAAAAA"), 500),
            (_player("Zoro", "HYP-BBBBBB", show_on_leaderboard=False), 400),
            (_player("Nami", "HYP-CCCCCC"), 300),
        ])
        assert [(r["rank"], r["name"]) for r in rows] == [(1, "Luffy"), (2, "Nami")]

    def test_anonymous_player_keeps_slot_but_is_masked(self):
        rows = leaderboard_rows([
            (_player("Luffy", "HYP-AAAAAA"), 500),
            (_player("Robin", "HYP-DDDDDD", show_as_anonymous=True, avatar_badge="x"), 450),
        ])
        hidden = rows[1]
        assert hidden["rank"] == 2
        assert hidden["name"] == "Anonymous"
        assert hidden["id"] is None
        assert hidden["hidden"] is True
        assert hidden["avatar"]["base"] == "\U0001f3ad"
        assert hidden["avatar"]["background"] == "#64748b"
        assert hidden["avatar"]["frame"] == "none"
        assert hidden["avatar"]["badge"] is None
        # XP and level still shown
        assert hidden["total_xp"] == 450
        assert hidden["level"] == 5

    def test_empty_input(self):
        assert leaderboard_rows([]) == []


class TestSearchRow:
    def test_public_profile_shows_level(self):
        row = search_row(_player("Luffy", "HYP-AAAAAA"), 250)
        assert row["title"] == "Level 3"
        assert row["level"] == 3
        assert row["total_xp"] == 250

    def test_private_profile_is_masked(self):
        row = search_row(_player("Luffy", "HYP-AAAAAA", profile_visibility="private"), 250)
        assert row["title"] == "???"
        assert row["level"] is None
        assert row["total_xp"] is None
        assert row["avatar"]["base"] == "\U0001f512"

    def test_friends_profile_treated_as_private(self):
        row = search_row(_player("Luffy", "HYP-AAAAAA", profile_visibility="friends"), 250)
        assert row["title"] == "Friends Only"
        assert row["level"] is None
        assert row["total_xp"] is None
        assert row["avatar"]["base"] == "\U0001f512"


class TestPrivacyDict:
    def test_unset_columns_fall_back_to_defaults(self):
        player = Player(id="x", short_code="HYP-AAAAAA", display_name="Luffy")
        settings = privacy_dict(player)
        assert settings["profile_visibility"] == "public"
        assert settings["show_on_leaderboard"] is True
        assert settings["show_real_name"] is False
