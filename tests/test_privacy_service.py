"""
tests/test_privacy_service.py — Privacy Settings
=================================================
"""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from conftest import make_player
from hyperbolic.database.models import Player
from hyperbolic.errors import NotFoundError, ValidationError
from hyperbolic.services import privacy_service


class TestPrivacySettings:
    def test_defaults(self, db_engine):
        p = make_player(db_engine, "Luffy")
        with Session(db_engine) as s:
            settings = privacy_service.get_privacy(s, p.id)
        assert settings == {
            "profile_visibility": "public",
            "show_on_leaderboard": True,
            "show_as_anonymous": False,
            "allow_friend_requests": True,
            "hide_from_search": False,
            "show_activity": True,
            "show_games": True,
            "show_real_name": False,
        }

    def test_partial_update(self, db_engine):
        p = make_player(db_engine, "Luffy")
        settings = privacy_service.update_privacy(
            db_engine, p.id, {"profile_visibility": "private", "hide_from_search": True},
        )
        assert settings["profile_visibility"] == "private"
        assert settings["hide_from_search"] is True
        assert settings["show_on_leaderboard"] is True
        with Session(db_engine) as s:
            assert s.get(Player, p.id).profile_visibility == "private"

    def test_empty_update_rejected(self, db_engine):
        p = make_player(db_engine, "Luffy")
        with pytest.raises(ValidationError, match="No settings to update"):
            privacy_service.update_privacy(db_engine, p.id, {})

    def test_unknown_keys_ignored(self, db_engine):
        p = make_player(db_engine, "Luffy")
        with pytest.raises(ValidationError):
            privacy_service.update_privacy(db_engine, p.id, {"is_admin": True})

    def test_invalid_visibility_rejected(self, db_engine):
        p = make_player(db_engine, "Luffy")
        with pytest.raises(ValidationError):
            privacy_service.update_privacy(db_engine, p.id, {"profile_visibility": "secret"})

    def test_non_boolean_flag_rejected(self, db_engine):
        p = make_player(db_engine, "Luffy")
        with pytest.raises(ValidationError):
            privacy_service.update_privacy(db_engine, p.id, {"show_games": "nope"})

    def test_unknown_player(self, db_engine):
        with pytest.raises(NotFoundError):
            privacy_service.update_privacy(db_engine, "missing", {"show_games": False})

    def test_get_unknown_player(self, db_engine):
        with Session(db_engine) as s:
            with pytest.raises(NotFoundError):
                privacy_service.get_privacy(s, "missing")
