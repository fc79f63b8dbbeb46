"""
hyperbolic.services.privacy_service — Privacy Settings
=======================================================
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from hyperbolic.database.engine import get_session
from hyperbolic.database.models import Player, ProfileVisibility
from hyperbolic.engine.visibility import PRIVACY_FIELDS, privacy_dict
from hyperbolic.errors import NotFoundError, ValidationError

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

_BOOLEAN_FIELDS = frozenset(PRIVACY_FIELDS) - {"profile_visibility"}


def get_privacy(session: Session, player_id: str) -> dict:
    player = session.get(Player, player_id)
    if player is None:
        raise NotFoundError("Player not found")
    return privacy_dict(player)


def update_privacy(engine: Engine, player_id: str, changes: dict) -> dict:
    """Apply a partial update and return the full settings afterwards.

    Unknown keys and ``None`` values are ignored; if nothing is left the
    update is refused.
    """
    updates = {
        key: value for key, value in (changes or {}).items()
        if key in PRIVACY_FIELDS and value is not None
    }
    if not updates:
        raise ValidationError("No settings to update")

    if "profile_visibility" in updates:
        try:
            updates["profile_visibility"] = ProfileVisibility(updates["profile_visibility"]).value
        except ValueError:
            raise ValidationError("Invalid profile_visibility value") from None
    for key in _BOOLEAN_FIELDS & updates.keys():
        if not isinstance(updates[key], bool):
            raise ValidationError(f"{key} must be true or false")

    with get_session(engine) as session:
        player = session.get(Player, player_id)
        if player is None:
            raise NotFoundError("Player not found")
        for key, value in updates.items():
            setattr(player, key, value)

    logger.info("Player %s updated privacy: %s", player.short_code, sorted(updates))
    return privacy_dict(player)
