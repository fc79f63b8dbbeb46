"""
hyperbolic.engine.visibility — Privacy-Filtered Public Projections
===================================================================

Pure functions that turn a :class:`~hyperbolic.database.models.Player`
plus its total XP into the dicts the community endpoints return.  All
privacy masking lives here so the leaderboard, search and profile views
cannot drift apart.

Rules:
- Leaderboard rows: players who opted out are dropped *before* ranking,
  so ranks stay contiguous; anonymous players keep their slot but lose
  name, avatar and short code.
- Search rows: ``private`` and ``friends`` profiles withhold level and XP.
  There is no friendship relation yet, so ``friends`` is treated exactly
  like ``private`` apart from its title.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from hyperbolic.constants import (
    ANONYMOUS_AVATAR,
    ANONYMOUS_NAME,
    PRIVATE_AVATAR,
    level_for_xp,
)
from hyperbolic.database.models import ProfileVisibility

if TYPE_CHECKING:
    from hyperbolic.database.models import Player


def avatar_dict(player: Player) -> dict:
    return {
        "type": "emoji",
        "base": player.avatar_base,
        "photo_url": None,
        "background": player.avatar_background,
        "frame": player.avatar_frame,
        "badge": player.avatar_badge,
    }


def _masked_avatar(template: dict) -> dict:
    return {"type": "emoji", "photo_url": None, **template}


# ---------------------------------------------------------------------------
# Leaderboard
# ---------------------------------------------------------------------------
def leaderboard_rows(ranked: Iterable[tuple[Player, int]]) -> list[dict]:
    """Project ``(player, total_xp)`` pairs, already sorted, into ranked rows.

    Opted-out players are skipped and the remaining rows are numbered
    1..N with no gaps.
    """
    rows: list[dict] = []
    for player, total_xp in ranked:
        if not player.show_on_leaderboard:
            continue
        hidden = bool(player.show_as_anonymous)
        rows.append({
            "rank": len(rows) + 1,
            "id": None if hidden else player.short_code,
            "name": ANONYMOUS_NAME if hidden else player.display_name,
            "level": level_for_xp(total_xp),
            "total_xp": total_xp,
            "avatar": _masked_avatar(ANONYMOUS_AVATAR) if hidden else avatar_dict(player),
            "hidden": hidden,
        })
    return rows


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------
def search_row(player: Player, total_xp: int) -> dict:
    """Project one search hit according to the player's profile visibility."""
    visibility = player.profile_visibility or ProfileVisibility.PUBLIC.value
    level = level_for_xp(total_xp)

    if visibility == ProfileVisibility.PUBLIC:
        title, shown_level, shown_xp = f"Level {level}", level, total_xp
        avatar = avatar_dict(player)
    else:
        title = "???" if visibility == ProfileVisibility.PRIVATE else "Friends Only"
        shown_level, shown_xp = None, None
        avatar = _masked_avatar(PRIVATE_AVATAR)

    return {
        "id": player.short_code,
        "name": player.display_name,
        "title": title,
        "level": shown_level,
        "total_xp": shown_xp,
        "avatar": avatar,
        "privacy": {"profile_visibility": visibility},
        "allow_friend_requests": bool(player.allow_friend_requests),
        "is_friend": False,
        "is_online": None,
    }


# ---------------------------------------------------------------------------
# Privacy settings resource
# ---------------------------------------------------------------------------
PRIVACY_FIELDS: tuple[str, ...] = (
    "profile_visibility",
    "show_on_leaderboard",
    "show_as_anonymous",
    "allow_friend_requests",
    "hide_from_search",
    "show_activity",
    "show_games",
    "show_real_name",
)

PRIVACY_DEFAULTS: dict[str, object] = {
    "profile_visibility": ProfileVisibility.PUBLIC.value,
    "show_on_leaderboard": True,
    "show_as_anonymous": False,
    "allow_friend_requests": True,
    "hide_from_search": False,
    "show_activity": True,
    "show_games": True,
    "show_real_name": False,
}


def privacy_dict(player: Player) -> dict:
    """Privacy flags of *player*, with defaults filling unset columns."""
    result = {}
    for name in PRIVACY_FIELDS:
        value = getattr(player, name)
        result[name] = PRIVACY_DEFAULTS[name] if value is None else value
    return result
