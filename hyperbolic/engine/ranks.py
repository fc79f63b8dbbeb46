"""
hyperbolic.engine.ranks — Per-Game Rank Ladders & Currency Names
=================================================================

Pure lookups, no I/O.  A *rank* is a per-game title chosen from a 7-tier
ladder by the player's cumulative XP in that game; it is unrelated to the
global *level* in :mod:`hyperbolic.constants`.

High-frequency games (twice-weekly events) climb a ladder with roughly
double the thresholds of a standard (weekly) game.
"""

from __future__ import annotations

from bisect import bisect_right
from typing import NamedTuple

__all__ = [
    "CURRENCY_NAMES",
    "GENERIC_TITLES",
    "HIGH_FREQUENCY_THRESHOLDS",
    "RankTier",
    "STANDARD_THRESHOLDS",
    "currency_name",
    "next_rank",
    "rank_for",
    "rank_ladder",
]


class RankTier(NamedTuple):
    min_xp: int
    title: str


STANDARD_THRESHOLDS: tuple[int, ...] = (0, 100, 250, 500, 1000, 1500, 2500)
HIGH_FREQUENCY_THRESHOLDS: tuple[int, ...] = (0, 200, 500, 1000, 1500, 2500, 4000)

GENERIC_TITLES: tuple[str, ...] = (
    "Newcomer", "Regular", "Veteran", "Expert", "Master", "Elite", "Legend",
)

# Games on the twice-weekly ladder.  Game.frequency in the database is
# informational only; the ladder is chosen from this set.
HIGH_FREQUENCY_GAMES: frozenset[str] = frozenset({"one_piece"})

_GAME_TITLES: dict[str, tuple[str, ...]] = {
    "one_piece": (
        "East Blue Rookie", "Paradise Pirate", "Super Rookie", "Notorious Pirate",
        "Worst Generation", "Warlord", "Yonko Commander",
    ),
    "gundam": (
        "Cadet", "Ensign", "Lieutenant", "Captain", "Commander", "Ace Pilot", "Newtype",
    ),
    "pokemon": (
        "Pokemon Fan", "Trainer", "Ace Trainer", "Gym Challenger", "Gym Leader",
        "Elite Four", "Champion",
    ),
    "mtg": (
        "Apprentice", "Mage", "Wizard", "Sorcerer", "Archmage", "Planeswalker",
        "Oldwalker",
    ),
}

CURRENCY_NAMES: dict[str, str] = {
    "one_piece": "Berries",
    "gundam": "Pilot Points",
    "star_wars": "Holopoints",
    "vanguard": "Ride Gauge",
    "mtg": "Mana Marks",
    "uvs": "Versus Tokens",
    "pokemon": "Pokepoints",
    "riftbound": "Essence",
    "hololive": "Fan Subs",
    "lorcana": "Ink Points",
}


def _build_ladder(game_id: str | None) -> tuple[RankTier, ...]:
    titles = _GAME_TITLES.get(game_id or "", GENERIC_TITLES)
    thresholds = (
        HIGH_FREQUENCY_THRESHOLDS if game_id in HIGH_FREQUENCY_GAMES else STANDARD_THRESHOLDS
    )
    return tuple(RankTier(t, title) for t, title in zip(thresholds, titles, strict=True))


def rank_ladder(game_id: str | None) -> tuple[RankTier, ...]:
    """Full 7-tier ladder for *game_id* (generic ladder for unknown games)."""
    return _build_ladder(game_id)


def rank_for(game_id: str | None, total_xp: int) -> str:
    """Title of the highest tier whose threshold is ≤ *total_xp*.

    Total for any XP value and any game id; negative XP is treated as 0.
    """
    ladder = _build_ladder(game_id)
    idx = bisect_right([tier.min_xp for tier in ladder], max(total_xp, 0)) - 1
    return ladder[max(idx, 0)].title


def next_rank(game_id: str | None, total_xp: int) -> RankTier | None:
    """The tier after the current one, or ``None`` at the top of the ladder."""
    for tier in _build_ladder(game_id):
        if tier.min_xp > total_xp:
            return tier
    return None


def currency_name(game_id: str | None) -> str:
    """Display name of *game_id*'s point currency; ``"XP"`` when unknown."""
    return CURRENCY_NAMES.get(game_id or "", "XP")
