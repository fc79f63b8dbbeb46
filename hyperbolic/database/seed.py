"""
hyperbolic.database.seed — Default Game Catalogue
===================================================

Games the store runs events for, seeded on first startup so ledger
entries can reference them immediately.

Idempotent — only inserts games that don't already exist.  Rows staff have
edited (colors, active flag) are never overwritten.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from hyperbolic.database.models import Game, GameFrequency
from hyperbolic.engine.ranks import HIGH_FREQUENCY_GAMES, currency_name

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Default catalogue: slug → (name, icon, color)
# ---------------------------------------------------------------------------
DEFAULT_GAMES: dict[str, tuple[str, str, str]] = {
    "one_piece": ("One Piece", "\U0001f3f4‍☠️", "#E63946"),
    "gundam": ("Gundam", "\U0001f916", "#3B82F6"),
    "pokemon": ("Pokémon", "⚡", "#FACC15"),
    "mtg": ("Magic: The Gathering", "✨", "#8B5CF6"),
    "star_wars": ("Star Wars Unlimited", "\U0001f31f", "#00d4ff"),
    "vanguard": ("Vanguard", "⚔️", "#ef4444"),
    "uvs": ("UVS", "\U0001f44a", "#f97316"),
    "hololive": ("Hololive", "\U0001f3a4", "#ff69b4"),
    "riftbound": ("Riftbound", "\U0001f300", "#22c55e"),
    "lorcana": ("Lorcana", "\U0001fa84", "#EC4899"),
    "yugioh": ("Yu-Gi-Oh!", "\U0001f0cf", "#9333ea"),
    "digimon": ("Digimon", "\U0001f996", "#f59e0b"),
    "weiss_schwarz": ("Weiss Schwarz", "\U0001f3b4", "#6366f1"),
    "union_arena": ("Union Arena", "\U0001f3df️", "#14b8a6"),
    "warhammer": ("Warhammer", "⚔️", "#dc2626"),
    "sw_legion": ("Star Wars Legion", "\U0001f396️", "#059669"),
}


def seed_default_games(engine: Engine) -> int:
    """Insert any missing default games.  Returns the number inserted."""
    inserted = 0
    with Session(engine) as session:
        existing = set(session.scalars(select(Game.id)).all())
        for slug, (name, icon, color) in DEFAULT_GAMES.items():
            if slug in existing:
                continue
            session.add(Game(
                id=slug,
                name=name,
                icon=icon,
                color=color,
                currency_name=currency_name(slug),
                frequency=(
                    GameFrequency.HIGH.value
                    if slug in HIGH_FREQUENCY_GAMES
                    else GameFrequency.STANDARD.value
                ),
                is_active=True,
            ))
            inserted += 1
        session.commit()

    if inserted:
        logger.info("Seeded %d default games", inserted)
    return inserted
