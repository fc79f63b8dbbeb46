"""
hyperbolic.services.community_service — Leaderboard & Player Search
====================================================================

Database half of the community views; every privacy decision is delegated
to :mod:`hyperbolic.engine.visibility`.
"""

from __future__ import annotations

import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from hyperbolic.database.models import Player
from hyperbolic.engine.visibility import leaderboard_rows, search_row
from hyperbolic.errors import ValidationError
from hyperbolic.services import aggregate_service, ledger_service

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
MAX_LIMIT = 100


def _clamp_limit(limit: int) -> int:
    return max(1, min(int(limit), MAX_LIMIT))


def leaderboard(session: Session, limit: int = 20, game_id: str | None = None) -> list[dict]:
    """Top players by total XP (or by one game's XP), privacy applied.

    The limit is taken before opted-out players are removed, so fewer than
    *limit* rows may come back.
    """
    game_id = ledger_service.normalize_game_id(game_id)
    totals = aggregate_service.leaderboard_totals(session, _clamp_limit(limit), game_id)
    if not totals:
        return []

    players = {
        p.id: p for p in session.scalars(
            select(Player).where(Player.id.in_([pid for pid, _ in totals]))
        )
    }
    return leaderboard_rows(
        (players[pid], total) for pid, total in totals if pid in players
    )


def search(
    session: Session,
    query: str,
    requester_player_id: str | None = None,
    limit: int = 20,
) -> list[dict]:
    """Case-insensitive substring search on display name or short code.

    Never returns the requester or anyone with ``hide_from_search`` set.
    """
    term = (query or "").strip()
    if len(term) < MIN_QUERY_LENGTH:
        raise ValidationError(f"Search query must be at least {MIN_QUERY_LENGTH} characters")

    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    stmt = (
        select(Player)
        .where(
            or_(
                Player.display_name.ilike(pattern, escape="\\"),
                Player.short_code.ilike(pattern, escape="\\"),
            ),
            Player.hide_from_search.is_(False),
        )
        .order_by(Player.display_name.asc(), Player.id.asc())
        .limit(_clamp_limit(limit))
    )
    if requester_player_id is not None:
        stmt = stmt.where(Player.id != requester_player_id)

    players = list(session.scalars(stmt).all())
    totals = aggregate_service.totals_for(session, [p.id for p in players])
    logger.debug("Search %r matched %d players", term, len(players))
    return [search_row(p, totals.get(p.id, 0)) for p in players]
