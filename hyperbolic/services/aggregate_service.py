"""
hyperbolic.services.aggregate_service — XP Aggregation (Read Path)
===================================================================

Totals are computed on read from ``xp_ledger.final_amount``; there is no
cached per-player counter to drift out of sync with the journal.

Entries with a NULL ``game_id`` (the general bucket: check-ins, spins,
referrals) count toward a player's total but never appear in the
per-game breakdown.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from hyperbolic.database.models import Player, XpLedgerEntry, XpSource


@dataclass(frozen=True, slots=True)
class PlayerGameXpSummary:
    """One player's standing in one game."""
    game_id: str
    xp: int
    wins: int
    events: int


def total_xp(session: Session, player_id: str) -> int:
    """Sum of every ``final_amount`` for *player_id*; 0 with no entries."""
    return int(session.scalar(
        select(func.coalesce(func.sum(XpLedgerEntry.final_amount), 0))
        .where(XpLedgerEntry.player_id == player_id)
    ) or 0)


def xp_by_game(session: Session, player_id: str) -> dict[str, PlayerGameXpSummary]:
    """Per-game XP, match wins and events attended, keyed by game id."""
    rows = session.execute(
        select(
            XpLedgerEntry.game_id,
            func.sum(XpLedgerEntry.final_amount).label("xp"),
            func.sum(case((XpLedgerEntry.source == XpSource.MATCH_WIN.value, 1), else_=0))
            .label("wins"),
            func.sum(case((XpLedgerEntry.source == XpSource.EVENT_ATTENDANCE.value, 1), else_=0))
            .label("events"),
        )
        .where(
            XpLedgerEntry.player_id == player_id,
            XpLedgerEntry.game_id.isnot(None),
        )
        .group_by(XpLedgerEntry.game_id)
    ).all()
    return {
        row.game_id: PlayerGameXpSummary(
            game_id=row.game_id,
            xp=int(row.xp or 0),
            wins=int(row.wins or 0),
            events=int(row.events or 0),
        )
        for row in rows
    }


def _totals_subquery(game_id: str | None = None):
    stmt = select(
        XpLedgerEntry.player_id.label("player_id"),
        func.sum(XpLedgerEntry.final_amount).label("total"),
    )
    if game_id is not None:
        stmt = stmt.where(XpLedgerEntry.game_id == game_id)
    return stmt.group_by(XpLedgerEntry.player_id).subquery()


def leaderboard_totals(
    session: Session, limit: int, game_id: str | None = None,
) -> list[tuple[str, int]]:
    """Top *limit* ``(player_id, total)`` pairs, highest first.

    With *game_id* only that game's entries count.  Equal totals are
    ordered by earlier enrolment, then by id, so the order is stable.
    """
    totals = _totals_subquery(game_id)
    rows = session.execute(
        select(totals.c.player_id, totals.c.total)
        .join(Player, Player.id == totals.c.player_id)
        .order_by(totals.c.total.desc(), Player.created_at.asc(), Player.id.asc())
        .limit(limit)
    ).all()
    return [(row.player_id, int(row.total or 0)) for row in rows]


def totals_for(session: Session, player_ids: Iterable[str]) -> dict[str, int]:
    """Batch totals; ids without entries map to 0."""
    ids = list(player_ids)
    if not ids:
        return {}
    rows = session.execute(
        select(XpLedgerEntry.player_id, func.sum(XpLedgerEntry.final_amount))
        .where(XpLedgerEntry.player_id.in_(ids))
        .group_by(XpLedgerEntry.player_id)
    ).all()
    found = {player_id: int(total or 0) for player_id, total in rows}
    return {player_id: found.get(player_id, 0) for player_id in ids}


def global_position(session: Session, player_id: str) -> int:
    """1 + the number of players with a strictly greater total."""
    own = total_xp(session, player_id)
    totals = _totals_subquery()
    ahead = session.scalar(
        select(func.count()).select_from(totals).where(totals.c.total > own)
    )
    return int(ahead or 0) + 1


def month_bounds(year: int, month: int, tz: tzinfo) -> tuple[datetime, datetime]:
    """UTC instants bracketing one local calendar month: ``[start, end)``."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1..12, got {month}")
    start = datetime(year, month, 1, tzinfo=tz)
    end = datetime(year + month // 12, month % 12 + 1, 1, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)


def monthly_xp(
    session: Session,
    player_id: str,
    year: int,
    month: int,
    tz: tzinfo,
    game_id: str | None = None,
) -> int:
    """XP earned during one local calendar month, optionally for one game."""
    start, end = month_bounds(year, month, tz)
    stmt = select(func.coalesce(func.sum(XpLedgerEntry.final_amount), 0)).where(
        XpLedgerEntry.player_id == player_id,
        XpLedgerEntry.created_at >= start,
        XpLedgerEntry.created_at < end,
    )
    if game_id is not None:
        stmt = stmt.where(XpLedgerEntry.game_id == game_id)
    return int(session.scalar(stmt) or 0)
