"""
hyperbolic.services.ledger_service — XP Ledger Write Path
=========================================================

The only module that inserts into ``xp_ledger``.  Entries are append-only:
nothing here (or anywhere else) updates or deletes a row.

``final_amount`` is computed once at write time and stored; every
aggregate reads it back verbatim.

Gated sources (check-in, daily spin) get a ``gate_day`` stamped from the
store's local calendar.  The insert runs inside a SAVEPOINT so a violation
of the ``ix_xp_ledger_daily_gate`` partial unique index surfaces as
:class:`~hyperbolic.errors.AlreadyPerformedError` while the outer
transaction stays usable.
"""

from __future__ import annotations

import logging
import math
from datetime import UTC, date, datetime, tzinfo
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hyperbolic.constants import GENERAL_BUCKET
from hyperbolic.database.engine import get_session
from hyperbolic.database.models import (
    GATED_SOURCES,
    Game,
    Player,
    XpLedgerEntry,
    XpSource,
)
from hyperbolic.errors import (
    AlreadyPerformedError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------
def compute_final_amount(base_amount: int, multiplier: float) -> int:
    """``base × multiplier`` rounded half up (2.5 → 3)."""
    return int(math.floor(base_amount * multiplier + 0.5))


def _as_utc(now: datetime | None) -> datetime:
    moment = now or datetime.now(UTC)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def local_day(tz: tzinfo, now: datetime | None = None) -> date:
    """Calendar date of *now* (default: current instant) in *tz*.

    Naive datetimes are taken to be UTC.
    """
    return _as_utc(now).astimezone(tz).date()


def normalize_game_id(game_id: str | None) -> str | None:
    """``None`` and ``"general"`` both mean the un-bucketed pool."""
    if game_id is None:
        return None
    game_id = game_id.strip()
    if not game_id or game_id == GENERAL_BUCKET:
        return None
    return game_id


def _coerce_source(source: str | XpSource) -> XpSource:
    try:
        return XpSource(source)
    except ValueError:
        raise ValidationError(f"Unknown XP source: {source!r}") from None


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------
def append_entry(
    session: Session,
    player_id: str,
    source: str | XpSource,
    base_amount: int,
    *,
    tz: tzinfo,
    multiplier: float = 1.0,
    game_id: str | None = None,
    description: str | None = None,
    awarded_by: str | None = None,
    final_amount: int | None = None,
    now: datetime | None = None,
) -> XpLedgerEntry:
    """Validate and insert one ledger entry; the caller owns the commit.

    Raises
    ------
    ValidationError
        Negative base, negative multiplier, negative explicit
        ``final_amount``, or a source outside :class:`XpSource`.
    NotFoundError
        *player_id* or a non-general *game_id* does not exist.
    AlreadyPerformedError
        A gated source was already recorded for this player today.
    PersistenceError
        Any other database failure.
    """
    src = _coerce_source(source)
    if base_amount < 0:
        raise ValidationError("base_amount must be non-negative")
    if multiplier < 0:
        raise ValidationError("multiplier must be non-negative")
    if final_amount is None:
        final_amount = compute_final_amount(base_amount, multiplier)
    elif final_amount < 0:
        raise ValidationError("final_amount must be non-negative")

    game_id = normalize_game_id(game_id)
    moment = _as_utc(now)

    try:
        if session.get(Player, player_id) is None:
            raise NotFoundError("Player not found", details={"player_id": player_id})
        if game_id is not None and session.get(Game, game_id) is None:
            raise NotFoundError(f"Unknown game: {game_id}", details={"game_id": game_id})
    except SQLAlchemyError as exc:
        raise PersistenceError("Could not read from the database") from exc

    gate_day = local_day(tz, moment) if src in GATED_SOURCES else None
    entry = XpLedgerEntry(
        player_id=player_id,
        game_id=game_id,
        base_amount=base_amount,
        multiplier=multiplier,
        final_amount=final_amount,
        source=src.value,
        description=description,
        awarded_by=awarded_by,
        gate_day=gate_day,
        created_at=moment,
    )

    try:
        with session.begin_nested():   # SAVEPOINT
            session.add(entry)
            session.flush()
    except IntegrityError as exc:
        if gate_day is not None:
            logger.warning(
                "Rejected duplicate %s for player %s on %s", src.value, player_id, gate_day,
            )
            raise AlreadyPerformedError(src.value) from exc
        raise PersistenceError("Failed to record XP") from exc
    except SQLAlchemyError as exc:
        raise PersistenceError("Failed to record XP") from exc

    logger.info(
        "Ledger +%d %s for player %s (game=%s, entry=%s)",
        entry.final_amount, src.value, player_id, game_id or GENERAL_BUCKET, entry.id,
    )
    return entry


def award_batch(
    engine: Engine,
    player_id: str,
    awards: list[dict],
    *,
    tz: tzinfo,
    awarded_by: str | None = None,
    now: datetime | None = None,
) -> list[XpLedgerEntry]:
    """Insert several staff awards for one player in a single transaction.

    Each award dict carries ``source``, ``base_amount`` and optionally
    ``multiplier``, ``game_id``, ``description`` and ``final_amount``.
    Either every award is stored or none is.
    """
    if not awards:
        raise ValidationError("No awards given")

    with get_session(engine) as session:
        entries = [
            append_entry(
                session,
                player_id,
                award.get("source", XpSource.MANUAL_ADJUSTMENT),
                award.get("base_amount", 0),
                tz=tz,
                multiplier=award.get("multiplier", 1.0),
                game_id=award.get("game_id"),
                description=award.get("description"),
                awarded_by=awarded_by,
                final_amount=award.get("final_amount"),
                now=now,
            )
            for award in awards
        ]

    logger.info(
        "Staff %s awarded %d entries (%d XP) to player %s",
        awarded_by, len(entries), sum(e.final_amount for e in entries), player_id,
    )
    return entries


# ---------------------------------------------------------------------------
# Read helpers
# ---------------------------------------------------------------------------
def recent_entries(session: Session, player_id: str, limit: int = 10) -> list[XpLedgerEntry]:
    """Newest-first slice of a player's ledger."""
    return list(session.scalars(
        select(XpLedgerEntry)
        .where(XpLedgerEntry.player_id == player_id)
        .order_by(XpLedgerEntry.created_at.desc(), XpLedgerEntry.id.desc())
        .limit(limit)
    ).all())


def entry_to_dict(entry: XpLedgerEntry) -> dict:
    return {
        "id": entry.id,
        "game_id": entry.game_id or GENERAL_BUCKET,
        "base_amount": entry.base_amount,
        "multiplier": entry.multiplier,
        "final_amount": entry.final_amount,
        "source": entry.source,
        "description": entry.description,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }
