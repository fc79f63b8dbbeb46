"""
hyperbolic.services.daily_gate — Once-Per-Day Actions
======================================================

Check-in and the daily spin may each be performed once per player per
store-local calendar day.

Two layers enforce this:

1. **Check** — :func:`has_performed_today` looks for an entry stamped with
   today's ``gate_day``; if found the request is refused without a write.
2. **Constraint** — two concurrent requests can both pass the check.  The
   partial unique index ``ix_xp_ledger_daily_gate`` lets only one insert
   through; the loser's ``IntegrityError`` becomes
   :class:`~hyperbolic.errors.AlreadyPerformedError` in
   :func:`hyperbolic.services.ledger_service.append_entry`.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import Session

from hyperbolic.database.models import GATED_SOURCES, XpLedgerEntry, XpSource
from hyperbolic.engine.spin import SpinOutcome, validate_spin_xp
from hyperbolic.errors import AlreadyPerformedError, ValidationError
from hyperbolic.services import ledger_service, player_service

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from hyperbolic.config import HyperbolicConfig
    from hyperbolic.context import RequestContext

logger = logging.getLogger(__name__)


def _gated_kind(kind: str | XpSource) -> XpSource:
    try:
        source = XpSource(kind)
    except ValueError:
        source = None
    if source not in GATED_SOURCES:
        raise ValidationError(f"Not a once-per-day action: {kind!r}")
    return source


# ---------------------------------------------------------------------------
# Core gate
# ---------------------------------------------------------------------------
def todays_entry(
    session: Session,
    player_id: str,
    kind: str | XpSource,
    tz: tzinfo,
    now: datetime | None = None,
) -> XpLedgerEntry | None:
    source = _gated_kind(kind)
    return session.scalar(
        select(XpLedgerEntry).where(
            XpLedgerEntry.player_id == player_id,
            XpLedgerEntry.source == source.value,
            XpLedgerEntry.gate_day == ledger_service.local_day(tz, now),
        )
    )


def has_performed_today(
    session: Session,
    player_id: str,
    kind: str | XpSource,
    tz: tzinfo,
    now: datetime | None = None,
) -> bool:
    return todays_entry(session, player_id, kind, tz, now) is not None


def perform_once(
    engine: Engine,
    player_id: str,
    kind: str | XpSource,
    base_amount: int,
    tz: tzinfo,
    *,
    description: str | None = None,
    now: datetime | None = None,
) -> XpLedgerEntry:
    """Record *kind* for today, or raise :class:`AlreadyPerformedError`.

    A ``base_amount`` of 0 is a valid award (the spin's physical prize).
    """
    source = _gated_kind(kind)
    with Session(engine, expire_on_commit=False) as session:
        if has_performed_today(session, player_id, source, tz, now):
            logger.warning("Player %s already performed %s today", player_id, source.value)
            raise AlreadyPerformedError(source.value)

        entry = ledger_service.append_entry(
            session,
            player_id,
            source,
            base_amount,
            tz=tz,
            description=description,
            now=now,
        )
        session.commit()

    logger.info("Gate consumed: %s for player %s (+%d)", source.value, player_id, entry.final_amount)
    return entry


# ---------------------------------------------------------------------------
# Caller-facing wrappers
# ---------------------------------------------------------------------------
def _caller_player_id(engine: Engine, ctx: RequestContext) -> str:
    identity = ctx.require_identity()
    with Session(engine) as session:
        return player_service.require_by_identity(session, identity).id


def gate_status(
    engine: Engine,
    ctx: RequestContext,
    config: HyperbolicConfig,
    kind: str | XpSource,
    now: datetime | None = None,
) -> dict:
    """Whether the caller can still perform *kind* today."""
    identity = ctx.require_identity()
    with Session(engine) as session:
        player = player_service.require_by_identity(session, identity)
        entry = todays_entry(session, player.id, kind, config.tz, now)
    if entry is None:
        return {"available": True, "last_result": None}
    return {
        "available": False,
        "last_result": {
            "xp": entry.final_amount,
            "description": entry.description,
            "at": entry.created_at.isoformat() if entry.created_at else None,
        },
    }


def check_in(
    engine: Engine,
    ctx: RequestContext,
    config: HyperbolicConfig,
    now: datetime | None = None,
) -> XpLedgerEntry:
    """Award the caller's flat daily check-in XP."""
    player_id = _caller_player_id(engine, ctx)
    return perform_once(
        engine,
        player_id,
        XpSource.CHECK_IN,
        config.checkin_xp,
        config.tz,
        description="Daily check-in",
        now=now,
    )


def record_spin(
    engine: Engine,
    ctx: RequestContext,
    config: HyperbolicConfig,
    outcome: SpinOutcome,
    now: datetime | None = None,
) -> XpLedgerEntry:
    """Store the caller's spin result; XP outside 0..100 is refused."""
    if not validate_spin_xp(outcome.xp):
        raise ValidationError("Invalid XP amount")
    player_id = _caller_player_id(engine, ctx)
    return perform_once(
        engine,
        player_id,
        XpSource.DAILY_SPIN,
        outcome.xp,
        config.tz,
        description=f"Daily Spin: {outcome.name}",
        now=now,
    )
