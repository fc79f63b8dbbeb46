"""
hyperbolic.api.routes.staff — Register-side enrolment & XP awards
==================================================================

Every route requires a staff token; mutations are throttled by
:func:`~hyperbolic.api.rate_limit.rate_limited_staff`.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from hyperbolic.api.deps import get_config, get_engine, get_session
from hyperbolic.api.rate_limit import rate_limited_staff
from hyperbolic.config import HyperbolicConfig
from hyperbolic.context import RequestContext
from hyperbolic.database.models import PassTier, XpSource
from hyperbolic.errors import NotFoundError
from hyperbolic.services import aggregate_service, ledger_service, player_service

router = APIRouter(prefix="/staff", tags=["staff"])
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class StaffPlayerCreate(BaseModel):
    display_name: str
    real_name: str | None = None
    email: str | None = None
    phone: str | None = None
    discord_username: str | None = None
    primary_game: str | None = None
    pass_tier: str = PassTier.NONE.value


class AwardItem(BaseModel):
    source: str = XpSource.MANUAL_ADJUSTMENT.value
    base_amount: int
    multiplier: float = 1.0
    game_id: str | None = None
    description: str | None = None
    final_amount: int | None = None


class StaffAward(BaseModel):
    player_id: str
    awards: list[AwardItem] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Enrolment
# ---------------------------------------------------------------------------
@router.post("/players", status_code=status.HTTP_201_CREATED)
def create_player(
    body: StaffPlayerCreate,
    staff: Annotated[RequestContext, Depends(rate_limited_staff)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    player = player_service.create_player(
        engine,
        body.display_name,
        real_name=body.real_name,
        email=body.email,
        phone=body.phone,
        discord_username=body.discord_username,
        primary_game_id=body.primary_game,
        pass_tier=body.pass_tier,
    )
    logger.info("Staff %s enrolled player %s", staff.identity, player.short_code)
    return {
        "id": player.short_code,
        "display_name": player.display_name,
        "pass_tier": player.pass_tier,
    }


# ---------------------------------------------------------------------------
# XP awards
# ---------------------------------------------------------------------------
@router.post("/xp")
def award_xp(
    body: StaffAward,
    staff: Annotated[RequestContext, Depends(rate_limited_staff)],
    engine: Annotated[Engine, Depends(get_engine)],
    config: Annotated[HyperbolicConfig, Depends(get_config)],
):
    with Session(engine) as session:
        player = player_service.get_by_short_code(session, body.player_id)
        if player is None:
            raise NotFoundError("Player not found")
        player_id = player.id

    entries = ledger_service.award_batch(
        engine,
        player_id,
        [award.model_dump() for award in body.awards],
        tz=config.tz,
        awarded_by=staff.identity,
    )

    with Session(engine) as session:
        new_total = aggregate_service.total_xp(session, player_id)

    return {
        "success": True,
        "entries": [ledger_service.entry_to_dict(e) for e in entries],
        "total_awarded": sum(e.final_amount for e in entries),
        "new_total": new_total,
    }


@router.get("/players/{short_code}/monthly")
def monthly_xp(
    short_code: str,
    year: int,
    staff: Annotated[RequestContext, Depends(rate_limited_staff)],
    session: Annotated[Session, Depends(get_session)],
    config: Annotated[HyperbolicConfig, Depends(get_config)],
    month: int = Query(..., ge=1, le=12),
    game: str | None = Query(None),
):
    player = player_service.get_by_short_code(session, short_code)
    if player is None:
        raise NotFoundError("Player not found")
    xp = aggregate_service.monthly_xp(
        session, player.id, year, month, config.tz,
        ledger_service.normalize_game_id(game),
    )
    return {"id": player.short_code, "year": year, "month": month, "game": game, "xp": xp}
