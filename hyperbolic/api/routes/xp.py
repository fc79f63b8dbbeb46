"""
hyperbolic.api.routes.xp — Daily check-in & daily spin
=======================================================

Async routes; the synchronous gate functions run on a worker thread via
:func:`~hyperbolic.database.engine.run_db`.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy import Engine

from hyperbolic.api.deps import get_config, get_engine, require_context
from hyperbolic.config import HyperbolicConfig
from hyperbolic.context import RequestContext
from hyperbolic.database.engine import run_db
from hyperbolic.database.models import XpSource
from hyperbolic.engine.spin import SpinOutcome, draw_spin_outcome
from hyperbolic.services import daily_gate

router = APIRouter(prefix="/xp", tags=["xp"])
logger = logging.getLogger(__name__)


class SpinRequest(BaseModel):
    """Client-reported spin result; omit ``xp`` to let the server draw.

    The prize label arrives as ``rewardName`` (or ``prize``).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    xp: int | None = None
    reward_name: str | None = None
    prize: str | None = None
    rarity: str | None = None


# ---------------------------------------------------------------------------
# Check-in
# ---------------------------------------------------------------------------
@router.get("/checkin")
async def checkin_status(
    ctx: Annotated[RequestContext, Depends(require_context)],
    engine: Annotated[Engine, Depends(get_engine)],
    config: Annotated[HyperbolicConfig, Depends(get_config)],
):
    status = await run_db(daily_gate.gate_status, engine, ctx, config, XpSource.CHECK_IN)
    return {
        "can_check_in": status["available"],
        "checked_in_today": not status["available"],
        "xp_reward": config.checkin_xp,
    }


@router.post("/checkin")
async def checkin(
    ctx: Annotated[RequestContext, Depends(require_context)],
    engine: Annotated[Engine, Depends(get_engine)],
    config: Annotated[HyperbolicConfig, Depends(get_config)],
):
    entry = await run_db(daily_gate.check_in, engine, ctx, config)
    return {
        "success": True,
        "xp_awarded": entry.final_amount,
        "message": f"+{entry.final_amount} XP for checking in!",
    }


# ---------------------------------------------------------------------------
# Daily spin
# ---------------------------------------------------------------------------
@router.get("/daily-spin")
async def spin_status(
    ctx: Annotated[RequestContext, Depends(require_context)],
    engine: Annotated[Engine, Depends(get_engine)],
    config: Annotated[HyperbolicConfig, Depends(get_config)],
):
    status = await run_db(daily_gate.gate_status, engine, ctx, config, XpSource.DAILY_SPIN)
    return {"can_spin": status["available"], "last_result": status["last_result"]}


@router.post("/daily-spin")
async def daily_spin(
    ctx: Annotated[RequestContext, Depends(require_context)],
    engine: Annotated[Engine, Depends(get_engine)],
    config: Annotated[HyperbolicConfig, Depends(get_config)],
    body: SpinRequest | None = None,
):
    if body is None or body.xp is None:
        outcome = draw_spin_outcome()
    else:
        outcome = SpinOutcome(
            name=body.reward_name or body.prize or f"{body.xp} XP",
            rarity=body.rarity or "common",
            xp=body.xp,
            probability=0.0,
        )
    entry = await run_db(daily_gate.record_spin, engine, ctx, config, outcome)
    return {
        "success": True,
        "prize": outcome.name,
        "rarity": outcome.rarity,
        "xp_awarded": entry.final_amount,
    }
