"""
hyperbolic.api.routes.community — Leaderboard & player search
==============================================================
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hyperbolic.api.deps import get_config, get_session, require_context
from hyperbolic.config import HyperbolicConfig
from hyperbolic.context import RequestContext
from hyperbolic.services import community_service, player_service

router = APIRouter(prefix="/community", tags=["community"])


@router.get("/leaderboard")
def get_leaderboard(
    session: Annotated[Session, Depends(get_session)],
    config: Annotated[HyperbolicConfig, Depends(get_config)],
    limit: int | None = Query(None, ge=1, le=community_service.MAX_LIMIT),
    game: str | None = Query(None),
):
    rows = community_service.leaderboard(session, limit or config.leaderboard_limit, game)
    return {"leaderboard": rows, "game": game or None}


@router.get("/search")
def search_players(
    ctx: Annotated[RequestContext, Depends(require_context)],
    session: Annotated[Session, Depends(get_session)],
    config: Annotated[HyperbolicConfig, Depends(get_config)],
    q: str = Query(""),
    limit: int | None = Query(None, ge=1, le=community_service.MAX_LIMIT),
):
    requester = player_service.get_by_identity(session, ctx.identity)
    rows = community_service.search(
        session,
        q,
        requester_player_id=requester.id if requester else None,
        limit=limit or config.search_limit,
    )
    return {"players": rows}
