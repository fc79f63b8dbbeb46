"""
hyperbolic.api.routes.games — Game catalogue
=============================================
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from hyperbolic.api.deps import get_session
from hyperbolic.database.models import Game
from hyperbolic.engine.ranks import rank_ladder

router = APIRouter(tags=["games"])


def _game_dict(g: Game) -> dict:
    return {
        "id": g.id,
        "name": g.name,
        "icon": g.icon,
        "color": g.color,
        "currency": g.currency_name,
        "frequency": g.frequency,
        "ranks": [{"min_xp": tier.min_xp, "title": tier.title} for tier in rank_ladder(g.id)],
    }


@router.get("/games")
def list_games(session: Annotated[Session, Depends(get_session)]):
    games = session.scalars(
        select(Game).where(Game.is_active.is_(True)).order_by(Game.name)
    ).all()
    return {"games": [_game_dict(g) for g in games]}
