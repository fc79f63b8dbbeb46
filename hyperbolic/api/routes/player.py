"""
hyperbolic.api.routes.player — Profiles, identity linking & privacy
====================================================================

Static paths (``by-identity``, ``link``, ``privacy``) are declared before
``/{short_code}`` so they are not swallowed by the path parameter.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from hyperbolic.api.deps import get_config, get_engine, get_session, require_context
from hyperbolic.config import HyperbolicConfig
from hyperbolic.context import RequestContext
from hyperbolic.errors import NotFoundError
from hyperbolic.services import player_service, privacy_service

router = APIRouter(prefix="/player", tags=["player"])
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic schemas (snake_case or camelCase accepted)
# ---------------------------------------------------------------------------
class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LinkRequest(_Body):
    action: str
    short_code: str | None = None
    display_name: str | None = None
    primary_game: str | None = None
    email: str | None = None


class PrivacyUpdate(_Body):
    profile_visibility: str | None = None
    show_on_leaderboard: bool | None = None
    show_as_anonymous: bool | None = None
    allow_friend_requests: bool | None = None
    hide_from_search: bool | None = None
    show_activity: bool | None = None
    show_games: bool | None = None
    show_real_name: bool | None = None


# ---------------------------------------------------------------------------
# Own profile
# ---------------------------------------------------------------------------
@router.get("/by-identity")
def get_own_profile(
    ctx: Annotated[RequestContext, Depends(require_context)],
    session: Annotated[Session, Depends(get_session)],
    config: Annotated[HyperbolicConfig, Depends(get_config)],
):
    player = player_service.get_by_identity(session, ctx.identity)
    if player is None:
        return {"linked": False, "message": "No player linked to this account"}
    return {"linked": True, **player_service.player_profile(session, player, config, public=False)}


@router.post("/link")
def link_player(
    body: LinkRequest,
    ctx: Annotated[RequestContext, Depends(require_context)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    player = player_service.link_identity(
        engine,
        ctx.identity,
        body.action,
        short_code=body.short_code,
        display_name=body.display_name,
        primary_game_id=body.primary_game,
        email=body.email,
    )
    return {"success": True, "id": player.short_code, "display_name": player.display_name}


# ---------------------------------------------------------------------------
# Privacy
# ---------------------------------------------------------------------------
@router.get("/privacy")
def get_privacy(
    ctx: Annotated[RequestContext, Depends(require_context)],
    session: Annotated[Session, Depends(get_session)],
):
    player = player_service.require_by_identity(session, ctx.identity)
    return privacy_service.get_privacy(session, player.id)


@router.post("/privacy")
def update_privacy(
    body: PrivacyUpdate,
    ctx: Annotated[RequestContext, Depends(require_context)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    with Session(engine) as session:
        player_id = player_service.require_by_identity(session, ctx.identity).id
    settings = privacy_service.update_privacy(
        engine, player_id, body.model_dump(exclude_none=True),
    )
    return {"success": True, "settings": settings}


# ---------------------------------------------------------------------------
# Public profile
# ---------------------------------------------------------------------------
@router.get("/{short_code}")
def get_player(
    short_code: str,
    session: Annotated[Session, Depends(get_session)],
    config: Annotated[HyperbolicConfig, Depends(get_config)],
):
    player = player_service.get_by_short_code(session, short_code)
    if player is None:
        raise NotFoundError("Player not found")
    return player_service.player_profile(session, player, config, public=True)
