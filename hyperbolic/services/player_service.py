"""
hyperbolic.services.player_service — Player Directory
======================================================

Enrolment, short-code allocation, identity linking and the canonical
profile projection.

Short codes are ``HYP-`` plus six characters from an alphabet without
look-alikes (no ``I``, ``O``, ``0``, ``1``).  Allocation checks for an
existing code, then inserts under a SAVEPOINT; the unique index on
``players.short_code`` is the final arbiter, and an ``IntegrityError``
counts as one more collision.  After
:data:`~hyperbolic.constants.SHORT_CODE_MAX_ATTEMPTS` collisions the
request fails with :class:`~hyperbolic.errors.ConflictError`.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hyperbolic.constants import (
    DEFAULT_AVATAR,
    SHORT_CODE_ALPHABET,
    SHORT_CODE_LENGTH,
    SHORT_CODE_MAX_ATTEMPTS,
    SHORT_CODE_PREFIX,
    level_for_xp,
    next_level_xp,
)
from hyperbolic.database.models import Game, PassTier, Player
from hyperbolic.engine.ranks import currency_name, next_rank, rank_for
from hyperbolic.engine.visibility import avatar_dict
from hyperbolic.errors import ConflictError, NotFoundError, ValidationError
from hyperbolic.services import aggregate_service, ledger_service

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from hyperbolic.config import HyperbolicConfig

logger = logging.getLogger(__name__)

_SYSTEM_RANDOM = random.SystemRandom()

MAX_DISPLAY_NAME_LENGTH = 100

LINK_EXISTING = "link_existing"
CREATE_NEW = "create_new"

PUBLIC_ACTIVITY_LIMIT = 5
OWN_ACTIVITY_LIMIT = 10


# ---------------------------------------------------------------------------
# Short codes
# ---------------------------------------------------------------------------
def generate_short_code(rng: random.Random | None = None) -> str:
    """One random candidate; uniqueness is checked by the caller."""
    rng = rng or _SYSTEM_RANDOM
    return SHORT_CODE_PREFIX + "".join(
        rng.choice(SHORT_CODE_ALPHABET) for _ in range(SHORT_CODE_LENGTH)
    )


def _clean_display_name(display_name: str | None) -> str:
    name = (display_name or "").strip()
    if not name:
        raise ValidationError("Display name required")
    if len(name) > MAX_DISPLAY_NAME_LENGTH:
        raise ValidationError(
            f"Display name must be at most {MAX_DISPLAY_NAME_LENGTH} characters"
        )
    return name


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
def get_by_short_code(session: Session, code: str) -> Player | None:
    """Case-insensitive short-code lookup."""
    code = (code or "").strip().upper()
    if not code:
        return None
    return session.scalar(select(Player).where(func.upper(Player.short_code) == code))


def get_by_identity(session: Session, identity: str) -> Player | None:
    return session.scalar(select(Player).where(Player.external_identity == identity))


def require_by_identity(session: Session, identity: str) -> Player:
    player = get_by_identity(session, identity)
    if player is None:
        raise NotFoundError("No player linked to this account")
    return player


# ---------------------------------------------------------------------------
# Enrolment
# ---------------------------------------------------------------------------
def create_player(
    engine: Engine,
    display_name: str,
    *,
    external_identity: str | None = None,
    real_name: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    discord_username: str | None = None,
    primary_game_id: str | None = None,
    pass_tier: str = PassTier.NONE.value,
    rng: random.Random | None = None,
) -> Player:
    """Enrol a player under a freshly allocated short code.

    Used both by self-service signup (with *external_identity*) and by
    staff at the register (without).

    Raises
    ------
    ValidationError
        Blank display name or unknown pass tier.
    NotFoundError
        *primary_game_id* is not a known game.
    ConflictError
        *external_identity* is already linked, or no free short code was
        found within the retry budget.
    """
    name = _clean_display_name(display_name)
    try:
        tier = PassTier(pass_tier).value
    except ValueError:
        raise ValidationError(f"Unknown pass tier: {pass_tier!r}") from None
    primary_game_id = ledger_service.normalize_game_id(primary_game_id)

    with Session(engine, expire_on_commit=False) as session:
        if external_identity and get_by_identity(session, external_identity) is not None:
            raise ConflictError("Account already linked to a player")
        if primary_game_id is not None and session.get(Game, primary_game_id) is None:
            raise NotFoundError(f"Unknown game: {primary_game_id}")

        for attempt in range(1, SHORT_CODE_MAX_ATTEMPTS + 1):
            code = generate_short_code(rng)
            if session.scalar(select(Player.id).where(Player.short_code == code)):
                logger.warning("Short code collision on %s (attempt %d)", code, attempt)
                continue

            player = Player(
                short_code=code,
                display_name=name,
                real_name=real_name,
                email=email,
                phone=phone,
                discord_username=discord_username,
                external_identity=external_identity or None,
                primary_game_id=primary_game_id,
                pass_tier=tier,
                avatar_base=DEFAULT_AVATAR["base"],
                avatar_background=DEFAULT_AVATAR["background"],
                avatar_frame=DEFAULT_AVATAR["frame"],
                avatar_badge=DEFAULT_AVATAR["badge"],
            )
            try:
                with session.begin_nested():   # SAVEPOINT
                    session.add(player)
                    session.flush()
            except IntegrityError:
                # Lost a race on short_code or external_identity
                if external_identity and get_by_identity(session, external_identity):
                    raise ConflictError("Account already linked to a player") from None
                logger.warning("Short code %s taken concurrently (attempt %d)", code, attempt)
                continue

            session.commit()
            logger.info("Created player %s (%s)", player.short_code, player.display_name)
            return player

    raise ConflictError("Could not allocate a unique player code, please retry")


def link_identity(
    engine: Engine,
    identity: str,
    action: str,
    *,
    short_code: str | None = None,
    display_name: str | None = None,
    primary_game_id: str | None = None,
    email: str | None = None,
) -> Player:
    """Attach the caller's external identity to a player.

    ``link_existing`` claims an existing player by short code;
    ``create_new`` enrols a fresh player already linked.
    """
    if action not in (LINK_EXISTING, CREATE_NEW):
        raise ValidationError("Invalid action")

    with Session(engine, expire_on_commit=False) as session:
        if get_by_identity(session, identity) is not None:
            raise ConflictError("Account already linked to a player")

        if action == LINK_EXISTING:
            if not (short_code or "").strip():
                raise ValidationError("Player code required")
            player = get_by_short_code(session, short_code)
            if player is None:
                raise NotFoundError("Player not found")
            if player.external_identity and player.external_identity != identity:
                raise ConflictError("This player is already linked to another account")

            player.external_identity = identity
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise ConflictError("Account already linked to a player") from None
            logger.info("Linked identity to existing player %s", player.short_code)
            return player

    return create_player(
        engine,
        display_name,
        external_identity=identity,
        primary_game_id=primary_game_id,
        email=email,
    )


# ---------------------------------------------------------------------------
# Profile projection
# ---------------------------------------------------------------------------
def _game_rows(session: Session, player_id: str) -> list[dict]:
    summaries = aggregate_service.xp_by_game(session, player_id)
    if not summaries:
        return []
    games = {
        g.id: g for g in session.scalars(select(Game).where(Game.id.in_(list(summaries))))
    }
    rows = []
    for summary in sorted(summaries.values(), key=lambda s: (-s.xp, s.game_id)):
        game = games.get(summary.game_id)
        upcoming = next_rank(summary.game_id, summary.xp)
        rows.append({
            "game_id": summary.game_id,
            "game_name": game.name if game else summary.game_id,
            "icon": game.icon if game else None,
            "color": game.color if game else None,
            "xp": summary.xp,
            "wins": summary.wins,
            "events": summary.events,
            "rank": rank_for(summary.game_id, summary.xp),
            "next_rank": upcoming.title if upcoming else None,
            "next_rank_xp": upcoming.min_xp if upcoming else None,
            "currency": game.currency_name if game else currency_name(summary.game_id),
        })
    return rows


def player_profile(
    session: Session,
    player: Player,
    config: HyperbolicConfig | None = None,
    *,
    public: bool = True,
) -> dict:
    """Canonical profile projection.

    The public view honours ``show_real_name``, ``show_games`` and
    ``show_activity``; the owner's view shows everything.
    """
    total = aggregate_service.total_xp(session, player.id)
    show_real_name = not public or player.show_real_name
    show_games = not public or player.show_games
    show_activity = not public or player.show_activity
    limit = PUBLIC_ACTIVITY_LIMIT if public else OWN_ACTIVITY_LIMIT

    profile = {
        "id": player.short_code,
        "display_name": player.display_name,
        "real_name": player.real_name if show_real_name else None,
        "discord": player.discord_username if not public else None,
        "avatar": avatar_dict(player),
        "pass_tier": player.pass_tier,
        "primary_game_id": player.primary_game_id,
        "total_xp": total,
        "level": level_for_xp(total),
        "next_level_xp": next_level_xp(total),
        "global_position": aggregate_service.global_position(session, player.id),
        "game_xp": _game_rows(session, player.id) if show_games else [],
        "recent_activity": (
            [ledger_service.entry_to_dict(e)
             for e in ledger_service.recent_entries(session, player.id, limit)]
            if show_activity else []
        ),
        "created_at": player.created_at.isoformat() if player.created_at else None,
    }
    if config is not None:
        profile["store"] = config.store_name
    return profile
