"""
hyperbolic.database.models — SQLAlchemy 2.0 Data Models
========================================================

Tables:
- players                   — Enrolled players, avatar and privacy flags
- games                     — Supported games and their point currencies
- xp_ledger                 — Append-only journal of every XP award
- staff_rate_limit_events   — Durable mutation events for staff throttling
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Hyperbolic ORM models."""


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class XpSource(enum.StrEnum):
    """Why a ledger entry was awarded."""
    EVENT_ATTENDANCE = "event_attendance"
    MATCH_WIN = "match_win"
    UNDEFEATED_BONUS = "undefeated_bonus"
    REFERRAL = "referral"
    PURCHASE = "purchase"
    DAILY_SPIN = "daily_spin"
    CHECK_IN = "check_in"
    ACHIEVEMENT = "achievement"
    MANUAL_ADJUSTMENT = "manual_adjustment"
    BONUS_EVENT = "bonus_event"
    COMMUNITY_CONTRIBUTION = "community_contribution"


# Sources limited to one entry per player per local calendar day
GATED_SOURCES: frozenset[XpSource] = frozenset({XpSource.CHECK_IN, XpSource.DAILY_SPIN})


class ProfileVisibility(enum.StrEnum):
    PUBLIC = "public"
    FRIENDS = "friends"
    PRIVATE = "private"


class PassTier(enum.StrEnum):
    """Membership tiers."""
    NONE = "none"
    ACCESS = "access"
    PLAYER = "player"
    ALL_ACCESS = "all_access"
    SHADOW_VIP = "shadow_vip"


class GameFrequency(enum.StrEnum):
    """Event cadence; ``high`` games run twice weekly and rank on a steeper ladder."""
    STANDARD = "standard"
    HIGH = "high"


# ---------------------------------------------------------------------------
# Players: one row per enrolled person
# ---------------------------------------------------------------------------
class Player(Base):
    __tablename__ = "players"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    short_code: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    real_name: Mapped[str | None] = mapped_column(String(200), default=None)
    email: Mapped[str | None] = mapped_column(String(320), default=None)
    phone: Mapped[str | None] = mapped_column(String(40), default=None)
    discord_username: Mapped[str | None] = mapped_column(String(100), default=None)

    # Avatar
    avatar_base: Mapped[str] = mapped_column(String(16), default="\U0001f60e")
    avatar_background: Mapped[str] = mapped_column(String(16), default="#3b82f6")
    avatar_frame: Mapped[str] = mapped_column(String(32), default="none")
    avatar_badge: Mapped[str | None] = mapped_column(String(16), default=None)

    # External identity principal (nullable until the player links an account)
    external_identity: Mapped[str | None] = mapped_column(
        String(128), unique=True, nullable=True, default=None
    )
    primary_game_id: Mapped[str | None] = mapped_column(
        String(50), ForeignKey("games.id", ondelete="SET NULL"), nullable=True
    )
    pass_tier: Mapped[str] = mapped_column(String(20), default=PassTier.NONE.value)

    # Privacy
    profile_visibility: Mapped[str] = mapped_column(
        String(10), default=ProfileVisibility.PUBLIC.value
    )
    show_on_leaderboard: Mapped[bool] = mapped_column(Boolean, default=True)
    show_as_anonymous: Mapped[bool] = mapped_column(Boolean, default=False)
    allow_friend_requests: Mapped[bool] = mapped_column(Boolean, default=True)
    hide_from_search: Mapped[bool] = mapped_column(Boolean, default=False)
    show_activity: Mapped[bool] = mapped_column(Boolean, default=True)
    show_games: Mapped[bool] = mapped_column(Boolean, default=True)
    show_real_name: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    ledger_entries: Mapped[list[XpLedgerEntry]] = relationship(back_populates="player")

    __table_args__ = (
        Index("ix_players_display_name", "display_name"),
    )

    def __repr__(self) -> str:
        return f"<Player id={self.id} code={self.short_code!r} name={self.display_name!r}>"


# ---------------------------------------------------------------------------
# Games: supported titles and their currencies
# ---------------------------------------------------------------------------
class Game(Base):
    __tablename__ = "games"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)  # slug, e.g. one_piece
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon: Mapped[str] = mapped_column(String(16), nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False, default="#64748b")
    currency_name: Mapped[str] = mapped_column(String(50), nullable=False, default="XP")
    frequency: Mapped[str] = mapped_column(
        String(10), nullable=False, default=GameFrequency.STANDARD.value
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    def __repr__(self) -> str:
        return f"<Game id={self.id!r} frequency={self.frequency!r}>"


# ---------------------------------------------------------------------------
# XpLedgerEntry: append-only award journal
# ---------------------------------------------------------------------------
class XpLedgerEntry(Base):
    """One immutable XP award.

    ``final_amount`` is the authoritative value for every aggregate; it is
    stored rather than recomputed from ``base_amount * multiplier`` so a
    staff override survives.  ``gate_day`` is the store-local calendar day
    for gated sources (check-in, daily spin) and NULL otherwise; the partial
    unique index on it is what makes those actions once-per-day under
    concurrent requests.
    """
    __tablename__ = "xp_ledger"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    player_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("players.id", ondelete="RESTRICT"), nullable=False
    )
    game_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    base_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    multiplier: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    final_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(String(30), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    awarded_by: Mapped[str | None] = mapped_column(String(128), default=None)
    gate_day: Mapped[date | None] = mapped_column(Date, nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    player: Mapped[Player] = relationship(back_populates="ledger_entries")

    __table_args__ = (
        # One gated action per player per local day
        Index(
            "ix_xp_ledger_daily_gate",
            "player_id",
            "source",
            "gate_day",
            unique=True,
            postgresql_where=gate_day.isnot(None),
            sqlite_where=gate_day.isnot(None),
        ),
        Index("ix_xp_ledger_player_time", "player_id", "created_at"),
        Index("ix_xp_ledger_game_player", "game_id", "player_id"),
        Index("ix_xp_ledger_source_time", "source", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<XpLedgerEntry id={self.id} player={self.player_id} "
            f"source={self.source} final={self.final_amount}>"
        )


# ---------------------------------------------------------------------------
# StaffRateLimitEvent: durable mutation events for staff throttling
# ---------------------------------------------------------------------------
class StaffRateLimitEvent(Base):
    __tablename__ = "staff_rate_limit_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    staff_id: Mapped[str] = mapped_column(String(128), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_staff_rate_limit_staff_ts", "staff_id", timestamp.desc()),
        Index("ix_staff_rate_limit_ts", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<StaffRateLimitEvent staff={self.staff_id!r} ts={self.timestamp}>"
