"""Initial schema: players, games, xp_ledger, staff_rate_limit_events

Revision ID: 4f2c8a1e9b3d
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4f2c8a1e9b3d"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "games",
        sa.Column("id", sa.String(50), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("icon", sa.String(16), nullable=False),
        sa.Column("color", sa.String(7), nullable=False, server_default="#64748b"),
        sa.Column("currency_name", sa.String(50), nullable=False, server_default="XP"),
        sa.Column("frequency", sa.String(10), nullable=False, server_default="standard"),
        sa.Column("is_active", sa.Boolean(), nullable=True, server_default=sa.true()),
    )

    op.create_table(
        "players",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("short_code", sa.String(10), nullable=False, unique=True),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("real_name", sa.String(200), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("discord_username", sa.String(100), nullable=True),
        sa.Column("avatar_base", sa.String(16), nullable=True),
        sa.Column("avatar_background", sa.String(16), nullable=True),
        sa.Column("avatar_frame", sa.String(32), nullable=True),
        sa.Column("avatar_badge", sa.String(16), nullable=True),
        sa.Column("external_identity", sa.String(128), nullable=True, unique=True),
        sa.Column(
            "primary_game_id",
            sa.String(50),
            sa.ForeignKey("games.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("pass_tier", sa.String(20), nullable=True, server_default="none"),
        sa.Column("profile_visibility", sa.String(10), nullable=True, server_default="public"),
        sa.Column("show_on_leaderboard", sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column("show_as_anonymous", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("allow_friend_requests", sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column("hide_from_search", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("show_activity", sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column("show_games", sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column("show_real_name", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=True,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_players_display_name", "players", ["display_name"])

    op.create_table(
        "xp_ledger",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "player_id",
            sa.String(36),
            sa.ForeignKey("players.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("game_id", sa.String(50), nullable=True),
        sa.Column("base_amount", sa.Integer(), nullable=False),
        sa.Column("multiplier", sa.Float(), nullable=False, server_default="1.0"),
        sa.Column("final_amount", sa.Integer(), nullable=False),
        sa.Column("source", sa.String(30), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("awarded_by", sa.String(128), nullable=True),
        sa.Column("gate_day", sa.Date(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=True,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_xp_ledger_daily_gate",
        "xp_ledger",
        ["player_id", "source", "gate_day"],
        unique=True,
        postgresql_where=sa.text("gate_day IS NOT NULL"),
        sqlite_where=sa.text("gate_day IS NOT NULL"),
    )
    op.create_index("ix_xp_ledger_player_time", "xp_ledger", ["player_id", "created_at"])
    op.create_index("ix_xp_ledger_game_player", "xp_ledger", ["game_id", "player_id"])
    op.create_index("ix_xp_ledger_source_time", "xp_ledger", ["source", "created_at"])

    op.create_table(
        "staff_rate_limit_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("staff_id", sa.String(128), nullable=False),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_staff_rate_limit_staff_ts",
        "staff_rate_limit_events",
        ["staff_id", sa.text("timestamp DESC")],
    )
    op.create_index("ix_staff_rate_limit_ts", "staff_rate_limit_events", ["timestamp"])


def downgrade() -> None:
    op.drop_index("ix_staff_rate_limit_ts", table_name="staff_rate_limit_events")
    op.drop_index("ix_staff_rate_limit_staff_ts", table_name="staff_rate_limit_events")
    op.drop_table("staff_rate_limit_events")

    op.drop_index("ix_xp_ledger_source_time", table_name="xp_ledger")
    op.drop_index("ix_xp_ledger_game_player", table_name="xp_ledger")
    op.drop_index("ix_xp_ledger_player_time", table_name="xp_ledger")
    op.drop_index("ix_xp_ledger_daily_gate", table_name="xp_ledger")
    op.drop_table("xp_ledger")

    op.drop_index("ix_players_display_name", table_name="players")
    op.drop_table("players")
    op.drop_table("games")
