"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of hyperbolic.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

from datetime import UTC, datetime, timedelta  # noqa: E402
from itertools import count  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine, event  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from hyperbolic.config import HyperbolicConfig  # noqa: E402
from hyperbolic.constants import SHORT_CODE_ALPHABET, SHORT_CODE_PREFIX  # noqa: E402
from hyperbolic.database.models import Base, Player  # noqa: E402
from hyperbolic.database.seed import seed_default_games  # noqa: E402
from hyperbolic.services import ledger_service  # noqa: E402

TEST_TZ = "America/Los_Angeles"

# Auto codes start at HYP-BAAAAA so they never clash with codes tests pick
_codes = count(len(SHORT_CODE_ALPHABET) ** 5)
_enrolment = count()
_BASE_TIME = datetime(2026, 1, 1, tzinfo=UTC)


def _next_short_code() -> str:
    n = next(_codes)
    digits = []
    for _ in range(6):
        n, r = divmod(n, len(SHORT_CODE_ALPHABET))
        digits.append(SHORT_CODE_ALPHABET[r])
    return SHORT_CODE_PREFIX + "".join(reversed(digits))


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with all Hyperbolic tables and seeded games.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used in the xp routes).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite does not emit BEGIN itself, so SAVEPOINTs would escape the
    # outer transaction; use SQLAlchemy's documented recipe to fix that.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    seed_default_games(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine, expire_on_commit=False) as session:
        yield session
        session.rollback()


@pytest.fixture
def config() -> HyperbolicConfig:
    return HyperbolicConfig(store_name="Test Store", timezone=TEST_TZ)


# ---------------------------------------------------------------------------
# Data factories
# ---------------------------------------------------------------------------
def make_player(
    engine: Engine,
    display_name: str = "Player",
    *,
    identity: str | None = None,
    created_offset: int | None = None,
    **fields,
) -> Player:
    """Insert a player directly, bypassing short-code allocation.

    ``created_offset`` (minutes after a fixed base time) controls the
    enrolment order used for leaderboard tie-breaks.
    """
    n = next(_enrolment) if created_offset is None else created_offset
    with Session(engine, expire_on_commit=False) as session:
        player = Player(
            short_code=fields.pop("short_code", None) or _next_short_code(),
            display_name=display_name,
            external_identity=identity,
            created_at=_BASE_TIME + timedelta(minutes=n),
            **fields,
        )
        session.add(player)
        session.commit()
        return player


def award(
    engine: Engine,
    player: Player,
    amount: int,
    *,
    source: str = "purchase",
    game_id: str | None = None,
    multiplier: float = 1.0,
    now: datetime | None = None,
):
    """Append one ledger entry and commit."""
    from zoneinfo import ZoneInfo

    with Session(engine, expire_on_commit=False) as session:
        entry = ledger_service.append_entry(
            session,
            player.id,
            source,
            amount,
            tz=ZoneInfo(TEST_TZ),
            multiplier=multiplier,
            game_id=game_id,
            now=now,
        )
        session.commit()
        return entry


def make_token(sub: str, *, is_staff: bool = False) -> str:
    """Create a bearer JWT.  Usable as both a fixture helper and a factory."""
    import jwt

    from hyperbolic.api.deps import JWT_ALGORITHM, JWT_SECRET

    return jwt.encode({"sub": sub, "is_staff": is_staff}, JWT_SECRET, algorithm=JWT_ALGORITHM)


def auth_header(sub: str, *, is_staff: bool = False) -> dict:
    return {"Authorization": f"Bearer {make_token(sub, is_staff=is_staff)}"}


@pytest.fixture
def client(db_engine: Engine, config: HyperbolicConfig):
    """FastAPI TestClient wired to the in-memory database and test config."""
    from fastapi.testclient import TestClient

    from hyperbolic.api.deps import get_config, get_engine
    from hyperbolic.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: config
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
