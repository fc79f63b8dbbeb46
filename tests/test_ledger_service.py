"""
tests/test_ledger_service.py — XP Ledger Write Path
====================================================
Covers validation, final-amount computation, the general bucket, the
daily-gate unique index and batch atomicity.

Uses an in-memory SQLite database via the shared conftest fixtures.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from conftest import award, make_player
from hyperbolic.database.models import XpLedgerEntry
from hyperbolic.errors import (
    AlreadyPerformedError,
    NotFoundError,
    ValidationError,
)
from hyperbolic.services import ledger_service

LA = ZoneInfo("America/Los_Angeles")


def _count(engine) -> int:
    with Session(engine) as s:
        return s.scalar(select(func.count(XpLedgerEntry.id)))


class TestComputeFinalAmount:
    @pytest.mark.parametrize("base, mult, expected", [
        (10, 1.0, 10),
        (15, 1.5, 23),     # 22.5 rounds half up
        (10, 1.25, 13),    # 12.5 rounds half up
        (7, 0.0, 0),
        (20, 2.0, 40),
    ])
    def test_round_half_up(self, base, mult, expected):
        assert ledger_service.compute_final_amount(base, mult) == expected


class TestAppendEntry:
    def test_stores_computed_final_amount(self, db_engine):
        p = make_player(db_engine, "Luffy")
        entry = award(db_engine, p, 15, multiplier=1.5, game_id="one_piece",
                      source="event_attendance")
        assert entry.final_amount == 23
        assert entry.base_amount == 15
        assert entry.game_id == "one_piece"
        assert entry.gate_day is None

    def test_explicit_final_amount_is_authoritative(self, db_engine):
        p = make_player(db_engine, "Luffy")
        with Session(db_engine, expire_on_commit=False) as s:
            entry = ledger_service.append_entry(
                s, p.id, "manual_adjustment", 10, tz=LA, multiplier=2.0, final_amount=5,
            )
            s.commit()
        assert entry.final_amount == 5

    def test_general_bucket_stored_as_null(self, db_engine):
        p = make_player(db_engine, "Luffy")
        entry = award(db_engine, p, 10, game_id="general")
        assert entry.game_id is None

    @pytest.mark.parametrize("kwargs", [
        {"base_amount": -1},
        {"multiplier": -0.5},
        {"source": "stolen"},
        {"final_amount": -3},
    ])
    def test_rejects_invalid_input(self, db_engine, kwargs):
        p = make_player(db_engine, "Luffy")
        args = {"source": "purchase", "base_amount": 10}
        args.update(kwargs)
        with Session(db_engine) as s:
            with pytest.raises(ValidationError):
                ledger_service.append_entry(
                    s, p.id, args.pop("source"), args.pop("base_amount"), tz=LA, **args,
                )
        assert _count(db_engine) == 0

    def test_unknown_player(self, db_engine):
        with Session(db_engine) as s:
            with pytest.raises(NotFoundError):
                ledger_service.append_entry(s, "no-such-player", "purchase", 10, tz=LA)

    def test_unknown_game(self, db_engine):
        p = make_player(db_engine, "Luffy")
        with pytest.raises(NotFoundError):
            award(db_engine, p, 10, game_id="chess")
        assert _count(db_engine) == 0

    def test_non_gated_sources_may_repeat(self, db_engine):
        p = make_player(db_engine, "Luffy")
        award(db_engine, p, 10)
        award(db_engine, p, 10)
        assert _count(db_engine) == 2


class TestGateDay:
    def test_gated_entry_gets_local_day(self, db_engine):
        p = make_player(db_engine, "Luffy")
        # 07:30 UTC on Jan 15 is still Jan 14 in Los Angeles
        entry = award(db_engine, p, 20, source="check_in",
                      now=datetime(2026, 1, 15, 7, 30, tzinfo=UTC))
        assert entry.gate_day == date(2026, 1, 14)

    def test_unique_index_blocks_second_entry_same_day(self, db_engine):
        p = make_player(db_engine, "Luffy")
        now = datetime(2026, 1, 15, 18, 0, tzinfo=UTC)
        award(db_engine, p, 20, source="check_in", now=now)
        with pytest.raises(AlreadyPerformedError) as exc_info:
            award(db_engine, p, 20, source="check_in", now=now)
        assert exc_info.value.kind == "check_in"
        assert exc_info.value.status_code == 409
        assert _count(db_engine) == 1

    def test_local_midnight_starts_new_day(self, db_engine):
        p = make_player(db_engine, "Luffy")
        award(db_engine, p, 20, source="check_in",
              now=datetime(2026, 1, 15, 7, 30, tzinfo=UTC))   # Jan 14, 23:30 local
        award(db_engine, p, 20, source="check_in",
              now=datetime(2026, 1, 15, 8, 30, tzinfo=UTC))   # Jan 15, 00:30 local
        assert _count(db_engine) == 2

    def test_check_in_and_spin_are_separate_gates(self, db_engine):
        p = make_player(db_engine, "Luffy")
        now = datetime(2026, 1, 15, 18, 0, tzinfo=UTC)
        award(db_engine, p, 20, source="check_in", now=now)
        award(db_engine, p, 0, source="daily_spin", now=now)
        assert _count(db_engine) == 2


class TestAwardBatch:
    def test_inserts_all(self, db_engine):
        p = make_player(db_engine, "Luffy")
        entries = ledger_service.award_batch(
            db_engine,
            p.id,
            [
                {"source": "event_attendance", "base_amount": 50, "game_id": "gundam"},
                {"source": "match_win", "base_amount": 10, "game_id": "gundam",
                 "multiplier": 2.0},
            ],
            tz=LA,
            awarded_by="staff-1",
        )
        assert [e.final_amount for e in entries] == [50, 20]
        assert all(e.awarded_by == "staff-1" for e in entries)

    def test_all_or_nothing(self, db_engine):
        p = make_player(db_engine, "Luffy")
        with pytest.raises(ValidationError):
            ledger_service.award_batch(
                db_engine,
                p.id,
                [
                    {"source": "purchase", "base_amount": 50},
                    {"source": "purchase", "base_amount": -5},
                ],
                tz=LA,
            )
        assert _count(db_engine) == 0

    def test_empty_batch_rejected(self, db_engine):
        p = make_player(db_engine, "Luffy")
        with pytest.raises(ValidationError):
            ledger_service.award_batch(db_engine, p.id, [], tz=LA)


class TestRecentEntries:
    def test_newest_first_with_limit(self, db_engine):
        p = make_player(db_engine, "Luffy")
        for day in (1, 2, 3):
            award(db_engine, p, day * 10, now=datetime(2026, 2, day, 12, tzinfo=UTC))
        with Session(db_engine) as s:
            entries = ledger_service.recent_entries(s, p.id, limit=2)
        assert [e.final_amount for e in entries] == [30, 20]
