"""
tests/test_rate_limit.py — Staff Mutation Rate Limiting
========================================================
Staff write endpoints are limited per staff identity with a DB-backed
sliding window, returning 429 plus ``Retry-After`` when exceeded.
"""

from __future__ import annotations

import dataclasses

import pytest

from hyperbolic.api.rate_limit import StaffRateLimiter


# ---------------------------------------------------------------------------
# Unit tests for the StaffRateLimiter core (DB-backed)
# ---------------------------------------------------------------------------
class TestStaffRateLimiter:
    @pytest.fixture(autouse=True)
    def _limiter(self, db_engine):
        self.engine = db_engine

    def test_allows_requests_within_limit(self):
        limiter = StaffRateLimiter(max_requests=5, window_seconds=60, engine=self.engine)
        for _ in range(5):
            allowed, _info = limiter.check("staff1")
            assert allowed
            limiter.record("staff1")

    def test_blocks_after_limit_exceeded(self):
        limiter = StaffRateLimiter(max_requests=3, window_seconds=60, engine=self.engine)
        for _ in range(3):
            limiter.record("staff1")

        allowed, info = limiter.check("staff1")
        assert not allowed
        assert info["remaining"] == 0
        assert info["reset"] > 0

    def test_separate_staff_have_separate_limits(self):
        limiter = StaffRateLimiter(max_requests=2, window_seconds=60, engine=self.engine)
        limiter.record("staff1")
        limiter.record("staff1")

        assert not limiter.check("staff1")[0]
        assert limiter.check("staff2")[0]

    def test_record_reports_remaining(self):
        limiter = StaffRateLimiter(max_requests=3, window_seconds=60, engine=self.engine)
        assert limiter.record("staff1")["remaining"] == 2
        assert limiter.record("staff1")["remaining"] == 1

    def test_reset_clears_state(self):
        limiter = StaffRateLimiter(max_requests=1, window_seconds=60, engine=self.engine)
        limiter.record("staff1")
        assert not limiter.check("staff1")[0]
        limiter.reset("staff1")
        assert limiter.check("staff1")[0]

    def test_expired_events_pruned(self):
        limiter = StaffRateLimiter(max_requests=1, window_seconds=0, engine=self.engine)
        limiter.record("staff1")
        # a zero-length window forgets everything immediately
        assert limiter.check("staff1")[0]


# ---------------------------------------------------------------------------
# Integration: the staff routes return 429 once the limit is hit
# ---------------------------------------------------------------------------
class TestStaffEndpointThrottle:
    def test_429_after_limit(self, client, config):
        from conftest import auth_header
        from hyperbolic.api.deps import get_config
        from hyperbolic.api.main import app

        app.dependency_overrides[get_config] = lambda: dataclasses.replace(
            config, staff_rate_limit=2,
        )
        headers = auth_header("staff_throttled", is_staff=True)

        for name in ("Brook", "Franky"):
            resp = client.post("/api/staff/players", json={"display_name": name}, headers=headers)
            assert resp.status_code == 201

        resp = client.post("/api/staff/players", json={"display_name": "Jinbe"}, headers=headers)
        assert resp.status_code == 429
        assert "Rate limit exceeded" in resp.json()["error"]
        assert int(resp.headers["Retry-After"]) >= 1

    def test_reads_not_counted(self, client, db_engine, config):
        from conftest import auth_header, make_player
        from hyperbolic.api.deps import get_config
        from hyperbolic.api.main import app

        app.dependency_overrides[get_config] = lambda: dataclasses.replace(
            config, staff_rate_limit=1,
        )
        p = make_player(db_engine, "Jinbe")
        headers = auth_header("staff_reader", is_staff=True)
        for _ in range(3):
            resp = client.get(f"/api/staff/players/{p.short_code}/monthly",
                              params={"year": 2026, "month": 1}, headers=headers)
            assert resp.status_code == 200
