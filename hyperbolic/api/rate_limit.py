"""
hyperbolic.api.rate_limit — Per-Staff Mutation Rate Limiting
=============================================================

Staff can award XP and enrol players from the register.  Those writes are
throttled per staff identity (JWT ``sub``) with a sliding window, by
default 30 mutations per minute (``staff_rate_limit`` in config.yaml).

State lives in the ``staff_rate_limit_events`` table so it survives
restarts and is shared between workers.  Exceeding the limit returns
HTTP 429 with a ``Retry-After`` header.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import Engine, delete, func, select
from sqlalchemy.orm import Session

from hyperbolic.api.deps import get_config, get_engine, require_staff
from hyperbolic.config import HyperbolicConfig
from hyperbolic.context import RequestContext
from hyperbolic.database.models import StaffRateLimitEvent

logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT = 30
DEFAULT_WINDOW_SECONDS = 60

_MUTATION_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class StaffRateLimiter:
    """DB-backed sliding-window counter keyed by staff identity."""

    def __init__(
        self,
        max_requests: int = DEFAULT_RATE_LIMIT,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        *,
        engine: Engine,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.engine = engine

    @staticmethod
    def _aware(value: datetime) -> datetime:
        # SQLite hands back naive datetimes
        return value if value.tzinfo else value.replace(tzinfo=UTC)

    def _prune(self, session: Session, staff_id: str, cutoff: datetime) -> None:
        session.execute(
            delete(StaffRateLimitEvent).where(
                StaffRateLimitEvent.staff_id == staff_id,
                StaffRateLimitEvent.timestamp < cutoff,
            )
        )

    def check(self, staff_id: str) -> tuple[bool, dict[str, Any]]:
        """Return ``(allowed, info)``; info has ``remaining``, ``reset``, ``limit``."""
        now = datetime.now(UTC)
        cutoff = now - timedelta(seconds=self.window_seconds)

        with Session(self.engine) as session:
            self._prune(session, staff_id, cutoff)
            oldest = session.scalar(
                select(func.min(StaffRateLimitEvent.timestamp))
                .where(StaffRateLimitEvent.staff_id == staff_id)
            )
            count = session.scalar(
                select(func.count(StaffRateLimitEvent.id))
                .where(StaffRateLimitEvent.staff_id == staff_id)
            ) or 0
            session.commit()

        if count >= self.max_requests:
            reset = (self._aware(oldest) + timedelta(seconds=self.window_seconds) - now)
            return False, {
                "remaining": 0,
                "reset": max(1, int(reset.total_seconds()) + 1),
                "limit": self.max_requests,
            }
        return True, {
            "remaining": self.max_requests - count,
            "reset": self.window_seconds,
            "limit": self.max_requests,
        }

    def record(self, staff_id: str) -> dict[str, Any]:
        """Count one mutation and return the updated info."""
        cutoff = datetime.now(UTC) - timedelta(seconds=self.window_seconds)

        with Session(self.engine) as session:
            self._prune(session, staff_id, cutoff)
            session.add(StaffRateLimitEvent(staff_id=staff_id))
            session.flush()
            count = session.scalar(
                select(func.count(StaffRateLimitEvent.id))
                .where(StaffRateLimitEvent.staff_id == staff_id)
            ) or 0
            session.commit()

        return {
            "remaining": max(0, self.max_requests - count),
            "reset": self.window_seconds,
            "limit": self.max_requests,
        }

    def reset(self, staff_id: str | None = None) -> None:
        """Clear state for one staff member, or for everyone."""
        with Session(self.engine) as session:
            stmt = delete(StaffRateLimitEvent)
            if staff_id is not None:
                stmt = stmt.where(StaffRateLimitEvent.staff_id == staff_id)
            session.execute(stmt)
            session.commit()


# ---------------------------------------------------------------------------
# FastAPI dependency: chains after require_staff
# ---------------------------------------------------------------------------
async def rate_limited_staff(
    request: Request,
    ctx: Annotated[RequestContext, Depends(require_staff)],
    engine: Annotated[Engine, Depends(get_engine)],
    config: Annotated[HyperbolicConfig, Depends(get_config)],
) -> RequestContext:
    """Require a staff token *and* enforce the per-staff mutation limit.

    Read-only methods pass through uncounted.
    """
    if request.method not in _MUTATION_METHODS:
        return ctx

    limiter = StaffRateLimiter(
        config.staff_rate_limit, config.staff_rate_window_seconds, engine=engine,
    )
    staff_id = ctx.identity

    allowed, info = await asyncio.to_thread(limiter.check, staff_id)
    if not allowed:
        logger.warning(
            "Rate limit exceeded for staff %s: %d per %ds",
            staff_id, limiter.max_requests, limiter.window_seconds,
        )
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit exceeded: {limiter.max_requests} mutations per minute.",
            headers={"Retry-After": str(info["reset"])},
        )

    await asyncio.to_thread(limiter.record, staff_id)
    return ctx
