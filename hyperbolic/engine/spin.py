"""
hyperbolic.engine.spin — Daily Spin Outcome Table
==================================================

The prize wheel players spin once per day.  Probabilities sum to 1.0.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

__all__ = ["MAX_SPIN_XP", "SPIN_TABLE", "SpinOutcome", "draw_spin_outcome", "validate_spin_xp"]

MAX_SPIN_XP = 100


@dataclass(frozen=True, slots=True)
class SpinOutcome:
    name: str
    rarity: str
    xp: int
    probability: float


SPIN_TABLE: tuple[SpinOutcome, ...] = (
    SpinOutcome("5 XP", "common", 5, 0.35),
    SpinOutcome("15 XP", "uncommon", 15, 0.25),
    SpinOutcome("25 XP", "rare", 25, 0.18),
    SpinOutcome("50 XP", "epic", 50, 0.12),
    SpinOutcome("100 XP JACKPOT", "legendary", 100, 0.04),
    SpinOutcome("Free Booster Pack", "epic", 0, 0.06),  # physical prize, no XP
)


def draw_spin_outcome(rng: random.Random | None = None) -> SpinOutcome:
    """Draw one outcome by walking the cumulative probability mass.

    Returns the first entry whose cumulative probability is ≥ ``r``; if
    float drift leaves ``r`` past the last boundary, the first entry wins.
    """
    r = (rng or random).random()
    cumulative = 0.0
    for outcome in SPIN_TABLE:
        cumulative += outcome.probability
        if r <= cumulative:
            return outcome
    return SPIN_TABLE[0]


def validate_spin_xp(xp: object) -> bool:
    """Bounds check for a client-reported spin result."""
    return isinstance(xp, int) and not isinstance(xp, bool) and 0 <= xp <= MAX_SPIN_XP
