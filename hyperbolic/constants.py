"""
hyperbolic.constants — Shared Constants & Helpers
===================================================

Single source of truth for the global level formula, the player short-code
format and the fixed avatars used when a profile is masked.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Leveling formula: game-agnostic, driven by total XP
# ---------------------------------------------------------------------------
XP_PER_LEVEL = 100


def level_for_xp(total_xp: int) -> int:
    """Global level for *total_xp*: ``floor(total / 100) + 1``.

    Distinct from per-game rank titles (see :mod:`hyperbolic.engine.ranks`).
    """
    return max(total_xp, 0) // XP_PER_LEVEL + 1


def next_level_xp(total_xp: int) -> int:
    """Total XP at which the next level starts."""
    return level_for_xp(total_xp) * XP_PER_LEVEL


# ---------------------------------------------------------------------------
# Player short codes: printed on NFC cards, so no 0/O/1/I
# ---------------------------------------------------------------------------
SHORT_CODE_PREFIX = "HYP-"
SHORT_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
SHORT_CODE_LENGTH = 6
SHORT_CODE_MAX_ATTEMPTS = 10

# ---------------------------------------------------------------------------
# Ledger bucket for entries not tied to a game
# ---------------------------------------------------------------------------
GENERAL_BUCKET = "general"

# ---------------------------------------------------------------------------
# Avatar presentation
# ---------------------------------------------------------------------------
DEFAULT_AVATAR: dict[str, str | None] = {
    "base": "\U0001f60e",      # 😎
    "background": "#3b82f6",
    "frame": "none",
    "badge": None,
}

ANONYMOUS_AVATAR: dict[str, str | None] = {
    "base": "\U0001f3ad",      # 🎭
    "background": "#64748b",
    "frame": "none",
    "badge": None,
}

PRIVATE_AVATAR: dict[str, str | None] = {
    "base": "\U0001f512",      # 🔒
    "background": "#1e293b",
    "frame": "none",
    "badge": None,
}

ANONYMOUS_NAME = "Anonymous"
