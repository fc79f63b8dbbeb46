"""
Hyperbolic — Loyalty XP Service for Tabletop Game Stores
==========================================================
Players earn XP for store check-ins, event attendance, purchases and a
daily chance spin.  Every award is an immutable row in the XP ledger;
totals, per-game ranks and leaderboards are derived from it on read.

Package layout::

    hyperbolic/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Level formula, short-code alphabet, avatars
    ├── context.py         # Per-request caller identity
    ├── errors.py          # Error taxonomy mapped to HTTP statuses
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   ├── models.py      # Player, Game, XpLedgerEntry, StaffRateLimitEvent
    │   └── seed.py        # Default game catalogue
    ├── engine/
    │   ├── ranks.py       # Per-game rank ladders + currency names
    │   ├── spin.py        # Daily spin outcome table + draw
    │   └── visibility.py  # Privacy-filtered public projections
    ├── services/
    │   ├── ledger_service.py    # Append-only XP ledger writes
    │   ├── aggregate_service.py # Totals, per-game breakdowns, leaderboards
    │   ├── daily_gate.py        # Once-per-day check-in / spin
    │   ├── player_service.py    # Player directory, linking, profiles
    │   ├── privacy_service.py   # Privacy settings read/update
    │   └── community_service.py # Leaderboard + search
    └── api/
        ├── main.py        # FastAPI app + error handlers
        ├── deps.py        # JWT → RequestContext, engine, config
        ├── rate_limit.py  # Staff mutation throttle
        └── routes/        # community, player, xp, staff, games
"""

__version__ = "0.1.0"
