"""
hyperbolic.config — YAML Configuration Loader
==============================================

**Why this file exists:**
This module reads ``config.yaml`` for store-level settings (store name,
local time zone, check-in reward, list sizes, staff throttle).  Secrets and
connection strings stay in the environment (``DATABASE_URL``,
``JWT_SECRET``) and are loaded through ``python-dotenv``.

Usage::

    from hyperbolic.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.store_name)        # "Hyperbolic Games"
    print(cfg.tz)                # ZoneInfo('America/Los_Angeles')
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

DEFAULT_TIMEZONE = "America/Los_Angeles"


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class HyperbolicConfig:
    """Immutable configuration loaded from ``config.yaml``.

    ``timezone`` defines the store's calendar day, which is what the daily
    check-in and spin gates count against.
    """

    # Identity
    store_name: str

    # Calendar
    timezone: str = DEFAULT_TIMEZONE

    # Rewards
    checkin_xp: int = 20

    # Listing defaults
    leaderboard_limit: int = 20
    search_limit: int = 20

    # Staff throttle (mutations per window)
    staff_rate_limit: int = 30
    staff_rate_window_seconds: int = 60

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path | None = None) -> HyperbolicConfig:
    """Read *path* and return a :class:`HyperbolicConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.  Defaults to the
        ``HYPERBOLIC_CONFIG`` environment variable, then ``config.yaml`` in
        the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    ValueError
        If ``timezone`` is not a known IANA zone name.
    """
    config_path = Path(path or os.getenv("HYPERBOLIC_CONFIG", "config.yaml"))
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    timezone = str(raw.get("timezone") or DEFAULT_TIMEZONE)
    try:
        ZoneInfo(timezone)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"Unknown timezone in {config_path}: {timezone!r}") from exc

    return HyperbolicConfig(
        store_name=raw["store_name"],
        timezone=timezone,
        checkin_xp=int(raw.get("checkin_xp", 20)),
        leaderboard_limit=int(raw.get("leaderboard_limit", 20)),
        search_limit=int(raw.get("search_limit", 20)),
        staff_rate_limit=int(raw.get("staff_rate_limit", 30)),
        staff_rate_window_seconds=int(raw.get("staff_rate_window_seconds", 60)),
    )
