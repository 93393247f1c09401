"""Shared status vocabularies and mapping helpers.

This module is the single source of truth for the closed status sets stored
in the database and for translating the provider's wider vocabulary into
them. Every mapper is total: unknown values fall back to a fixed default
instead of raising.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

# Match lifecycle as stored in tournament_matches.status
MATCH_STATUSES: tuple[str, ...] = (
    "scheduled",
    "in_progress",
    "completed",
    "cancelled",
)
DEFAULT_MATCH_STATUS = "scheduled"

_MATCH_STATUS_MAP: dict[str, str] = {
    "scheduled": "scheduled",
    "not_started": "scheduled",
    "in_progress": "in_progress",
    "live": "in_progress",
    "completed": "completed",
    "finished": "completed",
    "closed": "completed",
    "ended": "completed",
    "cancelled": "cancelled",
    "postponed": "cancelled",
    "abandoned": "cancelled",
}

# Player participation in a tournament (player_schedules.status)
PARTICIPATION_STATUSES: tuple[str, ...] = (
    "confirmed",
    "qualifying",
    "alternate",
    "withdrawn",
    "eliminated",
    "champion",
)
DEFAULT_PARTICIPATION_STATUS = "confirmed"

_PARTICIPATION_ALIASES: dict[str, str] = {
    "registered": "confirmed",
    "entered": "confirmed",
    "main_draw": "confirmed",
    "qualifier": "qualifying",
    "lucky_loser": "alternate",
    "retired": "withdrawn",
    "walkover": "withdrawn",
    "winner": "champion",
}

# How the player got into the draw (player_schedules.entry_type)
ENTRY_TYPES: tuple[str, ...] = (
    "main_draw",
    "qualifying",
    "alternate",
    "wildcard",
)
DEFAULT_ENTRY_TYPE = "main_draw"

_ENTRY_TYPE_ALIASES: dict[str, str] = {
    "direct": "main_draw",
    "direct_acceptance": "main_draw",
    "da": "main_draw",
    "q": "qualifying",
    "qualifier": "qualifying",
    "lucky_loser": "alternate",
    "ll": "alternate",
    "alt": "alternate",
    "wc": "wildcard",
    "wild_card": "wildcard",
}

# Tournament lifecycle (tournaments.status)
TOURNAMENT_STATUSES: tuple[str, ...] = ("upcoming", "ongoing", "completed")


def _key(raw: Optional[str]) -> str:
    if not raw:
        return ""
    return raw.strip().lower().replace(" ", "_").replace("-", "_")


def map_match_status(raw: Optional[str]) -> str:
    """Map a provider match status onto the stored set (default ``scheduled``)."""
    return _MATCH_STATUS_MAP.get(_key(raw), DEFAULT_MATCH_STATUS)


def map_participation_status(raw: Optional[str]) -> str:
    """Map a provider participation state (default ``confirmed``)."""
    key = _key(raw)
    if key in PARTICIPATION_STATUSES:
        return key
    return _PARTICIPATION_ALIASES.get(key, DEFAULT_PARTICIPATION_STATUS)


def map_entry_type(raw: Optional[str]) -> str:
    """Map a provider entry type (default ``main_draw``)."""
    key = _key(raw)
    if key in ENTRY_TYPES:
        return key
    return _ENTRY_TYPE_ALIASES.get(key, DEFAULT_ENTRY_TYPE)


def derive_tournament_status(
    start_date: Optional[date],
    end_date: Optional[date],
    today: Optional[date] = None,
) -> str:
    """
    Work out a tournament's lifecycle status from its dates.

    - end date before today -> completed
    - start date on or before today -> ongoing
    - otherwise (including unknown dates) -> upcoming
    """
    today = today or date.today()
    if end_date is not None and end_date < today:
        return "completed"
    if start_date is not None and start_date <= today:
        return "ongoing"
    return "upcoming"
