"""Category, surface and eligibility mappings for Sportradar tournaments."""

from __future__ import annotations

from typing import Optional

from fantasy_tennis.sportradar.records import CompetitionRef, SeasonInfo

DEFAULT_CATEGORY = "challenger"
DEFAULT_SURFACE = "hard"

# Provider category names we ingest at all
ELIGIBLE_CATEGORIES = {"ATP", "Challenger"}

# Competition 'level' attribute -> tournaments.category
_LEVEL_MAP: dict[str, str] = {
    "grand_slam": "grand_slam",
    "atp_1000": "atp_1000",
    "atp_500": "atp_500",
    "atp_250": "atp_250",
    "atp_world_tour_finals": "finals",
    "atp_finals": "finals",
}

# Descriptive category names -> tournaments.category
_CATEGORY_NAME_MAP: dict[str, str] = {
    "Grand Slam": "grand_slam",
    "ATP Masters 1000": "atp_1000",
    "ATP 500": "atp_500",
    "ATP 250": "atp_250",
    "ATP Finals": "finals",
    "Challenger": "challenger",
}


def map_category(
    category_name: Optional[str],
    level: Optional[str] = None,
    competition_name: Optional[str] = None,
) -> str:
    """
    Map provider classification onto the tournament category enum.

    The competition level is the most specific signal and wins when present.
    A plain "ATP" category without a level is a tour-level event and maps to
    atp_250 (or finals when the name says so). Anything unknown defaults to
    challenger.
    """
    if level:
        mapped = _LEVEL_MAP.get(level.strip().lower())
        if mapped:
            return mapped

    if category_name in _CATEGORY_NAME_MAP:
        return _CATEGORY_NAME_MAP[category_name]

    if category_name == "ATP":
        name = (competition_name or "").lower()
        if "finals" in name and "next gen" not in name:
            return "finals"
        return "atp_250"

    return DEFAULT_CATEGORY


def map_surface(raw: Optional[str]) -> str:
    """Collapse provider surface names (hardcourt_indoor, red_clay, ...) to the enum."""
    if not raw:
        return DEFAULT_SURFACE
    value = raw.strip().lower()
    if "clay" in value:
        return "clay"
    if "grass" in value:
        return "grass"
    if "carpet" in value:
        return "carpet"
    return DEFAULT_SURFACE


def is_candidate_competition(competition: CompetitionRef) -> bool:
    """
    Cheap pre-filter on /competitions.json entries.

    Only rejects what the listing already tells us is out of scope; missing
    fields are let through and decided by ``is_eligible_season``.
    """
    if competition.category_name and competition.category_name not in ELIGIBLE_CATEGORIES:
        return False
    if competition.type and competition.type != "singles":
        return False
    if competition.gender and competition.gender != "men":
        return False
    return True


def is_eligible_season(info: SeasonInfo) -> bool:
    """Men's singles on the ATP or Challenger tour."""
    return (
        info.gender == "men"
        and info.type == "singles"
        and (info.category_name or "") in ELIGIBLE_CATEGORIES
    )
