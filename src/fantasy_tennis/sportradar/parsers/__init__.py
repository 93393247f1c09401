"""
Sportradar (and ATP website) payload parsers.

Pure functions: no I/O, deterministic for a given payload. Each one skips
entries missing mandatory fields instead of raising.
"""

from fantasy_tennis.sportradar.parsers.entry_list import parse_entry_list
from fantasy_tennis.sportradar.parsers.mappings import (
    is_candidate_competition,
    is_eligible_season,
    map_category,
    map_surface,
)
from fantasy_tennis.sportradar.parsers.matches import parse_daily_schedule, parse_draw
from fantasy_tennis.sportradar.parsers.rankings import parse_atp_rankings_html, parse_rankings
from fantasy_tennis.sportradar.parsers.seasons import (
    parse_competitions,
    parse_season_info_xml,
    parse_seasons_json,
    parse_seasons_xml,
)
from fantasy_tennis.statuses import map_entry_type, map_match_status, map_participation_status

__all__ = [
    "is_candidate_competition",
    "is_eligible_season",
    "map_category",
    "map_entry_type",
    "map_match_status",
    "map_participation_status",
    "map_surface",
    "parse_atp_rankings_html",
    "parse_competitions",
    "parse_daily_schedule",
    "parse_draw",
    "parse_entry_list",
    "parse_rankings",
    "parse_season_info_xml",
    "parse_seasons_json",
    "parse_seasons_xml",
]
