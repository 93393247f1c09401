"""
Match parsers for tournament draws and daily schedules.

Draw entries and daily summaries describe the same thing (a sport event
between up to two competitors) in slightly different envelopes:

- draw.json: ``{"draw": {"matches": [{id, round, competitors, scheduled, status, ...}]}}``
- summaries.json: ``{"summaries": [{"sport_event": {...}, "sport_event_status": {...}}]}``

Both become CanonicalMatch records. Entries without an id are dropped;
entries with a missing or null second competitor are kept with null
player2 fields (partially seeded draws).
"""

from __future__ import annotations

from typing import Any, Optional

from fantasy_tennis.sportradar.parsers.mappings import map_surface
from fantasy_tennis.sportradar.parsers.values import clean_str, to_datetime, to_int
from fantasy_tennis.sportradar.records import CanonicalMatch, TournamentContext
from fantasy_tennis.statuses import map_match_status

DEFAULT_BEST_OF = 3


def _round_label(raw: Any) -> Optional[str]:
    """Round may be a plain string or an object like {"name": "round_of_32"}."""
    if isinstance(raw, dict):
        return clean_str(raw.get("name")) or clean_str(raw.get("type"))
    return clean_str(raw)


def _competitor(competitors: Any, index: int) -> tuple[Optional[str], Optional[str]]:
    if not isinstance(competitors, list) or len(competitors) <= index:
        return None, None
    entry = competitors[index]
    if not isinstance(entry, dict):
        return None, None
    return clean_str(entry.get("id")), clean_str(entry.get("name"))


def _score_from_periods(periods: Any) -> Optional[str]:
    """Build "6-4 7-6" from period_scores (home score first)."""
    if not isinstance(periods, list) or not periods:
        return None
    sets = []
    for period in sorted(
        (p for p in periods if isinstance(p, dict)),
        key=lambda p: to_int(p.get("number")) or 0,
    ):
        home = to_int(period.get("home_score"))
        away = to_int(period.get("away_score"))
        if home is None or away is None:
            continue
        sets.append(f"{home}-{away}")
    return " ".join(sets) or None


def _score(block: dict) -> Optional[str]:
    raw = block.get("score")
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return _score_from_periods(block.get("period_scores"))


def parse_draw(payload: Any, tournament_context: TournamentContext) -> list[CanonicalMatch]:
    """
    Parse a tournament draw.

    Args:
        payload: Decoded draw.json
        tournament_context: Parent tournament (id and surface are inherited)

    Returns:
        CanonicalMatch records in draw order
    """
    if not isinstance(payload, dict):
        return []
    draw = payload.get("draw")
    entries = draw.get("matches") if isinstance(draw, dict) else payload.get("matches")

    surface = map_surface(tournament_context.surface) if tournament_context.surface else None
    matches: list[CanonicalMatch] = []

    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        match_id = clean_str(entry.get("id"))
        if not match_id:
            continue

        competitors = entry.get("competitors")
        player1_id, player1_name = _competitor(competitors, 0)
        player2_id, player2_name = _competitor(competitors, 1)

        matches.append(
            CanonicalMatch(
                id=match_id,
                sportradar_tournament_id=tournament_context.id,
                round=_round_label(entry.get("round")) or "Unknown",
                player1_id=player1_id,
                player1_name=player1_name,
                player2_id=player2_id,
                player2_name=player2_name,
                scheduled_at=to_datetime(entry.get("scheduled") or entry.get("start_time")),
                status=map_match_status(entry.get("status")),
                winner_id=clean_str(entry.get("winner_id")),
                score=_score(entry),
                surface=surface,
                best_of=to_int(entry.get("best_of")) or DEFAULT_BEST_OF,
                season_id=tournament_context.id,
            )
        )

    return matches


def parse_daily_schedule(payload: Any) -> list[CanonicalMatch]:
    """Parse /schedules/{date}/summaries.json."""
    if not isinstance(payload, dict):
        return []

    matches: list[CanonicalMatch] = []
    for summary in payload.get("summaries") or []:
        if not isinstance(summary, dict):
            continue
        event = summary.get("sport_event")
        if not isinstance(event, dict):
            continue
        match_id = clean_str(event.get("id"))
        if not match_id:
            continue

        context = event.get("sport_event_context") or {}
        season = context.get("season") or {}
        competition = context.get("competition") or {}
        tournament = context.get("tournament") or {}
        status_block = summary.get("sport_event_status") or {}

        season_id = clean_str(season.get("id"))
        competition_id = clean_str(competition.get("id"))
        raw_surface = tournament.get("surface") or (event.get("venue") or {}).get("surface")

        competitors = event.get("competitors")
        player1_id, player1_name = _competitor(competitors, 0)
        player2_id, player2_name = _competitor(competitors, 1)

        matches.append(
            CanonicalMatch(
                id=match_id,
                sportradar_tournament_id=season_id or clean_str(tournament.get("id")) or competition_id,
                round=_round_label(context.get("round")),
                player1_id=player1_id,
                player1_name=player1_name,
                player2_id=player2_id,
                player2_name=player2_name,
                scheduled_at=to_datetime(event.get("start_time") or event.get("scheduled")),
                status=map_match_status(status_block.get("status")),
                winner_id=clean_str(status_block.get("winner_id")),
                score=_score(status_block),
                surface=map_surface(raw_surface) if raw_surface else None,
                best_of=to_int(event.get("best_of")) or DEFAULT_BEST_OF,
                season_id=season_id,
                competition_id=competition_id,
            )
        )

    return matches
