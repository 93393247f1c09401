"""
Draw sync - fetches tournament draws and upserts their matches.

Either one tournament (by provider id) or the next ``limit`` upcoming
tournaments from /tournaments.json. For each: info.json for the parent
context (surface, dates), then draw.json for the matches.

Partially seeded matches (second competitor null) are stored with null
player2 fields; entries without an id are dropped by the parser.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from sqlalchemy.orm import Session

from fantasy_tennis.config import settings
from fantasy_tennis.errors import IngestionError, InputValidationError
from fantasy_tennis.services.base import SyncStats
from fantasy_tennis.services.match_ingestion import TournamentResolver, upsert_matches
from fantasy_tennis.sportradar.client import SportradarClient
from fantasy_tennis.sportradar.parsers import parse_draw
from fantasy_tennis.sportradar.parsers.values import clean_str, to_date
from fantasy_tennis.sportradar.records import TournamentContext

logger = logging.getLogger(__name__)

UPCOMING_STATUSES = {None, "scheduled", "not_started"}


def upcoming_tournament_ids(payload: Any, today: date, limit: int) -> list[str]:
    """Ids of tournaments starting today or later, soonest first."""
    entries = payload.get("tournaments") if isinstance(payload, dict) else None
    upcoming: list[tuple[date, str]] = []
    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        tournament_id = clean_str(entry.get("id"))
        start = to_date(entry.get("start_date") or entry.get("scheduled"))
        status = clean_str(entry.get("status"))
        if not tournament_id or start is None or start < today:
            continue
        if (status.lower() if status else None) not in UPCOMING_STATUSES:
            continue
        upcoming.append((start, tournament_id))
    upcoming.sort()
    return [tournament_id for _, tournament_id in upcoming[:limit]]


def tournament_context(tournament_id: str, info_payload: Any) -> TournamentContext:
    info = info_payload.get("tournament") if isinstance(info_payload, dict) else None
    info = info if isinstance(info, dict) else {}
    return TournamentContext(
        id=clean_str(info.get("id")) or tournament_id,
        name=clean_str(info.get("name")),
        surface=clean_str(info.get("surface")),
        start_date=to_date(info.get("start_date")),
        end_date=to_date(info.get("end_date")),
    )


async def sync_draws(
    session: Session,
    client: SportradarClient,
    *,
    tournament_id: Optional[str] = None,
    limit: Optional[int] = None,
    today: Optional[date] = None,
) -> dict[str, Any]:
    """
    Fetch and upsert tournament draws.

    Args:
        session: Database session (the caller commits)
        client: Sportradar client
        tournament_id: Provider tournament id; when omitted, upcoming
                       tournaments are fetched instead
        limit: Max upcoming tournaments (defaults to settings.draw_sync_limit)
        today: Reference date for "upcoming"
    """
    today = today or date.today()
    limit = limit if limit is not None else settings.draw_sync_limit
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise InputValidationError("limit must be a positive integer")

    if tournament_id:
        targets = [tournament_id]
    else:
        targets = upcoming_tournament_ids(await client.tournaments(), today, limit)
        logger.info("Found %d upcoming tournaments", len(targets))

    stats = SyncStats()
    resolver = TournamentResolver(session)
    processed: list[dict[str, Any]] = []
    total_matches = 0

    for target in targets:
        try:
            context = tournament_context(target, await client.tournament_info(target))
            draw_payload = await client.tournament_draw(target)
        except IngestionError as e:
            stats.errors.append(f"Failed to fetch draw for {target}: {e}")
            logger.error("Failed to fetch draw for %s: %s", target, e)
            continue

        matches = parse_draw(draw_payload, context)
        upsert_matches(session, matches, stats, resolver)
        total_matches += len(matches)
        processed.append({
            "id": context.id,
            "name": context.name,
            "matches_count": len(matches),
            "surface": context.surface,
            "start_date": context.start_date.isoformat() if context.start_date else None,
            "end_date": context.end_date.isoformat() if context.end_date else None,
        })
        logger.info("Draw for %s: %d matches", context.name or context.id, len(matches))

    return {
        "success": True,
        "tournaments_processed": len(processed),
        "total_matches": total_matches,
        **stats.to_summary(),
        "tournaments": processed,
        "message": f"Fetched draws for {len(processed)} tournaments",
    }
