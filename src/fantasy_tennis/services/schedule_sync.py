"""Daily schedule sync - upserts every match listed for one day."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Union

from sqlalchemy.orm import Session

from fantasy_tennis.errors import InputValidationError
from fantasy_tennis.services.base import SyncStats
from fantasy_tennis.services.match_ingestion import TournamentResolver, upsert_matches
from fantasy_tennis.sportradar.client import SportradarClient
from fantasy_tennis.sportradar.parsers import parse_daily_schedule

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 10


def parse_schedule_date(value: Union[str, date, None]) -> date:
    if value is None:
        return date.today()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise InputValidationError("date must be formatted as YYYY-MM-DD") from None


async def sync_daily_schedule(
    session: Session,
    client: SportradarClient,
    *,
    day: Union[str, date, None] = None,
) -> dict[str, Any]:
    """
    Fetch /schedules/{day}/summaries.json and upsert its matches.

    Args:
        session: Database session (the caller commits)
        client: Sportradar client
        day: ISO date (defaults to today)
    """
    target = parse_schedule_date(day)
    payload = await client.daily_summaries(target.isoformat())
    matches = parse_daily_schedule(payload)
    logger.info("Schedule %s: %d matches", target.isoformat(), len(matches))

    stats = SyncStats()
    upsert_matches(session, matches, stats, TournamentResolver(session))

    sample: list[dict[str, Optional[str]]] = [
        {
            "id": m.id,
            "round": m.round,
            "player1_name": m.player1_name,
            "player2_name": m.player2_name,
            "status": m.status,
            "scheduled_at": m.scheduled_at.isoformat() if m.scheduled_at else None,
        }
        for m in matches[:SAMPLE_SIZE]
    ]

    return {
        "success": True,
        "date": target.isoformat(),
        "total_matches": len(matches),
        **stats.to_summary(),
        "matches": sample,
        "message": f"Fetched {len(matches)} matches scheduled on {target.isoformat()}",
    }
