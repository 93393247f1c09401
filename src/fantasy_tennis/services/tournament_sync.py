"""
Tournament sync - resumable walk over Sportradar competitions.

Each invocation:
1. Fetches /competitions.json and keeps ATP / Challenger men's singles candidates
2. Picks a slice of at most ``batch_size`` competitions, starting right after
   the resume cursor (or at ``offset`` for offset-style paging)
3. For each competition, sequentially: seasons.xml -> seasons of ``year`` ->
   info.xml per season -> eligibility filter -> diff -> upsert
4. Saves the last processed competition id as the cursor when more remain,
   and clears it once the list is exhausted

The cursor names the last fully processed competition, so resuming starts
with the competition after it. Calling repeatedly with the returned
``resumeFrom`` visits every competition exactly once.

A 429 on the competitions list aborts the invocation (RateLimitedError,
surfaced as HTTP 429). Failures on a single competition or season are
recorded and the batch moves on.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from fantasy_tennis.config import settings
from fantasy_tennis.db.models import Tournament
from fantasy_tennis.errors import IngestionError, InputValidationError
from fantasy_tennis.services.base import SyncStats
from fantasy_tennis.services.changes import upsert
from fantasy_tennis.sportradar.client import SportradarClient
from fantasy_tennis.sportradar.parsers import (
    is_candidate_competition,
    is_eligible_season,
    map_category,
    map_surface,
    parse_competitions,
    parse_season_info_xml,
    parse_seasons_xml,
)
from fantasy_tennis.sportradar.records import CompetitionRef, SeasonInfo, SeasonRef
from fantasy_tennis.statuses import derive_tournament_status
from fantasy_tennis.tasks.checkpoints import SyncCursorStore

logger = logging.getLogger(__name__)


def validate_year(year: Any) -> int:
    if isinstance(year, bool) or not isinstance(year, int) or not 1900 <= year <= 2100:
        raise InputValidationError("Valid year is required")
    return year


def _validate_positive(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InputValidationError(f"{name} must be a positive integer")
    return value


def tournament_values(
    info: SeasonInfo,
    season: SeasonRef,
    competition: CompetitionRef,
    year: int,
    today: date,
) -> dict[str, Any]:
    """Column values for a tournament row built from season info."""
    start = info.start_date or season.start_date
    end = info.end_date or season.end_date
    return {
        "sportradar_season_id": season.id,
        "sportradar_competition_id": info.competition_id or competition.id,
        "parent_competition_id": info.parent_competition_id or competition.parent_id,
        "name": info.name or season.name,
        "category": map_category(
            info.category_name,
            info.level or competition.level,
            info.competition_name or competition.name,
        ),
        "surface": map_surface(info.surface),
        "gender": info.gender,
        "location": info.location or "TBD",
        "venue": info.venue,
        "start_date": start,
        "end_date": end,
        "year": year,
        "prize_money": info.prize_money,
        "prize_currency": info.prize_currency,
        "number_of_competitors": info.number_of_competitors,
        "number_of_qualified_competitors": info.number_of_qualified_competitors,
        "number_of_scheduled_matches": info.number_of_scheduled_matches,
        "status": derive_tournament_status(start, end, today),
    }


def _resume_index(competitions: list[CompetitionRef], cursor_id: Optional[str]) -> int:
    if not cursor_id:
        return 0
    for i, competition in enumerate(competitions):
        if competition.id == cursor_id:
            return i + 1
    logger.warning("Resume cursor %s not found in competitions list; starting over", cursor_id)
    return 0


async def _sync_season(
    session: Session,
    client: SportradarClient,
    competition: CompetitionRef,
    season: SeasonRef,
    year: int,
    today: date,
    stats: SyncStats,
) -> None:
    try:
        info_xml = await client.season_info_xml(season.id)
    except IngestionError as e:
        stats.errors.append(f"Failed to fetch season info for {season.id}: {e}")
        return

    info = parse_season_info_xml(info_xml)
    if info is None:
        stats.errors.append(f"Failed to parse season info for {season.id}")
        return

    if not is_eligible_season(info):
        logger.debug(
            "Filtered out %s (gender=%s, type=%s, category=%s)",
            info.name, info.gender, info.type, info.category_name,
        )
        stats.filtered += 1
        return

    try:
        with session.begin_nested():
            existing = session.execute(
                select(Tournament).where(Tournament.sportradar_season_id == season.id)
            ).scalar_one_or_none()
            outcome, _ = upsert(
                session, Tournament, existing, tournament_values(info, season, competition, year, today)
            )
            session.flush()
    except Exception as e:
        error_msg = f"Error upserting tournament {info.name} ({season.id}): {e}"
        stats.errors.append(error_msg)
        logger.error(error_msg)
        return

    stats.record(outcome)
    logger.info("%s tournament: %s (%s)", outcome.capitalize(), info.name, info.category_name)


async def _sync_competition(
    session: Session,
    client: SportradarClient,
    competition: CompetitionRef,
    year: int,
    today: date,
    stats: SyncStats,
) -> None:
    try:
        seasons_xml = await client.competition_seasons_xml(competition.id)
    except IngestionError as e:
        stats.errors.append(f"Failed to fetch seasons for {competition.id}: {e}")
        return

    year_seasons = [s for s in parse_seasons_xml(seasons_xml) if s.year == year]
    if not year_seasons:
        return

    logger.debug("Competition %s: %d seasons for %d", competition.id, len(year_seasons), year)
    for season in year_seasons:
        await _sync_season(session, client, competition, season, year, today, stats)


async def sync_tournaments(
    session: Session,
    client: SportradarClient,
    *,
    year: Optional[int] = None,
    batch_size: Optional[int] = None,
    resume_from: Optional[str] = None,
    offset: Optional[int] = None,
    max_batches: Optional[int] = None,
    use_stored_cursor: bool = False,
    today: Optional[date] = None,
) -> dict[str, Any]:
    """
    Sync one slice of tournaments for ``year``.

    Args:
        session: Database session (the caller commits)
        client: Sportradar client
        year: Season year (defaults to the current year)
        batch_size: Competitions per invocation (defaults to settings)
        resume_from: Id of the last competition processed by a previous call
        offset: Offset-style paging instead of the cursor
        max_batches: With ``offset``, process this many batches in one call
        use_stored_cursor: Resume from the persisted cursor when
                           ``resume_from`` is not given
        today: Reference date for tournament status

    Raises:
        InputValidationError: Bad year / batch_size / offset
        RateLimitedError: The competitions list stayed rate limited
        UpstreamError: The competitions list could not be fetched
    """
    today = today or date.today()
    year = validate_year(year if year is not None else today.year)
    batch_size = _validate_positive(
        "batch_size", batch_size if batch_size is not None else settings.tournament_sync_batch_size
    )
    if offset is not None and (isinstance(offset, bool) or not isinstance(offset, int) or offset < 0):
        raise InputValidationError("offset must be a non-negative integer")
    if max_batches is not None:
        max_batches = _validate_positive("max_batches", max_batches)

    store = SyncCursorStore(session)

    payload = await client.competitions()
    candidates = [c for c in parse_competitions(payload) if is_candidate_competition(c)]

    if offset is not None:
        start = offset
        window = batch_size * (max_batches or 1)
    else:
        cursor_id = resume_from
        if cursor_id is None and use_stored_cursor:
            cursor = store.read()
            cursor_id = cursor.last_id if cursor else None
        start = _resume_index(candidates, cursor_id)
        window = batch_size

    batch = candidates[start:start + window]
    remaining = max(0, len(candidates) - start - len(batch))
    has_more = remaining > 0

    logger.info(
        "Tournament sync %d: processing %d competitions from index %d (%d remaining)",
        year, len(batch), start, remaining,
    )

    stats = SyncStats()
    for competition in batch:
        try:
            await _sync_competition(session, client, competition, year, today, stats)
        except Exception as e:
            error_msg = f"Error processing competition {competition.id}: {e}"
            stats.errors.append(error_msg)
            logger.error(error_msg)

    last_id = batch[-1].id if batch else None
    if offset is None:
        if has_more and last_id:
            store.write(last_id)
        else:
            store.clear()

    next_offset = start + len(batch) if has_more else None

    logger.info(
        "Tournament sync %d: %d inserted, %d updated, %d skipped, %d filtered, %d errors",
        year, stats.inserted, stats.updated, stats.skipped, stats.filtered, len(stats.errors),
    )

    return {
        "success": True,
        "year": year,
        **stats.to_summary(),
        "processed": len(batch),
        "total_competitions": len(candidates),
        "resumeFrom": last_id if has_more else None,
        "hasMore": has_more,
        "remaining": remaining,
        "next_offset": next_offset,
        "message": f"Processed {len(batch)} competitions. {stats.synced} tournaments synced.",
    }
