"""
Entry list sync - who is playing a tournament.

Steps:
1. /competitions/{id}/seasons.json -> the season for the requested year
2. Ensure a local tournament row exists for that season
3. /seasons/{season}/competitors.json -> entry list
4. For each competitor: find or create the player, then upsert the
   player_schedules row for (player, tournament)

Players created here have no ranking unless the entry list carries one, and
an existing player's ranking is only filled in when it was empty; the
rankings sync stays the authority for rankings and points.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from fantasy_tennis.db.models import Player, PlayerSchedule, Tournament
from fantasy_tennis.errors import InputValidationError
from fantasy_tennis.players.matching import PlayerIndex
from fantasy_tennis.pricing import price_for_optional_rank
from fantasy_tennis.services.base import SyncStats
from fantasy_tennis.services.changes import INSERTED, UPDATED, upsert
from fantasy_tennis.services.tournament_sync import validate_year
from fantasy_tennis.sportradar.client import SportradarClient
from fantasy_tennis.sportradar.parsers import map_category, parse_entry_list, parse_seasons_json
from fantasy_tennis.sportradar.parsers.values import clean_str
from fantasy_tennis.sportradar.records import EntryListEntry, SeasonRef
from fantasy_tennis.statuses import derive_tournament_status

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 20


def select_season(seasons: list[SeasonRef], year: int, competition_id: str) -> SeasonRef:
    if not seasons:
        raise InputValidationError(f"No seasons found for competition {competition_id}")
    for season in seasons:
        if season.year == year:
            return season
    available = ", ".join(sorted({str(s.year) for s in seasons if s.year is not None}))
    raise InputValidationError(f"No season found for year {year}. Available years: {available}")


def _ensure_tournament(
    session: Session,
    season: SeasonRef,
    competition_id: str,
    competition: dict[str, Any],
    today: date,
) -> tuple[Tournament, bool]:
    tournament = session.execute(
        select(Tournament).where(Tournament.sportradar_season_id == season.id)
    ).scalar_one_or_none()
    if tournament is not None:
        return tournament, False

    category = competition.get("category") if isinstance(competition.get("category"), dict) else {}
    tournament = Tournament(
        sportradar_season_id=season.id,
        sportradar_competition_id=competition_id,
        parent_competition_id=clean_str(competition.get("parent_id")),
        name=clean_str(competition.get("name")) or season.name or competition_id,
        category=map_category(
            clean_str(category.get("name")),
            clean_str(competition.get("level")),
            clean_str(competition.get("name")),
        ),
        gender=clean_str(competition.get("gender")),
        start_date=season.start_date,
        end_date=season.end_date,
        year=season.year,
        status=derive_tournament_status(season.start_date, season.end_date, today),
    )
    session.add(tournament)
    session.flush()
    logger.info("Created tournament %s for season %s", tournament.name, season.id)
    return tournament, True


def _player_values(entry: EntryListEntry, existing: Optional[Player]) -> dict[str, Any]:
    if existing is None:
        return {
            "sportradar_competitor_id": entry.competitor_id,
            "name": entry.name,
            "country": entry.country,
            "ranking": entry.ranking,
            "live_ranking": entry.ranking,
            "points": 0,
            "price": price_for_optional_rank(entry.ranking),
        }

    values: dict[str, Any] = {}
    if not existing.sportradar_competitor_id:
        values["sportradar_competitor_id"] = entry.competitor_id
    if existing.ranking is None and entry.ranking is not None:
        values["ranking"] = entry.ranking
        values["live_ranking"] = entry.ranking
        values["price"] = price_for_optional_rank(entry.ranking)
    return values


async def sync_entry_list(
    session: Session,
    client: SportradarClient,
    *,
    tournament_id: Optional[str],
    year: Optional[int] = None,
    today: Optional[date] = None,
) -> dict[str, Any]:
    """
    Sync a tournament's entry list into player_schedules.

    Args:
        session: Database session (the caller commits)
        client: Sportradar client
        tournament_id: Provider competition id (e.g. 'sr:competition:2555')
        year: Season year (defaults to the current year)

    Raises:
        InputValidationError: Missing tournament_id, bad year, or no season
                              for that year
    """
    if not tournament_id:
        raise InputValidationError("tournament_id is required")
    today = today or date.today()
    year = validate_year(year if year is not None else today.year)

    seasons_payload = await client.competition_seasons(tournament_id)
    season = select_season(parse_seasons_json(seasons_payload), year, tournament_id)
    competition = seasons_payload.get("competition") if isinstance(seasons_payload, dict) else None
    competition = competition if isinstance(competition, dict) else {}

    entries = parse_entry_list(await client.season_competitors(season.id))
    logger.info("Season %s (%s): %d competitors", season.id, season.name, len(entries))

    tournament, tournament_created = _ensure_tournament(session, season, tournament_id, competition, today)

    stats = SyncStats()
    index = PlayerIndex.load(session)
    players_created = 0
    players_updated = 0
    sample: list[dict[str, Any]] = []

    for entry in entries:
        try:
            with session.begin_nested():
                match = index.find(
                    competitor_id=entry.competitor_id,
                    name=entry.name,
                    country=entry.country,
                )
                existing_player = match.player if match else None
                player_outcome, player = upsert(
                    session, Player, existing_player, _player_values(entry, existing_player)
                )
                session.flush()

                existing_schedule = session.execute(
                    select(PlayerSchedule).where(
                        PlayerSchedule.player_id == player.id,
                        PlayerSchedule.tournament_id == tournament.id,
                    )
                ).scalar_one_or_none()
                schedule_outcome, _ = upsert(
                    session,
                    PlayerSchedule,
                    existing_schedule,
                    {
                        "player_id": player.id,
                        "tournament_id": tournament.id,
                        "status": entry.status,
                        "entry_type": entry.entry_type,
                        "seed_number": entry.seed,
                    },
                )
                session.flush()
        except Exception as e:
            error_msg = f"{entry.name} ({entry.competitor_id}): {e}"
            stats.errors.append(error_msg)
            logger.error("Error processing entry: %s", error_msg)
            continue

        if player_outcome == INSERTED:
            players_created += 1
            index.add(player)
        elif player_outcome == UPDATED:
            players_updated += 1
            index.attach_competitor_id(player, entry.competitor_id)
        stats.record(schedule_outcome)

        if len(sample) < SAMPLE_SIZE:
            sample.append({
                "player_id": player.id,
                "competitor_id": entry.competitor_id,
                "name": entry.name,
                "country": entry.country,
                "seed": entry.seed,
                "entry_type": entry.entry_type,
            })

    return {
        "success": True,
        "tournament": {
            "id": tournament.id,
            "sportradar_competition_id": tournament_id,
            "name": tournament.name,
            "created": tournament_created,
        },
        "season": {"id": season.id, "name": season.name, "year": season.year},
        "requested_year": year,
        "players_found": len(entries),
        "players_created": players_created,
        "players_updated": players_updated,
        **stats.to_summary(),
        "players": sample,
        "message": (
            f"Fetched {len(entries)} players from the entry list for "
            f"{tournament.name} {year}"
        ),
    }
