"""
Rankings sync - refreshes the players table from the current ATP rankings.

Sources, in order:
1. Sportradar /rankings.json (competitor ids, authoritative)
2. ATP website rankings table (only when Sportradar returns nothing and a
   fallback source is configured)

For every ranked line:
- reject missing or non-positive ranks (counted as filtered)
- find the existing row (competitor id, then name + country, then for the
  ATP website source last name + country within 5 ranking places)
- recompute the price from the ranking, set live_ranking = ranking
- skip the write when no column changed

Players that were ranked before but are absent from a full refresh are
demoted to the "unranked" ranking with zero points.

Usage:
    async with SportradarClient.from_settings() as client:
        with get_session() as session:
            summary = await sync_rankings(session, client)
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from fantasy_tennis.config import settings
from fantasy_tennis.db.models import Player
from fantasy_tennis.errors import RateLimitedError, UpstreamError
from fantasy_tennis.players.matching import PlayerIndex
from fantasy_tennis.players.names import normalize_name
from fantasy_tennis.pricing import calculate_price, validate_rank
from fantasy_tennis.services.base import SyncStats
from fantasy_tennis.services.changes import INSERTED, upsert
from fantasy_tennis.sportradar.client import SportradarClient
from fantasy_tennis.sportradar.parsers import parse_rankings
from fantasy_tennis.sportradar.records import RankedPlayer

logger = logging.getLogger(__name__)

SOURCE_SPORTRADAR = "sportradar"
SOURCE_ATP_SITE = "atp_site"
SAMPLE_SIZE = 10


class RankingsSource(Protocol):
    async def fetch_all(self) -> list[RankedPlayer]: ...


def dedupe_rankings(players: list[RankedPlayer]) -> list[RankedPlayer]:
    """Drop repeated players, keeping the first (best-ranked) line for each."""
    seen: set[tuple[str, str]] = set()
    unique = []
    for player in players:
        if player.competitor_id:
            key = ("id", player.competitor_id)
        else:
            key = ("name", f"{normalize_name(player.name)}|{player.country}")
        if key in seen:
            continue
        seen.add(key)
        unique.append(player)
    return unique


def _player_values(record: RankedPlayer, rank: int, existing: Optional[Player], source: str) -> dict[str, Any]:
    values: dict[str, Any] = {
        "ranking": rank,
        "live_ranking": rank,
        "points": record.points,
        "price": calculate_price(rank),
    }

    if existing is None:
        values["name"] = record.name
        values["country"] = record.country
        values["sportradar_competitor_id"] = record.competitor_id
        return values

    # Sportradar names win; website names only fill rows created from the website
    if source == SOURCE_SPORTRADAR or not existing.sportradar_competitor_id:
        values["name"] = record.name
    if record.country != "UNK":
        values["country"] = record.country
    if record.competitor_id and not existing.sportradar_competitor_id:
        values["sportradar_competitor_id"] = record.competitor_id
    return values


async def _load_rankings(
    client: SportradarClient,
    group: str,
    fallback_source: Optional[RankingsSource],
) -> tuple[str, list[RankedPlayer]]:
    try:
        players = parse_rankings(await client.rankings(), group=group)
    except (RateLimitedError, UpstreamError) as exc:
        if fallback_source is None:
            raise
        logger.warning("Sportradar rankings unavailable (%s); trying ATP website", exc)
        players = []

    if players:
        logger.info("Fetched %d %s rankings from Sportradar", len(players), group)
        return SOURCE_SPORTRADAR, players

    if fallback_source is not None:
        logger.info("No Sportradar rankings for %s, scraping the ATP website", group)
        players = await fallback_source.fetch_all()
        if players:
            logger.info("Scraped %d rankings from the ATP website", len(players))
            return SOURCE_ATP_SITE, players

    raise UpstreamError("No rankings data returned by any source")


def _demote_missing(session: Session, seen_ids: set[int], unranked: int) -> int:
    """Move ranked players absent from this refresh to the unranked slot."""
    demoted = 0
    price = calculate_price(unranked)
    ranked = session.execute(select(Player).where(Player.ranking.is_not(None))).scalars()
    for player in ranked:
        if player.id in seen_ids:
            continue
        if player.ranking == unranked and player.live_ranking == unranked and player.points == 0:
            continue
        player.ranking = unranked
        player.live_ranking = unranked
        player.points = 0
        player.price = price
        demoted += 1
    session.flush()
    return demoted


async def sync_rankings(
    session: Session,
    client: SportradarClient,
    *,
    group: Optional[str] = None,
    fallback_source: Optional[RankingsSource] = None,
    demote_missing: Optional[bool] = None,
) -> dict[str, Any]:
    """
    Refresh player rankings, points and prices.

    Args:
        session: Database session (the caller commits)
        client: Sportradar client
        group: Ranking group to import (defaults to settings.rankings_group)
        fallback_source: ATP website source used when Sportradar is empty
        demote_missing: Demote ranked players missing from the refresh
                        (defaults to settings.rankings_demote_missing)

    Returns:
        JSON-ready summary with counts and a sample of written players

    Raises:
        UpstreamError / RateLimitedError: No source produced any rankings
    """
    group = group or settings.rankings_group
    if demote_missing is None:
        demote_missing = settings.rankings_demote_missing

    source, records = await _load_rankings(client, group, fallback_source)
    records = dedupe_rankings(records)

    stats = SyncStats()
    index = PlayerIndex.load(session)
    seen_ids: set[int] = set()
    sample: list[dict[str, Any]] = []

    for record in records:
        try:
            rank = validate_rank(record.ranking)
        except ValueError as e:
            stats.filtered += 1
            logger.debug("Skipping %s: %s", record.name, e)
            continue

        match = index.find(
            competitor_id=record.competitor_id,
            name=record.name,
            country=record.country,
            ranking=rank,
            allow_nearby_rank=source == SOURCE_ATP_SITE,
        )
        existing = match.player if match else None
        # A row that fails to update was still in the feed and must not be demoted
        if existing is not None and existing.id is not None:
            seen_ids.add(existing.id)

        try:
            with session.begin_nested():
                outcome, player = upsert(
                    session, Player, existing, _player_values(record, rank, existing, source)
                )
                session.flush()
        except Exception as e:
            error_msg = f"{record.name} (#{record.ranking}): {e}"
            stats.errors.append(error_msg)
            logger.error("Error upserting player: %s", error_msg)
            continue

        stats.record(outcome)
        if outcome == INSERTED:
            index.add(player)
        elif record.competitor_id and player.sportradar_competitor_id == record.competitor_id:
            index.attach_competitor_id(player, record.competitor_id)
        seen_ids.add(player.id)

        if len(sample) < SAMPLE_SIZE:
            sample.append({
                "ranking": player.ranking,
                "name": player.name,
                "country": player.country,
                "points": player.points,
                "price": player.price,
            })

    demoted = 0
    if demote_missing and seen_ids:
        demoted = _demote_missing(session, seen_ids, settings.unranked_default_ranking)

    logger.info(
        "Rankings sync (%s): %d inserted, %d updated, %d skipped, %d filtered, %d demoted, %d errors",
        source,
        stats.inserted,
        stats.updated,
        stats.skipped,
        stats.filtered,
        demoted,
        len(stats.errors),
    )

    return {
        "success": True,
        "source": source,
        "group": group,
        "total": len(records),
        **stats.to_summary(),
        "demoted": demoted,
        "sample": sample,
        "message": f"Synced {stats.synced} of {len(records)} ranked players from {source}",
    }
