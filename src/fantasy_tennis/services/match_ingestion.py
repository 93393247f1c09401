"""
Shared match upsert path for draws and daily schedules.

Matches are keyed by the provider match id. Each one is linked to a local
tournament row when one exists for its season (or, failing that, its
competition); otherwise only the provider id is kept.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from fantasy_tennis.db.models import Match, Tournament
from fantasy_tennis.services.base import SyncStats
from fantasy_tennis.services.changes import upsert
from fantasy_tennis.sportradar.records import CanonicalMatch

logger = logging.getLogger(__name__)


class TournamentResolver:
    """Memoized provider id -> local tournament lookup for one run."""

    def __init__(self, session: Session):
        self.session = session
        self._cache: dict[tuple[Optional[str], Optional[str]], Optional[Tournament]] = {}

    def resolve(self, season_id: Optional[str], competition_id: Optional[str]) -> Optional[Tournament]:
        key = (season_id, competition_id)
        if key not in self._cache:
            self._cache[key] = self._lookup(season_id, competition_id)
        return self._cache[key]

    def _lookup(self, season_id: Optional[str], competition_id: Optional[str]) -> Optional[Tournament]:
        for ext_id in (season_id, competition_id):
            if not ext_id:
                continue
            tournament = self.session.execute(
                select(Tournament).where(Tournament.sportradar_season_id == ext_id)
            ).scalar_one_or_none()
            if tournament is not None:
                return tournament
            # Latest season of the competition
            tournament = self.session.execute(
                select(Tournament)
                .where(Tournament.sportradar_competition_id == ext_id)
                .order_by(Tournament.year.desc(), Tournament.start_date.desc())
                .limit(1)
            ).scalar_one_or_none()
            if tournament is not None:
                return tournament
        return None


def match_values(match: CanonicalMatch, tournament: Optional[Tournament]) -> dict[str, Any]:
    return {
        "id": match.id,
        "tournament_id": tournament.id if tournament is not None else None,
        "sportradar_tournament_id": match.sportradar_tournament_id,
        "round": match.round,
        "player1_id": match.player1_id,
        "player1_name": match.player1_name,
        "player2_id": match.player2_id,
        "player2_name": match.player2_name,
        "scheduled_at": match.scheduled_at,
        "status": match.status,
        "winner_id": match.winner_id,
        "score": match.score,
        "surface": match.surface or (tournament.surface if tournament is not None else None),
        "best_of": match.best_of,
    }


def upsert_matches(
    session: Session,
    matches: list[CanonicalMatch],
    stats: SyncStats,
    resolver: TournamentResolver,
) -> None:
    """Upsert each match in its own savepoint, recording failures in ``stats``."""
    for match in matches:
        try:
            with session.begin_nested():
                tournament = resolver.resolve(
                    match.season_id or match.sportradar_tournament_id,
                    match.competition_id,
                )
                existing = session.get(Match, match.id)
                outcome, _ = upsert(session, Match, existing, match_values(match, tournament))
                session.flush()
        except Exception as e:
            error_msg = f"Error upserting match {match.id}: {e}"
            stats.errors.append(error_msg)
            logger.error(error_msg)
            continue
        stats.record(outcome)
