"""
Lookup of existing player rows for upserts.

The matching strategy prioritizes reliability:
1. Exact Sportradar competitor id - 100% reliable
2. Normalized name + country - used for rows without a competitor id
   (seeded from the ATP website) or records without one
3. Last name + country within a few ranking places, confirmed by a fuzzy
   name comparison - only for the ATP website source, whose names are
   sometimes abbreviated or transliterated differently

A row that already carries a different competitor id is never matched by
name: two players can share a name and a country.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from fantasy_tennis.db.models import Player
from fantasy_tennis.players.names import (
    compare_names,
    extract_last_name,
    normalize_country,
    normalize_name,
)

# Max ranking distance for the last-name fallback
NEARBY_RANK_WINDOW = 5
# Minimum compare_names score for the last-name fallback
NEARBY_NAME_THRESHOLD = 0.80


@dataclass
class PlayerMatch:
    """Result of a lookup: the row and how it was found."""
    player: Player
    match_type: str  # 'competitor_id', 'name_country', 'nearby_rank'

    def __repr__(self) -> str:
        return f"<PlayerMatch(id={self.player.id}, type='{self.match_type}')>"


class PlayerIndex:
    """
    In-memory index over the players table for one sync run.

    Loading every row once keeps a full rankings refresh at a single
    SELECT instead of one query per incoming record. Rows inserted during
    the run must be registered with ``add`` so later records see them.

    Usage:
        index = PlayerIndex.load(session)
        match = index.find(competitor_id="sr:competitor:1", name="Sinner, Jannik", country="ITA")
    """

    def __init__(self, players: Iterable[Player] = ()):
        self._by_competitor: dict[str, Player] = {}
        self._by_name: dict[tuple[str, str], list[Player]] = {}
        self._by_last_name: dict[tuple[str, str], list[Player]] = {}
        for player in players:
            self.add(player)

    @classmethod
    def load(cls, session: Session) -> "PlayerIndex":
        return cls(session.execute(select(Player)).scalars().all())

    def __len__(self) -> int:
        return len({id(p) for rows in self._by_name.values() for p in rows})

    def add(self, player: Player) -> None:
        if player.sportradar_competitor_id:
            self._by_competitor[player.sportradar_competitor_id] = player
        country = normalize_country(player.country)
        name_key = (normalize_name(player.name), country)
        last_key = (extract_last_name(player.name), country)
        for bucket, key in ((self._by_name, name_key), (self._by_last_name, last_key)):
            rows = bucket.setdefault(key, [])
            if player not in rows:
                rows.append(player)

    def attach_competitor_id(self, player: Player, competitor_id: str) -> None:
        """Record that a name-matched row now carries a competitor id."""
        player.sportradar_competitor_id = competitor_id
        self._by_competitor[competitor_id] = player

    def find(
        self,
        *,
        competitor_id: Optional[str],
        name: str,
        country: Optional[str],
        ranking: Optional[int] = None,
        allow_nearby_rank: bool = False,
    ) -> Optional[PlayerMatch]:
        if competitor_id and competitor_id in self._by_competitor:
            return PlayerMatch(self._by_competitor[competitor_id], "competitor_id")

        country_code = normalize_country(country)

        for player in self._by_name.get((normalize_name(name), country_code), []):
            if self._compatible(player, competitor_id):
                return PlayerMatch(player, "name_country")

        if not allow_nearby_rank or ranking is None:
            return None

        best: Optional[Player] = None
        best_score = 0.0
        for player in self._by_last_name.get((extract_last_name(name), country_code), []):
            if not self._compatible(player, competitor_id) or player.ranking is None:
                continue
            if abs(player.ranking - ranking) > NEARBY_RANK_WINDOW:
                continue
            score = compare_names(name, player.name)
            if score >= NEARBY_NAME_THRESHOLD and score > best_score:
                best, best_score = player, score

        if best is None:
            return None
        return PlayerMatch(best, "nearby_rank")

    @staticmethod
    def _compatible(player: Player, competitor_id: Optional[str]) -> bool:
        return (
            not competitor_id
            or not player.sportradar_competitor_id
            or player.sportradar_competitor_id == competitor_id
        )
