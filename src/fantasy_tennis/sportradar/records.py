"""
Canonical records produced by the payload parsers.

Each provider payload shape (rankings, seasons, season info, draws, daily
summaries, entry lists) is normalized into one of these dataclasses before
the orchestrators compare it against the database. Nothing here knows about
SQLAlchemy; the services translate records into model columns.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass
class RankedPlayer:
    """One line of a rankings list (Sportradar or the ATP website)."""

    ranking: int
    name: str
    country: str = "UNK"
    points: int = 0

    # Null when the line came from the ATP website
    competitor_id: Optional[str] = None
    movement: int = 0
    competitions_played: int = 0

    def __repr__(self) -> str:
        return f"<RankedPlayer(#{self.ranking} {self.name} {self.country})>"


@dataclass
class CompetitionRef:
    """An entry of /competitions.json."""

    id: str
    name: str
    type: Optional[str] = None  # 'singles', 'doubles', 'mixed'
    gender: Optional[str] = None  # 'men', 'women', 'mixed'
    category_name: Optional[str] = None  # 'ATP', 'Challenger', 'WTA', 'ITF Men', ...
    level: Optional[str] = None  # 'grand_slam', 'atp_1000', ...
    parent_id: Optional[str] = None


@dataclass
class SeasonRef:
    """A season listed for a competition (seasons.xml / seasons.json)."""

    id: str
    name: str
    year: Optional[int]
    competition_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass
class SeasonInfo:
    """Everything we keep from /seasons/{id}/info.xml."""

    id: str
    name: str
    year: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    competition_id: Optional[str] = None
    competition_name: Optional[str] = None
    parent_competition_id: Optional[str] = None
    type: Optional[str] = None
    gender: Optional[str] = None
    level: Optional[str] = None

    category_id: Optional[str] = None
    category_name: Optional[str] = None

    prize_money: Optional[int] = None
    prize_currency: Optional[str] = None
    surface: Optional[str] = None  # raw provider value, e.g. 'hardcourt_outdoor'
    venue: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None

    number_of_competitors: Optional[int] = None
    number_of_qualified_competitors: Optional[int] = None
    number_of_scheduled_matches: Optional[int] = None

    @property
    def location(self) -> Optional[str]:
        parts = [p for p in (self.city, self.country) if p]
        if parts:
            return ", ".join(parts)
        return self.venue


@dataclass
class TournamentContext:
    """Parent tournament info passed to the draw parser."""

    id: str
    name: Optional[str] = None
    surface: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass
class CanonicalMatch:
    """A draw or schedule entry, ready to be upserted into tournament_matches."""

    id: str
    sportradar_tournament_id: Optional[str] = None
    round: Optional[str] = None

    player1_id: Optional[str] = None
    player1_name: Optional[str] = None
    player2_id: Optional[str] = None
    player2_name: Optional[str] = None

    scheduled_at: Optional[datetime] = None
    status: str = "scheduled"
    winner_id: Optional[str] = None
    score: Optional[str] = None

    surface: Optional[str] = None
    best_of: int = 3

    # Used to link to a local tournament row
    season_id: Optional[str] = None
    competition_id: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"<CanonicalMatch({self.id}: {self.player1_name} vs "
            f"{self.player2_name}, {self.round}, {self.status})>"
        )


@dataclass
class EntryListEntry:
    """A competitor on a season's entry list."""

    competitor_id: str
    name: str
    country: str = "UNK"
    ranking: Optional[int] = None
    seed: Optional[int] = None
    status: str = "confirmed"
    entry_type: str = "main_draw"
