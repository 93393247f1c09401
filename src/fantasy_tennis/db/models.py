"""
SQLAlchemy ORM models for the fantasy tennis ingestion service.

These tables live in the hosted Postgres behind the web application. The
ingestion pipeline writes them; the UI reads them (through its own client
and row-level-security policies, which are not modelled here).

Key design decisions:
- Players are keyed by the Sportradar competitor id when we have one,
  falling back to name + country for rows seeded from the ATP website
- One Sportradar season maps to at most one tournament row
- Match ids are the provider's own ids (sr:match:...), used directly as PK
- Match competitor references are the provider's competitor ids, not FKs,
  so a partially seeded draw can be stored before its players are known
- Tournament status is derived from dates and rewritten on every sync

Tables:
- players: Ranked players with their derived fantasy price
- tournaments: One row per provider season (yearly tournament instance)
- tournament_matches: Draw and schedule entries
- player_schedules: Player participation in a tournament
- sportradar_sync_state: Singleton resume cursor for the tournament sync
"""

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# =============================================================================
# Constants
# =============================================================================

TOURNAMENT_CATEGORIES: tuple[str, ...] = (
    "grand_slam",
    "atp_1000",
    "atp_500",
    "atp_250",
    "finals",
    "challenger",
)

SURFACES: tuple[str, ...] = ("hard", "clay", "grass", "carpet")

SYNC_STATE_ROW_ID = 1


def _utc_now() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns below."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _in_check(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# =============================================================================
# Player Models
# =============================================================================

class Player(Base):
    """
    A ranked player available for fantasy teams.

    ``price`` is never taken from a provider. It is recomputed from
    ``ranking`` every time the row is written.
    """
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(primary_key=True)

    # e.g. 'sr:competitor:14882'. Null for players seeded from the ATP website.
    sportradar_competitor_id: Mapped[Optional[str]] = mapped_column(
        String(50), unique=True, nullable=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    country: Mapped[str] = mapped_column(String(3), nullable=False, default="UNK")

    ranking: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # Equal to ranking after every sync; the UI may show it mid-recalculation
    live_ranking: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=2)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    schedules: Mapped[list["PlayerSchedule"]] = relationship(back_populates="player")

    __table_args__ = (
        Index("idx_players_ranking", "ranking"),
        Index("idx_players_name_country", "name", "country"),
    )

    def __repr__(self) -> str:
        return f"<Player(id={self.id}, name='{self.name}', ranking={self.ranking})>"


# =============================================================================
# Tournament Models
# =============================================================================

class Tournament(Base):
    """
    A yearly tournament instance (one provider season).

    Categories: grand_slam, atp_1000, atp_500, atp_250, finals, challenger.
    Status is derived from start/end dates (see statuses.derive_tournament_status).
    """
    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(primary_key=True)

    # 'sr:season:...' - the upsert conflict target
    sportradar_season_id: Mapped[Optional[str]] = mapped_column(
        String(50), unique=True, nullable=True
    )
    # 'sr:competition:...' - shared by every season of the same event
    sportradar_competition_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    parent_competition_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False, default="challenger")
    surface: Mapped[str] = mapped_column(String(10), nullable=False, default="hard")
    gender: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    venue: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    prize_money: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    prize_currency: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)

    number_of_competitors: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    number_of_qualified_competitors: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    number_of_scheduled_matches: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="upcoming")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    matches: Mapped[list["Match"]] = relationship(back_populates="tournament")
    player_schedules: Mapped[list["PlayerSchedule"]] = relationship(back_populates="tournament")

    __table_args__ = (
        CheckConstraint(_in_check("category", TOURNAMENT_CATEGORIES), name="ck_tournaments_category"),
        CheckConstraint(_in_check("surface", SURFACES), name="ck_tournaments_surface"),
        CheckConstraint(
            _in_check("status", ("upcoming", "ongoing", "completed")),
            name="ck_tournaments_status",
        ),
        Index("idx_tournaments_start_date", "start_date"),
        Index("idx_tournaments_competition", "sportradar_competition_id"),
    )

    def __repr__(self) -> str:
        return f"<Tournament(id={self.id}, name='{self.name}', year={self.year})>"


# =============================================================================
# Match Models
# =============================================================================

class Match(Base):
    """
    A single draw or schedule entry.

    Both competitor references are nullable: a draw can be published before
    every slot is filled.
    """
    __tablename__ = "tournament_matches"

    # Provider match id, e.g. 'sr:match:12345'
    id: Mapped[str] = mapped_column(String(50), primary_key=True)

    tournament_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("tournaments.id", ondelete="SET NULL"), nullable=True
    )
    # Provider tournament/season id as received, kept when no local row matches
    sportradar_tournament_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    round: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    player1_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    player1_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    player2_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    player2_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    scheduled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="scheduled")
    winner_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    score: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    surface: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    best_of: Mapped[int] = mapped_column(Integer, nullable=False, default=3)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    tournament: Mapped[Optional["Tournament"]] = relationship(back_populates="matches")

    __table_args__ = (
        CheckConstraint(
            _in_check("status", ("scheduled", "in_progress", "completed", "cancelled")),
            name="ck_tournament_matches_status",
        ),
        Index("idx_tournament_matches_tournament", "tournament_id"),
        Index("idx_tournament_matches_scheduled", "scheduled_at"),
    )

    def __repr__(self) -> str:
        return f"<Match(id='{self.id}', round='{self.round}', status='{self.status}')>"


class PlayerSchedule(Base):
    """A player's participation in one tournament. Unique per (player, tournament)."""
    __tablename__ = "player_schedules"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    tournament_id: Mapped[int] = mapped_column(
        ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False
    )

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="confirmed")
    entry_type: Mapped[str] = mapped_column(String(20), nullable=False, default="main_draw")
    seed_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    eliminated_round: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    player: Mapped["Player"] = relationship(back_populates="schedules")
    tournament: Mapped["Tournament"] = relationship(back_populates="player_schedules")

    __table_args__ = (
        UniqueConstraint("player_id", "tournament_id", name="uq_player_schedules_player_tournament"),
    )

    def __repr__(self) -> str:
        return (
            f"<PlayerSchedule(player_id={self.player_id}, "
            f"tournament_id={self.tournament_id}, status='{self.status}')>"
        )


# =============================================================================
# Pipeline State
# =============================================================================

class SyncState(Base):
    """Singleton row holding the tournament sync resume cursor."""

    __tablename__ = "sportradar_sync_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SYNC_STATE_ROW_ID)
    last_competition_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    last_sync_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<SyncState(last_competition_id='{self.last_competition_id}')>"
