"""ORM models and session helpers for the ingestion tables."""

from fantasy_tennis.db.models import Base, Match, Player, PlayerSchedule, SyncState, Tournament
from fantasy_tennis.db.session import get_db, get_engine, get_session, normalize_database_url

__all__ = [
    "Base",
    "Match",
    "Player",
    "PlayerSchedule",
    "SyncState",
    "Tournament",
    "get_db",
    "get_engine",
    "get_session",
    "normalize_database_url",
]
