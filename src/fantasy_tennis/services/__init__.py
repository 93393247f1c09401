"""
Ingestion orchestrators.

Each orchestrator sequences fetch -> parse -> diff -> upsert for one kind of
entity and returns a JSON-ready summary. None of them commit; the caller
(HTTP endpoint or script) owns the transaction.
"""

from fantasy_tennis.services.draw_sync import sync_draws
from fantasy_tennis.services.entry_list_sync import sync_entry_list
from fantasy_tennis.services.rankings_sync import sync_rankings
from fantasy_tennis.services.schedule_sync import sync_daily_schedule
from fantasy_tennis.services.tournament_status import refresh_tournament_statuses
from fantasy_tennis.services.tournament_sync import sync_tournaments

__all__ = [
    "refresh_tournament_statuses",
    "sync_daily_schedule",
    "sync_draws",
    "sync_entry_list",
    "sync_rankings",
    "sync_tournaments",
]
