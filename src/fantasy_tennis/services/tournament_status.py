"""Tournament status maintenance.

Stored statuses go stale as dates pass. This routine rewrites every row
whose date-derived status differs from the stored one; the read API runs it
before listing tournaments.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from fantasy_tennis.db.models import Tournament
from fantasy_tennis.statuses import derive_tournament_status

logger = logging.getLogger(__name__)


def refresh_tournament_statuses(session: Session, today: Optional[date] = None) -> int:
    """Recompute tournament statuses from dates. Returns the number of rows changed."""
    today = today or date.today()
    changed = 0
    rows = session.execute(select(Tournament)).scalars()
    for tournament in rows:
        status = derive_tournament_status(tournament.start_date, tournament.end_date, today)
        if status != tournament.status:
            tournament.status = status
            changed += 1
    if changed:
        session.flush()
        logger.info("Updated status of %d tournaments", changed)
    return changed
