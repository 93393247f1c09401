"""Resume cursor persistence for the paginated tournament sync."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from fantasy_tennis.db.models import SYNC_STATE_ROW_ID, SyncState


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class SyncCursor:
    """The last fully processed competition and when it was processed."""
    last_id: str
    timestamp: Optional[datetime]


class SyncCursorStore:
    """
    Single-row cursor store backed by sportradar_sync_state.

    The row is created on first write and updated in place afterwards.
    Nothing guards against two concurrent syncs racing on it; syncs are
    admin-triggered and infrequent.
    """

    def __init__(self, session: Session):
        self.session = session

    def _row(self) -> Optional[SyncState]:
        return self.session.get(SyncState, SYNC_STATE_ROW_ID)

    def read(self) -> Optional[SyncCursor]:
        row = self._row()
        if row is None or not row.last_competition_id:
            return None
        return SyncCursor(last_id=row.last_competition_id, timestamp=row.last_sync_at)

    def write(self, last_id: str, timestamp: Optional[datetime] = None) -> None:
        timestamp = timestamp or _utc_now()
        row = self._row()
        if row is None:
            row = SyncState(
                id=SYNC_STATE_ROW_ID,
                last_competition_id=last_id,
                last_sync_at=timestamp,
                updated_at=_utc_now(),
            )
            self.session.add(row)
        else:
            row.last_competition_id = last_id
            row.last_sync_at = timestamp
            row.updated_at = _utc_now()

        self.session.flush()

    def clear(self) -> None:
        """Forget the cursor once a full pass has completed."""
        row = self._row()
        if row is None:
            return
        row.last_competition_id = None
        row.last_sync_at = _utc_now()
        row.updated_at = _utc_now()
        self.session.flush()
