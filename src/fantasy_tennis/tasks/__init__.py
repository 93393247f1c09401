"""Pipeline state helpers."""

from fantasy_tennis.tasks.checkpoints import SyncCursor, SyncCursorStore

__all__ = ["SyncCursor", "SyncCursorStore"]
