"""Shared bookkeeping for the ingestion orchestrators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Error messages returned to the caller (the full list is still counted)
MAX_REPORTED_ERRORS = 10


@dataclass
class SyncStats:
    """
    Per-invocation counters.

    ``errors`` holds one message per entity that failed to fetch, parse or
    upsert. Those failures never abort the batch.
    """
    inserted: int = 0
    updated: int = 0
    skipped: int = 0  # compared equal to the stored row, no write
    filtered: int = 0  # rejected by eligibility or validation rules
    errors: list[str] = field(default_factory=list)

    @property
    def synced(self) -> int:
        return self.inserted + self.updated + self.skipped

    def record(self, outcome: str) -> None:
        """Count an upsert outcome ('inserted', 'updated' or 'skipped')."""
        if outcome == "inserted":
            self.inserted += 1
        elif outcome == "updated":
            self.updated += 1
        elif outcome == "skipped":
            self.skipped += 1
        else:
            raise ValueError(f"Unknown upsert outcome: {outcome}")

    def to_summary(self) -> dict[str, Any]:
        return {
            "synced": self.synced,
            "inserted": self.inserted,
            "updated": self.updated,
            "skipped": self.skipped,
            "filtered": self.filtered,
            "errors": self.errors[:MAX_REPORTED_ERRORS],
            "errorCount": len(self.errors),
        }

    def summary(self) -> str:
        """Return a human-readable summary for logs and scripts."""
        lines = [
            f"  Inserted: {self.inserted}",
            f"  Updated:  {self.updated}",
            f"  Skipped:  {self.skipped}",
            f"  Filtered: {self.filtered}",
        ]
        if self.errors:
            lines.append(f"  Errors: {len(self.errors)}")
            for err in self.errors[:5]:
                lines.append(f"    - {err}")
            if len(self.errors) > 5:
                lines.append(f"    ... and {len(self.errors) - 5} more")
        return "\n".join(lines)
