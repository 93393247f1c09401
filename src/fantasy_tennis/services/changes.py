"""
Field-by-field change detection for upserts.

Orchestrators build the full set of column values for an entity, then ask
``upsert`` to either insert a new row, update only the columns that differ,
or skip the write entirely when nothing changed. Skipping matters: an
unchanged row must not bump updated_at or cost a round trip.

None on both sides counts as equal. Anything else is compared with ``==``,
so dates, ints and strings must already be normalized to the column types.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, TypeVar

from sqlalchemy.orm import Session

from fantasy_tennis.db.models import Base

INSERTED = "inserted"
UPDATED = "updated"
SKIPPED = "skipped"

ModelT = TypeVar("ModelT", bound=Base)


def changed_fields(row: Any, values: Mapping[str, Any]) -> dict[str, tuple[Any, Any]]:
    """Return ``{column: (current, new)}`` for every column whose value would change."""
    changes = {}
    for name, new in values.items():
        current = getattr(row, name)
        if current is None and new is None:
            continue
        if current != new:
            changes[name] = (current, new)
    return changes


def upsert(
    session: Session,
    model: type[ModelT],
    existing: Optional[ModelT],
    values: Mapping[str, Any],
) -> tuple[str, ModelT]:
    """
    Insert, update or skip one row.

    Returns:
        (outcome, row) where outcome is INSERTED, UPDATED or SKIPPED
    """
    if existing is None:
        row = model(**values)
        session.add(row)
        return INSERTED, row

    changes = changed_fields(existing, values)
    if not changes:
        return SKIPPED, existing

    for name, (_, new) in changes.items():
        setattr(existing, name, new)
    return UPDATED, existing
