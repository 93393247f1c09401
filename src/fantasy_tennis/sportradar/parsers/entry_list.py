"""Entry list parser for /seasons/{id}/competitors.json."""

from __future__ import annotations

from typing import Any

from fantasy_tennis.sportradar.parsers.values import clean_str, country_code, to_int
from fantasy_tennis.sportradar.records import EntryListEntry
from fantasy_tennis.statuses import map_entry_type, map_participation_status


def parse_entry_list(payload: Any) -> list[EntryListEntry]:
    """
    Parse a season's competitors.

    Competitors without an id or name are skipped, as are entries explicitly
    typed as something other than a player (doubles teams). Entries with no
    type at all are treated as players.
    """
    if not isinstance(payload, dict):
        return []

    entries: list[EntryListEntry] = []
    for competitor in payload.get("competitors") or []:
        if not isinstance(competitor, dict):
            continue

        kind = clean_str(competitor.get("type"))
        if kind and kind.lower() != "player":
            continue

        competitor_id = clean_str(competitor.get("id"))
        name = clean_str(competitor.get("name"))
        if not competitor_id or not name:
            continue

        ranking = to_int(competitor.get("ranking") or competitor.get("rank"))
        if ranking is not None and ranking <= 0:
            ranking = None

        entries.append(
            EntryListEntry(
                competitor_id=competitor_id,
                name=name,
                country=country_code(competitor.get("country_code") or competitor.get("country")),
                ranking=ranking,
                seed=to_int(competitor.get("seed")),
                status=map_participation_status(competitor.get("status")),
                entry_type=map_entry_type(competitor.get("entry_type") or competitor.get("qualifier_type")),
            )
        )

    return entries
