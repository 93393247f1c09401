"""
Rankings parsers.

Two sources feed the rankings sync:
- Sportradar /rankings.json: groups of competitor_rankings keyed by tour name
- The ATP website singles rankings table (fallback when Sportradar is empty)

Both produce RankedPlayer records. Lines without a name or a numeric rank
are skipped. Non-positive ranks are kept so the orchestrator can reject and
count them.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from bs4 import BeautifulSoup

from fantasy_tennis.sportradar.parsers.values import clean_str, country_code, to_int
from fantasy_tennis.sportradar.records import RankedPlayer

logger = logging.getLogger(__name__)


def parse_rankings(payload: Any, group: str = "ATP") -> list[RankedPlayer]:
    """
    Parse a Sportradar /rankings.json payload.

    Args:
        payload: Decoded JSON. Either ``{"rankings": [...]}`` or the bare list.
        group: Ranking group name to extract ('ATP' or 'WTA')

    Returns:
        RankedPlayer records in payload order
    """
    groups = payload.get("rankings") if isinstance(payload, dict) else payload
    if not isinstance(groups, list):
        return []

    selected = next(
        (g for g in groups if isinstance(g, dict) and g.get("name") == group),
        None,
    )
    if selected is None:
        return []

    players: list[RankedPlayer] = []
    for line in selected.get("competitor_rankings") or []:
        if not isinstance(line, dict):
            continue
        competitor = line.get("competitor") or {}

        rank = to_int(line.get("rank"))
        name = clean_str(competitor.get("name") or line.get("name"))
        if rank is None or not name:
            continue

        players.append(
            RankedPlayer(
                ranking=rank,
                name=name,
                country=country_code(competitor.get("country_code") or line.get("country_code")),
                points=to_int(line.get("points")) or 0,
                competitor_id=clean_str(competitor.get("id")),
                movement=to_int(line.get("movement")) or 0,
                competitions_played=to_int(line.get("competitions_played")) or 0,
            )
        )

    return players


# =============================================================================
# ATP website
# =============================================================================

_ROW_SELECTOR = ".mega-table tbody tr, .rankings-table tbody tr, table.rankings tbody tr"
_CODE_RE = re.compile(r"\b([A-Z]{3})\b")
_FLAG_REF_RE = re.compile(r"flag[-_/]([a-zA-Z]{3})\b")


def _extract_country(cell) -> str:
    """Find a 3-letter country code near the player name (flag image, sprite or data attribute)."""
    for elem in cell.select("[data-country], [data-country-code]"):
        code = country_code(elem.get("data-country") or elem.get("data-country-code"))
        if code != "UNK":
            return code

    for img in cell.find_all("img"):
        for attr in ("alt", "title"):
            match = _CODE_RE.search(img.get(attr) or "")
            if match:
                return match.group(1)
        match = re.search(r"/flags?/([a-zA-Z]{3})\.", img.get("src") or "")
        if match:
            return match.group(1).upper()

    for use in cell.find_all("use"):
        href = use.get("href") or use.get("xlink:href") or ""
        match = _FLAG_REF_RE.search(href)
        if match:
            return match.group(1).upper()

    for elem in cell.select(".country-code, .player-flag-code"):
        code = country_code(elem.get_text(strip=True))
        if code != "UNK":
            return code

    return "UNK"


def _parse_row(row) -> Optional[RankedPlayer]:
    cells = row.find_all("td")
    if len(cells) < 4:
        return None

    rank = to_int(re.sub(r"[^\d]", "", cells[0].get_text()))
    if not rank or rank < 1:
        return None

    name_cell = cells[1]
    link = name_cell.find("a")
    name = (link.get_text(" ", strip=True) if link else "") or name_cell.get_text(" ", strip=True)
    name = " ".join(name.split())
    if not name:
        return None

    points_cell = row.select_one("td.points") or cells[3]
    points = to_int(re.sub(r"[^\d]", "", points_cell.get_text())) or 0

    return RankedPlayer(
        ranking=rank,
        name=name,
        country=_extract_country(name_cell),
        points=points,
    )


def parse_atp_rankings_html(html: str) -> list[RankedPlayer]:
    """
    Parse one page of the ATP website singles rankings table.

    Ties and layout quirks can put two rows on the same rank; the row with
    the longer name wins (full names beat initials).
    """
    soup = BeautifulSoup(html, "lxml")
    rows = soup.select(_ROW_SELECTOR)
    if not rows:
        logger.warning("No rankings rows found; ATP page structure may have changed")
        return []

    by_rank: dict[int, RankedPlayer] = {}
    for row in rows:
        player = _parse_row(row)
        if player is None:
            continue
        existing = by_rank.get(player.ranking)
        if existing is None or len(player.name) > len(existing.name):
            by_rank[player.ranking] = player

    return [by_rank[rank] for rank in sorted(by_rank)]
