"""
Competition and season parsers.

The tournament sync walks competitions.json, then each competition's
seasons.xml, then each season's info.xml. XML is parsed with lxml and
elements are matched by local name, so the provider's default namespace and
attribute order do not matter.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from lxml import etree

from fantasy_tennis.sportradar.parsers.values import clean_str, to_date, to_int
from fantasy_tennis.sportradar.records import CompetitionRef, SeasonInfo, SeasonRef

logger = logging.getLogger(__name__)


def _parse_xml(xml: Union[str, bytes]) -> Optional[etree._Element]:
    data = xml.encode("utf-8") if isinstance(xml, str) else xml
    if not data or not data.strip():
        return None
    # lxml parsers are not thread-safe; build one per document
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        return etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as exc:
        logger.warning("Unparseable XML payload: %s", exc)
        return None


def _local(elem) -> Optional[str]:
    if not isinstance(elem.tag, str):
        return None  # comments, processing instructions
    return etree.QName(elem).localname


def _iter_named(root, name: str):
    for elem in root.iter():
        if _local(elem) == name:
            yield elem


def _first_named(root, name: str):
    return next(_iter_named(root, name), None)


def _season_ref(attrs) -> Optional[SeasonRef]:
    season_id = clean_str(attrs.get("id"))
    if not season_id:
        return None
    start = to_date(attrs.get("start_date"))
    year = to_int(attrs.get("year"))
    if year is None and start is not None:
        year = start.year
    return SeasonRef(
        id=season_id,
        name=clean_str(attrs.get("name")) or "",
        year=year,
        competition_id=clean_str(attrs.get("competition_id")),
        start_date=start,
        end_date=to_date(attrs.get("end_date")),
    )


def parse_competitions(payload: Any) -> list[CompetitionRef]:
    """Parse /competitions.json, keeping upstream order. Entries without an id are dropped."""
    entries = payload.get("competitions") if isinstance(payload, dict) else None
    competitions: list[CompetitionRef] = []
    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        competition_id = clean_str(entry.get("id"))
        if not competition_id:
            continue
        category = entry.get("category") or {}
        competitions.append(
            CompetitionRef(
                id=competition_id,
                name=clean_str(entry.get("name")) or "",
                type=clean_str(entry.get("type")),
                gender=clean_str(entry.get("gender")),
                category_name=clean_str(category.get("name")) if isinstance(category, dict) else None,
                level=clean_str(entry.get("level")),
                parent_id=clean_str(entry.get("parent_id")),
            )
        )
    return competitions


def parse_seasons_xml(xml: Union[str, bytes]) -> list[SeasonRef]:
    """Parse /competitions/{id}/seasons.xml into season references."""
    root = _parse_xml(xml)
    if root is None:
        return []
    seasons = []
    for elem in _iter_named(root, "season"):
        ref = _season_ref(elem.attrib)
        if ref is not None:
            seasons.append(ref)
    return seasons


def parse_seasons_json(payload: Any) -> list[SeasonRef]:
    """Parse /competitions/{id}/seasons.json into season references."""
    entries = payload.get("seasons") if isinstance(payload, dict) else None
    seasons = []
    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        ref = _season_ref(entry)
        if ref is not None:
            seasons.append(ref)
    return seasons


def parse_season_info_xml(xml: Union[str, bytes]) -> Optional[SeasonInfo]:
    """
    Parse /seasons/{id}/info.xml.

    Returns None when the document is unparseable or has no season element
    with an id; every other field is optional.
    """
    root = _parse_xml(xml)
    if root is None:
        return None

    season_elem = _first_named(root, "season")
    if season_elem is None:
        return None
    ref = _season_ref(season_elem.attrib)
    if ref is None:
        return None

    info = SeasonInfo(
        id=ref.id,
        name=ref.name,
        year=ref.year,
        start_date=ref.start_date,
        end_date=ref.end_date,
        competition_id=ref.competition_id,
    )

    category = _first_named(root, "category")
    if category is not None:
        info.category_id = clean_str(category.get("id"))
        info.category_name = clean_str(category.get("name"))

    competition = _first_named(root, "competition")
    if competition is not None:
        info.competition_id = info.competition_id or clean_str(competition.get("id"))
        info.competition_name = clean_str(competition.get("name"))
        info.parent_competition_id = clean_str(competition.get("parent_id"))
        info.type = clean_str(competition.get("type"))
        info.gender = clean_str(competition.get("gender"))
        info.level = clean_str(competition.get("level"))

    details = _first_named(root, "info")
    if details is not None:
        info.prize_money = to_int(details.get("prize_money"))
        info.prize_currency = clean_str(details.get("prize_currency"))
        info.surface = clean_str(details.get("surface"))
        info.venue = clean_str(details.get("complex"))
        info.number_of_competitors = to_int(details.get("number_of_competitors"))
        info.number_of_qualified_competitors = to_int(details.get("number_of_qualified_competitors"))
        info.number_of_scheduled_matches = to_int(details.get("number_of_scheduled_matches"))

    venue = _first_named(root, "venue")
    if venue is not None:
        info.venue = info.venue or clean_str(venue.get("name"))
        info.city = clean_str(venue.get("city_name"))
        info.country = clean_str(venue.get("country_name"))

    return info
