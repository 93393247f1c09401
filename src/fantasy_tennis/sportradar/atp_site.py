"""
ATP website rankings source.

Fallback for the rankings sync when Sportradar returns no ATP group. The
singles rankings page is paged by ``rankRange`` in blocks of 100; pages are
fetched sequentially through a RateLimitedClient with its own, slower
interval so the site is not hammered.
"""

from __future__ import annotations

import logging
from typing import Optional

from fantasy_tennis.config import settings
from fantasy_tennis.errors import RateLimitedError, UpstreamError
from fantasy_tennis.sportradar.client import FixedIntervalLimiter, RateLimitedClient
from fantasy_tennis.sportradar.parsers.rankings import parse_atp_rankings_html
from fantasy_tennis.sportradar.records import RankedPlayer

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def rank_ranges(max_rank: int, page_size: int = PAGE_SIZE) -> list[tuple[int, int]]:
    """[(1, 100), (101, 200), ...] up to ``max_rank``."""
    return [
        (start, min(start + page_size - 1, max_rank))
        for start in range(1, max_rank + 1, page_size)
    ]


class AtpRankingsSource:
    """
    Scrapes the ATP singles rankings table.

    A page that fails is logged and skipped; the rankings sync decides what
    to do with a partial or empty result.
    """

    def __init__(
        self,
        client: Optional[RateLimitedClient] = None,
        *,
        url: Optional[str] = None,
        max_rank: Optional[int] = None,
    ):
        self.client = client or RateLimitedClient(
            limiter=FixedIntervalLimiter(2.0),
            headers=BROWSER_HEADERS,
            timeout=settings.fetch_timeout,
        )
        self.url = url or settings.atp_rankings_url
        self.max_rank = max_rank or settings.atp_site_max_rank

    async def fetch_page(self, start: int, end: int) -> list[RankedPlayer]:
        html = await self.client.get_text(self.url, {"rankRange": f"{start}-{end}"})
        players = parse_atp_rankings_html(html)
        logger.info("ATP rankings %d-%d: %d players", start, end, len(players))
        return players

    async def fetch_all(self) -> list[RankedPlayer]:
        by_rank: dict[int, RankedPlayer] = {}
        for start, end in rank_ranges(self.max_rank):
            try:
                players = await self.fetch_page(start, end)
            except (RateLimitedError, UpstreamError) as exc:
                logger.error("Failed to scrape ATP rankings %d-%d: %s", start, end, exc)
                continue
            for player in players:
                existing = by_rank.get(player.ranking)
                if existing is None or len(player.name) > len(existing.name):
                    by_rank[player.ranking] = player
        return [by_rank[rank] for rank in sorted(by_rank)]

    async def close(self) -> None:
        await self.client.close()
