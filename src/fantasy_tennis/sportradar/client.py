"""
Rate-limited HTTP clients for the Sportradar tennis API.

Every outbound call goes through a FixedIntervalLimiter, which:
- keeps at least ``min_interval`` seconds between calls (200ms by default)
- carries a shared backoff hint: after a 429 the next call, from any caller
  sharing the limiter, waits the backoff delay first

HTTP 429 is retried with the Retry-After header (seconds) when present,
otherwise 2s doubling per attempt, always capped at 30s. After the last
attempt a RateLimitedError is raised. Any other non-2xx status raises
UpstreamError immediately with the status attached; nothing else is retried.

Usage:
    async with SportradarClient(api_key) as client:
        payload = await client.rankings()
        xml = await client.season_info_xml("sr:season:123")
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import quote

import httpx

from fantasy_tennis.config import settings
from fantasy_tennis.errors import ConfigurationError, RateLimitedError, UpstreamError
from fantasy_tennis.sportradar.cache import ResponseCache

logger = logging.getLogger(__name__)

USER_AGENT = "FantasyTennis/1.0"


class FixedIntervalLimiter:
    """
    Fixed-interval gate with a shared backoff hint.

    Safe to share across concurrent callers: acquisition is serialized
    under an asyncio lock, so a bounded pool of workers sharing one limiter
    still spaces its calls and honours a backoff observed by any of them.
    """

    def __init__(
        self,
        min_interval: float = 0.2,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.min_interval = min_interval
        self._sleep = sleep
        self._clock = clock
        self._last_call: Optional[float] = None
        self._backoff = 0.0
        self._lock = asyncio.Lock()

    @property
    def backoff_hint(self) -> float:
        return self._backoff

    def defer(self, delay: float) -> None:
        """Ask the next acquire() to wait ``delay`` seconds first."""
        self._backoff = max(self._backoff, delay)

    async def acquire(self) -> None:
        async with self._lock:
            if self._backoff > 0:
                delay, self._backoff = self._backoff, 0.0
                logger.info("Rate limited, waiting %.1fs before next request", delay)
                await self._sleep(delay)
            elif self._last_call is not None and self.min_interval > 0:
                wait = self.min_interval - (self._clock() - self._last_call)
                if wait > 0:
                    await self._sleep(wait)
            self._last_call = self._clock()


def _retry_after_seconds(response: httpx.Response) -> Optional[float]:
    raw = response.headers.get("Retry-After")
    if not raw:
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    return value if value > 0 else None


class RateLimitedClient:
    """httpx.AsyncClient wrapper that funnels every GET through the limiter."""

    def __init__(
        self,
        *,
        limiter: Optional[FixedIntervalLimiter] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        max_attempts: int = 3,
        backoff_initial: float = 2.0,
        backoff_max: float = 30.0,
        timeout: float = 30.0,
        headers: Optional[dict[str, str]] = None,
    ):
        self.limiter = limiter or FixedIntervalLimiter()
        self.max_attempts = max_attempts
        self.backoff_initial = backoff_initial
        self.backoff_max = backoff_max
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT, **(headers or {})},
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )

    def backoff_delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """Delay before retrying after a 429 on zero-based ``attempt``."""
        delay = retry_after if retry_after else self.backoff_initial * (2 ** attempt)
        return min(delay, self.backoff_max)

    async def fetch(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        *,
        label: Optional[str] = None,
    ) -> httpx.Response:
        """
        GET ``url`` with rate limiting and 429 backoff.

        Args:
            url: Absolute URL
            params: Query parameters
            label: What to call the request in logs and errors (keeps
                   credentials in query strings out of both)

        Raises:
            RateLimitedError: Still 429 after ``max_attempts`` attempts
            UpstreamError: Any other non-2xx status, or a transport failure
        """
        label = label or url
        retry_after: Optional[float] = None

        for attempt in range(self.max_attempts):
            await self.limiter.acquire()
            try:
                response = await self._client.get(url, params=params)
            except httpx.TransportError as exc:
                raise UpstreamError(f"Request to {label} failed: {exc.__class__.__name__}", url=label) from exc

            if response.status_code == 429:
                retry_after = _retry_after_seconds(response)
                delay = self.backoff_delay(attempt, retry_after)
                self.limiter.defer(delay)
                logger.warning(
                    "Received 429 from %s (attempt %d/%d), backing off %.1fs",
                    label,
                    attempt + 1,
                    self.max_attempts,
                    delay,
                )
                continue

            if not response.is_success:
                raise UpstreamError(
                    f"Request to {label} failed",
                    upstream_status=response.status_code,
                    url=label,
                )

            return response

        logger.error("All %d attempts rate limited for %s", self.max_attempts, label)
        raise RateLimitedError(url=label, attempts=self.max_attempts, retry_after=retry_after)

    async def get_text(self, url: str, params: Optional[dict[str, Any]] = None) -> str:
        response = await self.fetch(url, params)
        return response.text

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


class SportradarClient(RateLimitedClient):
    """
    Sportradar tennis v3 client.

    Endpoints are given as paths relative to the configured base URL
    (``https://api.sportradar.com/tennis/{access_level}/v3/{language}``); the
    API key is added as the ``api_key`` query parameter.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: Optional[str] = None,
        cache: Optional[ResponseCache] = None,
        **kwargs: Any,
    ):
        if not api_key:
            raise ConfigurationError("SPORTRADAR_API_KEY not configured")
        super().__init__(headers={"Accept": "application/json"}, **kwargs)
        self.api_key = api_key
        self.base_url = (base_url or settings.sportradar_base_url).rstrip("/")
        self.cache = cache

    @classmethod
    def from_settings(cls, **kwargs: Any) -> "SportradarClient":
        """Build a client (and its limiter and cache) from the loaded settings."""
        cache = ResponseCache(settings.sportradar_cache_dir) if settings.sportradar_cache_dir else None
        return cls(
            settings.sportradar_api_key or "",
            limiter=FixedIntervalLimiter(settings.fetch_min_interval),
            max_attempts=settings.fetch_max_attempts,
            backoff_initial=settings.fetch_backoff_initial,
            backoff_max=settings.fetch_backoff_max,
            timeout=settings.fetch_timeout,
            cache=cache,
            **kwargs,
        )

    async def fetch_endpoint(self, endpoint: str) -> httpx.Response:
        url = f"{self.base_url}{endpoint}"
        return await self.fetch(url, {"api_key": self.api_key}, label=endpoint)

    async def get_json(self, endpoint: str) -> Any:
        response = await self.fetch_endpoint(endpoint)
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(f"Invalid JSON from {endpoint}", url=endpoint) from exc
        if self.cache is not None and data:
            self.cache.save(endpoint, data)
        return data

    async def get_xml(self, endpoint: str) -> bytes:
        response = await self.fetch_endpoint(endpoint)
        return response.content

    # =========================================================================
    # Endpoints
    # =========================================================================

    async def rankings(self) -> Any:
        return await self.get_json("/rankings.json")

    async def competitions(self) -> Any:
        return await self.get_json("/competitions.json")

    async def competition_seasons_xml(self, competition_id: str) -> bytes:
        return await self.get_xml(f"/competitions/{_seg(competition_id)}/seasons.xml")

    async def competition_seasons(self, competition_id: str) -> Any:
        return await self.get_json(f"/competitions/{_seg(competition_id)}/seasons.json")

    async def season_info_xml(self, season_id: str) -> bytes:
        return await self.get_xml(f"/seasons/{_seg(season_id)}/info.xml")

    async def season_competitors(self, season_id: str) -> Any:
        return await self.get_json(f"/seasons/{_seg(season_id)}/competitors.json")

    async def tournaments(self) -> Any:
        return await self.get_json("/tournaments.json")

    async def tournament_info(self, tournament_id: str) -> Any:
        return await self.get_json(f"/tournaments/{_seg(tournament_id)}/info.json")

    async def tournament_draw(self, tournament_id: str) -> Any:
        return await self.get_json(f"/tournaments/{_seg(tournament_id)}/draw.json")

    async def daily_summaries(self, day: str) -> Any:
        return await self.get_json(f"/schedules/{_seg(day)}/summaries.json")


def _seg(value: str) -> str:
    """Escape an id for use as one path segment ('sr:season:1' stays readable)."""
    return quote(str(value), safe=":")
