"""Sportradar tennis API access: rate-limited client, payload parsers and records."""

from fantasy_tennis.sportradar.client import (
    FixedIntervalLimiter,
    RateLimitedClient,
    SportradarClient,
)

__all__ = [
    "FixedIntervalLimiter",
    "RateLimitedClient",
    "SportradarClient",
]
