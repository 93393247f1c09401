"""
Fantasy Tennis - ingestion service

Keeps the fantasy-tennis database populated from the Sportradar tennis API
(with the ATP website as a rankings fallback) and derives the in-game
values the game relies on.

Main components:
- feeds: Rate-limited fetch client, provider endpoints and payload parsers
- services: Ingestion orchestrators (rankings, tournaments, draws, entry lists)
- tasks: Resumable sync cursor
- web: FastAPI entry points and the authorization gate
- pricing: Rank-to-price model
"""

__version__ = "1.0.0"
