"""Player identity helpers: name normalization and existing-row lookup."""

from fantasy_tennis.players.matching import PlayerIndex, PlayerMatch
from fantasy_tennis.players.names import (
    compare_names,
    extract_last_name,
    normalize_country,
    normalize_name,
)

__all__ = [
    "PlayerIndex",
    "PlayerMatch",
    "compare_names",
    "extract_last_name",
    "normalize_country",
    "normalize_name",
]
