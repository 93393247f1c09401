"""Rank-to-price model for the fantasy game.

Players are priced on a logarithmic decay from the top of the rankings:

    price = round(BASE_PRICE * (ln(MAX_RANK + 1) - ln(rank + 1)) / ln(MAX_RANK + 1))

floored at MIN_PRICE. Anyone ranked MAX_RANK or worse costs MIN_PRICE.

The model does not validate its input. Callers must reject missing or
non-positive ranks first (see ``validate_rank``).
"""

from __future__ import annotations

import math
from typing import Any, Optional

BASE_PRICE = 20
MAX_RANK = 200
MIN_PRICE = 2


def calculate_price(rank: int) -> int:
    """Return the in-game price for a positive ranking position."""
    log_max = math.log(MAX_RANK + 1)
    raw = BASE_PRICE * (log_max - math.log(rank + 1)) / log_max
    return max(MIN_PRICE, round(raw))


def validate_rank(rank: Any) -> int:
    """
    Coerce a raw ranking value to a positive int.

    Raises:
        ValueError: If the value is missing, non-numeric or not positive.
    """
    if rank is None or isinstance(rank, bool):
        raise ValueError(f"Invalid ranking: {rank!r}")
    if isinstance(rank, float) and not rank.is_integer():
        raise ValueError(f"Invalid ranking: {rank!r}")
    try:
        value = int(rank)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid ranking: {rank!r}") from None
    if value <= 0:
        raise ValueError(f"Ranking must be positive, got {value}")
    return value


def price_for_optional_rank(rank: Optional[int]) -> int:
    """Price for a player whose ranking may be unknown (unranked costs the minimum)."""
    if rank is None or rank <= 0:
        return MIN_PRICE
    return calculate_price(rank)
