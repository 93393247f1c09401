"""Small coercion helpers shared by the payload parsers.

Provider payloads mix strings and numbers freely ("year": "2025",
"prize_money": 1000000) and omit fields without notice. These helpers never
raise; anything unusable becomes None.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any, Optional

_COUNTRY_RE = re.compile(r"^[A-Za-z]{3}$")


def to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip().replace(",", "")
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        try:
            number = float(text)
        except ValueError:
            return None
        return int(number) if number.is_integer() else None


def to_date(value: Any) -> Optional[date]:
    """Parse 'YYYY-MM-DD' (or a full ISO timestamp) into a date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def to_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp into a naive UTC datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def country_code(value: Any) -> str:
    """Three-letter upper-case code, ``UNK`` for anything else."""
    if not value:
        return "UNK"
    text = str(value).strip()
    if not _COUNTRY_RE.match(text):
        return "UNK"
    return text.upper()


def clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
