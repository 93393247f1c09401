"""Local cache of successful Sportradar JSON responses.

Used for debugging and for building test fixtures from real payloads.
Files are named after the endpoint (``/seasons/sr:season:1/competitors.json``
becomes ``seasons_sr_season_1_competitors_json.json``) and overwritten on
every successful call. Cache failures are logged, never raised.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)


def cache_filename(endpoint: str) -> str:
    name = endpoint.split("?", 1)[0].lstrip("/").replace("/", "_")
    name = re.sub(r"[^a-zA-Z0-9_-]", "_", name)
    return f"{name}.json"


class ResponseCache:
    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, endpoint: str) -> Path:
        return self.directory / cache_filename(endpoint)

    def save(self, endpoint: str, data: Any) -> None:
        document = {
            "endpoint": endpoint,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": data,
        }
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self.path_for(endpoint).write_text(json.dumps(document, indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Could not cache response for %s: %s", endpoint, exc)

