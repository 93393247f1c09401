#!/usr/bin/env python3
"""
Run the tournament sync to completion.

The sync endpoint only processes one batch of competitions per call and
hands back a ``resumeFrom`` cursor. This script keeps calling the same
orchestrator, committing after every batch, until ``hasMore`` is false.

Usage:
    python scripts/run_tournament_sync.py
    python scripts/run_tournament_sync.py --year 2025 --batch-size 10
    python scripts/run_tournament_sync.py --resume-from sr:competition:2555
    python scripts/run_tournament_sync.py --stored-cursor --max-runs 5
"""

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path
from time import perf_counter
from typing import Optional

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fantasy_tennis.db import get_session
from fantasy_tennis.errors import IngestionError
from fantasy_tennis.services import sync_tournaments
from fantasy_tennis.sportradar import SportradarClient

logger = logging.getLogger("run_tournament_sync")


async def run(
    year: int,
    batch_size: Optional[int],
    resume_from: Optional[str],
    use_stored_cursor: bool,
    max_runs: Optional[int],
    pause: float,
) -> int:
    totals = {"inserted": 0, "updated": 0, "skipped": 0, "filtered": 0, "errorCount": 0}
    runs = 0
    cursor = resume_from

    async with SportradarClient.from_settings() as client:
        while True:
            runs += 1
            with get_session() as session:
                result = await sync_tournaments(
                    session,
                    client,
                    year=year,
                    batch_size=batch_size,
                    resume_from=cursor,
                    use_stored_cursor=use_stored_cursor and runs == 1 and cursor is None,
                )

            for key in totals:
                totals[key] += result.get(key, 0)
            logger.info(
                "Batch %d: processed %d, %d remaining. %s",
                runs, result["processed"], result["remaining"], result["message"],
            )
            for error in result["errors"]:
                logger.warning("  %s", error)

            if not result["hasMore"]:
                break
            if max_runs and runs >= max_runs:
                logger.info("Stopping after %d batches; resume with --resume-from %s", runs, result["resumeFrom"])
                break

            cursor = result["resumeFrom"]
            if pause:
                await asyncio.sleep(pause)

    logger.info(
        "Done after %d batches: %d inserted, %d updated, %d skipped, %d filtered, %d errors",
        runs, totals["inserted"], totals["updated"], totals["skipped"],
        totals["filtered"], totals["errorCount"],
    )
    return runs


def main() -> int:
    parser = argparse.ArgumentParser(description="Sync Sportradar tournaments for a season")
    parser.add_argument("--year", type=int, default=date.today().year, help="Season year to sync")
    parser.add_argument("--batch-size", type=int, default=None, help="Competitions per batch")
    parser.add_argument("--resume-from", default=None, help="Competition id to resume after")
    parser.add_argument(
        "--stored-cursor",
        action="store_true",
        help="Resume from the cursor saved by a previous interrupted run",
    )
    parser.add_argument("--max-runs", type=int, default=None, help="Stop after this many batches")
    parser.add_argument("--pause", type=float, default=1.0, help="Seconds to wait between batches")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    started = perf_counter()
    try:
        asyncio.run(run(
            year=args.year,
            batch_size=args.batch_size,
            resume_from=args.resume_from,
            use_stored_cursor=args.stored_cursor,
            max_runs=args.max_runs,
            pause=args.pause,
        ))
    except IngestionError as e:
        logger.error("Tournament sync failed: %s", e.message)
        return 1
    logger.info("Finished in %.1fs", perf_counter() - started)
    return 0


if __name__ == "__main__":
    sys.exit(main())
