#!/usr/bin/env python3
import argparse
import asyncio

from quiniela.config import config
from quiniela.database import database
from quiniela.logic.standings.job import run_refresh_standings_job


async def async_main() -> None:
    parser = argparse.ArgumentParser(
        description="Refresh stale competition standings and delete very old cached standings."
    )
    parser.add_argument(
        "--older-than-hours",
        type=int,
        default=config.standings_refresh_older_than_hours,
        help="Refresh standings fetched longer ago than this many hours.",
    )
    parser.add_argument(
        "--cleanup-older-than-days",
        type=int,
        default=config.standings_cleanup_older_than_days,
        help="Delete standings fetched longer ago than this many days.",
    )
    args = parser.parse_args()

    if args.older_than_hours < 0 or args.cleanup_older_than_days < 0:
        raise ValueError("--older-than-hours and --cleanup-older-than-days must not be negative")

    await database.connect()
    try:
        result = await run_refresh_standings_job(
            older_than_hours=args.older_than_hours,
            cleanup_older_than_days=args.cleanup_older_than_days,
        )
    finally:
        await database.disconnect()

    print(result.model_dump_json())


if __name__ == "__main__":
    asyncio.run(async_main())
