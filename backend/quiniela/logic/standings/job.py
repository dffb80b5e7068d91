from heliclockter import datetime_utc

from quiniela.config import config
from quiniela.logic.standings.refresh import cleanup_old_standings, refresh_stale_standings
from quiniela.models.pools import StandingsJobResult
from quiniela.utils.logging import logger
from quiniela.utils.sports_provider import StandingsProvider


async def run_refresh_standings_job(
    older_than_hours: int | None = None,
    cleanup_older_than_days: int | None = None,
    provider: StandingsProvider | None = None,
) -> StandingsJobResult:
    if older_than_hours is None:
        older_than_hours = config.standings_refresh_older_than_hours
    if cleanup_older_than_days is None:
        cleanup_older_than_days = config.standings_cleanup_older_than_days

    logger.info(
        "Starting standings refresh job: older_than_hours=%s cleanup_older_than_days=%s",
        older_than_hours,
        cleanup_older_than_days,
    )
    refreshed = await refresh_stale_standings(older_than_hours, provider)
    deleted = await cleanup_old_standings(cleanup_older_than_days)
    logger.info("Standings refresh job done: refreshed=%s deleted=%s", refreshed, deleted)

    return StandingsJobResult(
        success=True,
        refreshed=refreshed,
        deleted=deleted,
        timestamp=datetime_utc.now().isoformat(),
    )
