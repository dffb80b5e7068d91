import asyncio
from typing import Any

from heliclockter import datetime_utc, timedelta

from quiniela.config import config
from quiniela.models.db.standings import CompetitionStandings, StaleStandingsRow
from quiniela.sql.standings import (
    claim_standings_for_refresh,
    delete_standings_fetched_before,
    get_stale_standings,
    get_standings,
    get_standings_source,
    release_standings_claim,
    store_refreshed_standings,
    upsert_standings,
)
from quiniela.utils.errors import ExternalFetchFailure, InvalidArgument, NotFound
from quiniela.utils.id_types import CompetitionId, SeasonId
from quiniela.utils.logging import logger
from quiniela.utils.sports_provider import StandingsProvider, get_default_standings_provider


async def fetch_standings_with_timeout(
    provider: StandingsProvider, external_league_id: str, season_year: int
) -> dict[str, Any]:
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(provider.fetch_standings, external_league_id, season_year),
            timeout=config.standings_fetch_timeout_seconds,
        )
    except TimeoutError as exc:
        raise ExternalFetchFailure(
            f"Timed out fetching standings for league {external_league_id} ({season_year})"
        ) from exc


def should_skip_row(row: StaleStandingsRow, now: datetime_utc) -> str | None:
    if row.external_id is None or row.external_id == "":
        return "competition has no provider mapping"
    if row.season_ends_at is not None and row.season_ends_at < now:
        return "season has ended"
    return None


async def refresh_stale_standings(
    older_than_hours: int, provider: StandingsProvider | None = None
) -> int:
    """
    Re-fetch every standings row older than `older_than_hours` and return how many succeeded.

    Each row is claimed before fetching. The claim re-checks staleness, so rows refreshed or
    claimed by a concurrent run in the meantime are skipped. A failing or slow fetch is logged,
    its claim is released and the batch moves on to the next row.
    """
    if older_than_hours < 0:
        raise InvalidArgument("older_than_hours must not be negative")

    provider = provider or get_default_standings_provider()
    now = datetime_utc.now()
    cutoff = now - timedelta(hours=older_than_hours)
    claim_expired_before = now - timedelta(seconds=config.standings_claim_ttl_seconds)

    stale_rows = await get_stale_standings(cutoff)
    logger.info("Found stale standings: count=%s cutoff=%s", len(stale_rows), cutoff.isoformat())

    refreshed = 0
    fetches = 0
    for row in stale_rows:
        skip_reason = should_skip_row(row, now)
        if skip_reason is not None:
            logger.info(
                "Skipping standings refresh: standings_id=%s reason=%s", int(row.id), skip_reason
            )
            continue

        if not await claim_standings_for_refresh(row.id, cutoff, claim_expired_before, now):
            logger.debug("Standings already refreshed or claimed: standings_id=%s", int(row.id))
            continue

        if fetches > 0 and config.standings_refresh_delay_seconds > 0:
            await asyncio.sleep(config.standings_refresh_delay_seconds)
        fetches += 1

        assert row.external_id is not None
        try:
            payload = await fetch_standings_with_timeout(provider, row.external_id, row.season_year)
        except Exception as exc:
            logger.warning(
                "Failed to refresh standings: standings_id=%s competition_id=%s error=%s",
                int(row.id),
                int(row.competition_id),
                exc,
            )
            await release_standings_claim(row.id)
            continue

        await store_refreshed_standings(row.id, payload, datetime_utc.now())
        refreshed += 1

    return refreshed


async def cleanup_old_standings(older_than_days: int) -> int:
    if older_than_days < 0:
        raise InvalidArgument("older_than_days must not be negative")

    cutoff = datetime_utc.now() - timedelta(days=older_than_days)
    deleted = await delete_standings_fetched_before(cutoff)
    logger.info("Deleted old standings: count=%s cutoff=%s", deleted, cutoff.isoformat())
    return deleted


def standings_are_fresh(standings: CompetitionStandings, now: datetime_utc) -> bool:
    return standings.fetched_at >= now - timedelta(hours=config.standings_refresh_older_than_hours)


async def get_or_fetch_standings(
    competition_id: CompetitionId,
    season_id: SeasonId,
    force_refresh: bool = False,
    provider: StandingsProvider | None = None,
) -> CompetitionStandings:
    now = datetime_utc.now()
    cached = await get_standings(competition_id, season_id)
    if cached is not None and not force_refresh and standings_are_fresh(cached, now):
        return cached

    source = await get_standings_source(competition_id, season_id)
    if source is None:
        raise NotFound("Season", season_id)
    external_id, season_year, season_ends_at = source
    if season_ends_at is not None and season_ends_at < now:
        # Standings of a finished season are final.
        if force_refresh:
            raise InvalidArgument(
                "Season has ended, its standings can no longer be refreshed", "SEASON_ENDED"
            )
        if cached is not None:
            return cached
    if external_id is None or external_id == "":
        if cached is not None:
            return cached
        raise NotFound("Standings source for competition", competition_id)

    payload = await fetch_standings_with_timeout(
        provider or get_default_standings_provider(), external_id, season_year
    )
    return await upsert_standings(competition_id, season_id, payload, datetime_utc.now())
