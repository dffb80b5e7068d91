import json
from typing import Any

from heliclockter import datetime_utc

from quiniela.database import database
from quiniela.models.db.standings import CompetitionStandings, StaleStandingsRow
from quiniela.utils.id_types import CompetitionId, SeasonId, StandingsId


async def get_standings(
    competition_id: CompetitionId, season_id: SeasonId
) -> CompetitionStandings | None:
    query = """
        SELECT *
        FROM competition_standings
        WHERE competition_id = :competition_id
          AND season_id = :season_id
        """
    result = await database.fetch_one(
        query=query, values={"competition_id": competition_id, "season_id": season_id}
    )
    return CompetitionStandings.model_validate(dict(result._mapping)) if result is not None else None


async def get_standings_source(
    competition_id: CompetitionId, season_id: SeasonId
) -> tuple[str | None, int, datetime_utc | None] | None:
    """Return the provider league id, season year and season end, if the season exists."""
    query = """
        SELECT c.external_id, s.year, s.ends_at
        FROM seasons s
        JOIN competitions c ON c.id = s.competition_id
        WHERE s.id = :season_id
          AND c.id = :competition_id
        """
    result = await database.fetch_one(
        query=query, values={"competition_id": competition_id, "season_id": season_id}
    )
    if result is None:
        return None
    return (
        result._mapping["external_id"],
        int(result._mapping["year"]),
        result._mapping["ends_at"],
    )


async def get_stale_standings(cutoff: datetime_utc) -> list[StaleStandingsRow]:
    query = """
        SELECT
            cs.id,
            cs.competition_id,
            cs.season_id,
            cs.fetched_at,
            c.external_id,
            s.year AS season_year,
            s.ends_at AS season_ends_at
        FROM competition_standings cs
        JOIN competitions c ON c.id = cs.competition_id
        JOIN seasons s ON s.id = cs.season_id
        WHERE cs.fetched_at < :cutoff
        ORDER BY cs.fetched_at ASC, cs.id ASC
        """
    result = await database.fetch_all(query=query, values={"cutoff": cutoff})
    return [StaleStandingsRow.model_validate(dict(row._mapping)) for row in result]


async def claim_standings_for_refresh(
    standings_id: StandingsId,
    cutoff: datetime_utc,
    claim_expired_before: datetime_utc,
    now: datetime_utc,
) -> bool:
    """
    Mark a stale row as being refreshed by this run.

    The staleness predicate is evaluated again inside the UPDATE, so a row that a concurrent run
    has refreshed (or is refreshing) in the meantime is not claimed twice.
    """
    claimed_id = await database.fetch_val(
        """
        UPDATE competition_standings
        SET refresh_claimed_at = :now
        WHERE id = :standings_id
          AND fetched_at < :cutoff
          AND (refresh_claimed_at IS NULL OR refresh_claimed_at < :claim_expired_before)
        RETURNING id
        """,
        values={
            "standings_id": standings_id,
            "cutoff": cutoff,
            "claim_expired_before": claim_expired_before,
            "now": now,
        },
    )
    return claimed_id is not None


async def store_refreshed_standings(
    standings_id: StandingsId, payload: dict[str, Any], fetched_at: datetime_utc
) -> None:
    await database.execute(
        """
        UPDATE competition_standings
        SET
            payload = :payload,
            fetched_at = GREATEST(fetched_at, :fetched_at),
            refresh_claimed_at = NULL
        WHERE id = :standings_id
        """,
        values={
            "standings_id": standings_id,
            "payload": json.dumps(payload),
            "fetched_at": fetched_at,
        },
    )


async def release_standings_claim(standings_id: StandingsId) -> None:
    await database.execute(
        "UPDATE competition_standings SET refresh_claimed_at = NULL WHERE id = :standings_id",
        values={"standings_id": standings_id},
    )


async def upsert_standings(
    competition_id: CompetitionId,
    season_id: SeasonId,
    payload: dict[str, Any],
    fetched_at: datetime_utc,
) -> CompetitionStandings:
    query = """
        INSERT INTO competition_standings (competition_id, season_id, payload, fetched_at)
        VALUES (:competition_id, :season_id, :payload, :fetched_at)
        ON CONFLICT (competition_id, season_id)
        DO UPDATE SET
            payload = EXCLUDED.payload,
            fetched_at = GREATEST(competition_standings.fetched_at, EXCLUDED.fetched_at),
            refresh_claimed_at = NULL
        RETURNING *
        """
    result = await database.fetch_one(
        query=query,
        values={
            "competition_id": competition_id,
            "season_id": season_id,
            "payload": json.dumps(payload),
            "fetched_at": fetched_at,
        },
    )
    assert result is not None
    return CompetitionStandings.model_validate(dict(result._mapping))


async def delete_standings_fetched_before(cutoff: datetime_utc) -> int:
    result = await database.fetch_all(
        """
        DELETE FROM competition_standings
        WHERE fetched_at < :cutoff
        RETURNING id
        """,
        values={"cutoff": cutoff},
    )
    return len(result)
