from heliclockter import datetime_utc

from quiniela.database import database
from quiniela.models.db.match import Match
from quiniela.utils.id_types import MatchId, SeasonId
from quiniela.utils.types import dict_without_none


async def get_match_by_id(match_id: MatchId) -> Match | None:
    result = await database.fetch_one(
        "SELECT * FROM matches WHERE id = :match_id",
        values={"match_id": match_id},
    )
    return Match.model_validate(dict(result._mapping)) if result is not None else None


async def get_match_for_write(match_id: MatchId) -> Match | None:
    """
    Read a match while holding a share lock on its row until the surrounding transaction ends.

    Result and lock override updates take a conflicting row lock, so neither a prediction write
    nor a rescore interleaves with an operator locking the match or correcting its result.
    """
    result = await database.fetch_one(
        "SELECT * FROM matches WHERE id = :match_id FOR SHARE",
        values={"match_id": match_id},
    )
    return Match.model_validate(dict(result._mapping)) if result is not None else None


async def sql_set_match_result(
    match_id: MatchId, home_score: int, away_score: int, recorded_at: datetime_utc
) -> Match | None:
    query = """
        UPDATE matches
        SET
            home_score = :home_score,
            away_score = :away_score,
            result_recorded_at = :recorded_at
        WHERE id = :match_id
        RETURNING *
        """
    result = await database.fetch_one(
        query=query,
        values={
            "match_id": match_id,
            "home_score": home_score,
            "away_score": away_score,
            "recorded_at": recorded_at,
        },
    )
    return Match.model_validate(dict(result._mapping)) if result is not None else None


async def sql_set_match_lock_override(match_id: MatchId, lock_override: bool | None) -> Match | None:
    query = """
        UPDATE matches
        SET lock_override = :lock_override
        WHERE id = :match_id
        RETURNING *
        """
    result = await database.fetch_one(
        query=query, values={"match_id": match_id, "lock_override": lock_override}
    )
    return Match.model_validate(dict(result._mapping)) if result is not None else None


def round_filter_sql(round_start: int | None, round_end: int | None, alias: str = "m") -> str:
    round_filter = ""
    if round_start is not None:
        round_filter += f" AND {alias}.round >= :round_start"
    if round_end is not None:
        round_filter += f" AND {alias}.round <= :round_end"
    return round_filter


def round_filter_values(round_start: int | None, round_end: int | None) -> dict[str, int]:
    return dict_without_none({"round_start": round_start, "round_end": round_end})


async def get_matches_with_result_in_season(
    season_id: SeasonId, round_start: int | None = None, round_end: int | None = None
) -> list[Match]:
    query = f"""
        SELECT m.*
        FROM matches m
        WHERE m.season_id = :season_id
          AND m.home_score IS NOT NULL
          AND m.away_score IS NOT NULL
          {round_filter_sql(round_start, round_end)}
        ORDER BY m.kickoff_at ASC, m.id ASC
        """
    values = {"season_id": season_id, **round_filter_values(round_start, round_end)}
    result = await database.fetch_all(query=query, values=values)
    return [Match.model_validate(dict(row._mapping)) for row in result]


async def count_matches_without_result(
    season_id: SeasonId, round_start: int | None = None, round_end: int | None = None
) -> int:
    query = f"""
        SELECT count(*)
        FROM matches m
        WHERE m.season_id = :season_id
          AND (m.home_score IS NULL OR m.away_score IS NULL)
          {round_filter_sql(round_start, round_end)}
        """
    values = {"season_id": season_id, **round_filter_values(round_start, round_end)}
    return int(await database.fetch_val(query=query, values=values) or 0)
