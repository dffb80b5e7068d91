from typing import Any

from heliclockter import datetime_utc

from quiniela.database import database
from quiniela.models.db.pool import Pool
from quiniela.models.db.prediction import Prediction
from quiniela.sql.matches import round_filter_sql, round_filter_values
from quiniela.utils.id_types import MatchId, PoolId, PredictionId, UserId


async def sql_upsert_prediction(
    pool_id: PoolId,
    match_id: MatchId,
    user_id: UserId,
    home_score: int,
    away_score: int,
    submitted_at: datetime_utc,
) -> Prediction:
    # Overwriting a guess drops its previous points, only the scoring engine sets them.
    query = """
        INSERT INTO predictions (
            pool_id, match_id, user_id, home_score, away_score, submitted_at, points, scored_at
        )
        VALUES (
            :pool_id, :match_id, :user_id, :home_score, :away_score, :submitted_at, NULL, NULL
        )
        ON CONFLICT (pool_id, match_id, user_id)
        DO UPDATE SET
            home_score = EXCLUDED.home_score,
            away_score = EXCLUDED.away_score,
            submitted_at = EXCLUDED.submitted_at,
            points = NULL,
            scored_at = NULL
        RETURNING *
        """
    result = await database.fetch_one(
        query=query,
        values={
            "pool_id": pool_id,
            "match_id": match_id,
            "user_id": user_id,
            "home_score": home_score,
            "away_score": away_score,
            "submitted_at": submitted_at,
        },
    )
    assert result is not None
    return Prediction.model_validate(dict(result._mapping))


async def get_prediction_by_id(prediction_id: PredictionId) -> Prediction | None:
    result = await database.fetch_one(
        "SELECT * FROM predictions WHERE id = :prediction_id",
        values={"prediction_id": prediction_id},
    )
    return Prediction.model_validate(dict(result._mapping)) if result is not None else None


async def sql_delete_prediction(prediction_id: PredictionId) -> None:
    await database.execute(
        "DELETE FROM predictions WHERE id = :prediction_id",
        values={"prediction_id": prediction_id},
    )


async def get_predictions_for_user_in_pool(user_id: UserId, pool_id: PoolId) -> list[Prediction]:
    query = """
        SELECT p.*
        FROM predictions p
        JOIN matches m ON m.id = p.match_id
        WHERE p.user_id = :user_id
          AND p.pool_id = :pool_id
        ORDER BY m.kickoff_at ASC, p.id ASC
        """
    result = await database.fetch_all(query=query, values={"user_id": user_id, "pool_id": pool_id})
    return [Prediction.model_validate(dict(row._mapping)) for row in result]


async def get_predictions_for_match_in_pool(match_id: MatchId, pool_id: PoolId) -> list[Prediction]:
    query = """
        SELECT *
        FROM predictions
        WHERE match_id = :match_id
          AND pool_id = :pool_id
        ORDER BY id ASC
        """
    result = await database.fetch_all(query=query, values={"match_id": match_id, "pool_id": pool_id})
    return [Prediction.model_validate(dict(row._mapping)) for row in result]


async def sql_set_prediction_points(
    points_by_prediction_id: dict[PredictionId, int], scored_at: datetime_utc
) -> None:
    if len(points_by_prediction_id) < 1:
        return

    await database.execute_many(
        query="""
            UPDATE predictions
            SET points = :points, scored_at = :scored_at
            WHERE id = :prediction_id
            """,
        values=[
            {"prediction_id": prediction_id, "points": points, "scored_at": scored_at}
            for prediction_id, points in points_by_prediction_id.items()
        ],
    )


async def get_point_totals_for_pool(pool: Pool) -> list[dict[str, Any]]:
    """
    Sum points per registered user over the predictions that count for this pool.

    Predictions on matches outside the pool's season or round filter are left out, unscored
    predictions count as zero.
    """
    rounds = pool.rule_set.rounds
    round_start = rounds.start if rounds is not None else None
    round_end = rounds.end if rounds is not None else None
    query = f"""
        WITH scoped_predictions AS (
            SELECT p.user_id, p.points
            FROM predictions p
            JOIN matches m ON m.id = p.match_id
            WHERE p.pool_id = :pool_id
              AND m.season_id = :season_id
              {round_filter_sql(round_start, round_end)}
        )
        SELECT
            r.user_id,
            u.name AS user_name,
            COALESCE(SUM(sp.points), 0) AS total_points,
            COUNT(sp.user_id) AS predictions_count,
            COUNT(sp.points) AS scored_count
        FROM registrations r
        JOIN users u ON u.id = r.user_id
        LEFT JOIN scoped_predictions sp ON sp.user_id = r.user_id
        WHERE r.pool_id = :pool_id
        GROUP BY r.user_id, u.name
        """
    result = await database.fetch_all(
        query=query,
        values={
            "pool_id": pool.id,
            "season_id": pool.season_id,
            **round_filter_values(round_start, round_end),
        },
    )
    return [dict(row._mapping) for row in result]
