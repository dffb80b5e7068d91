from heliclockter import datetime_utc

from quiniela.database import database
from quiniela.logic.predictions.lock import is_locked
from quiniela.models.db.pool import Pool
from quiniela.models.db.prediction import Prediction
from quiniela.models.pools import (
    BulkSaveResult,
    PredictionBody,
    PredictionSkip,
    PredictionSkipReason,
)
from quiniela.sql.matches import get_match_for_write
from quiniela.sql.pools import get_pool_by_id, user_has_registration
from quiniela.sql.predictions import (
    get_prediction_by_id,
    get_predictions_for_user_in_pool,
    sql_delete_prediction,
    sql_upsert_prediction,
)
from quiniela.utils.errors import (
    Forbidden,
    InvalidArgument,
    MatchLocked,
    MatchOutOfScope,
    NotFound,
)
from quiniela.utils.id_types import MatchId, PoolId, PredictionId, UserId
from quiniela.utils.logging import logger

MIN_SCORE = 0
MAX_SCORE = 99


def is_valid_score(score: int) -> bool:
    return MIN_SCORE <= score <= MAX_SCORE


def validate_scores(home_score: int, away_score: int) -> None:
    if not is_valid_score(home_score) or not is_valid_score(away_score):
        raise InvalidArgument(
            f"Scores must be between {MIN_SCORE} and {MAX_SCORE}", "INVALID_SCORE"
        )


async def get_writable_pool_for_user(user_id: UserId, pool_id: PoolId) -> Pool:
    pool = await get_pool_by_id(pool_id)
    if pool is None:
        raise NotFound("Pool", pool_id)
    if pool.is_retired:
        raise Forbidden("Pool is retired", "POOL_RETIRED")
    if not await user_has_registration(user_id, pool_id):
        raise Forbidden("User is not registered in this pool", "NOT_REGISTERED")
    return pool


async def _write_prediction(
    user_id: UserId, pool: Pool, match_id: MatchId, home_score: int, away_score: int
) -> Prediction:
    async with database.transaction():
        match = await get_match_for_write(match_id)
        if match is None:
            raise NotFound("Match", match_id)
        if match.season_id != pool.season_id or not pool.rule_set.includes_round(match.round):
            raise MatchOutOfScope(f"Match {match_id} does not count for pool {pool.id}")
        if is_locked(match, datetime_utc.now()):
            raise MatchLocked(f"Match {match_id} is locked for predictions")

        return await sql_upsert_prediction(
            pool_id=pool.id,
            match_id=match_id,
            user_id=user_id,
            home_score=home_score,
            away_score=away_score,
            submitted_at=datetime_utc.now(),
        )


async def submit_prediction(
    user_id: UserId, pool_id: PoolId, match_id: MatchId, home_score: int, away_score: int
) -> Prediction:
    validate_scores(home_score, away_score)
    pool = await get_writable_pool_for_user(user_id, pool_id)
    return await _write_prediction(user_id, pool, match_id, home_score, away_score)


async def bulk_save_predictions(
    user_id: UserId, pool_id: PoolId, items: list[PredictionBody]
) -> BulkSaveResult:
    """
    Save a batch of predictions, one transaction per item.

    Pool and registration problems reject the whole batch. Problems with a single item (bad
    score, locked, unknown or out-of-scope match) only skip that item, and the lock is checked
    at the moment each item is written.
    """
    pool = await get_writable_pool_for_user(user_id, pool_id)
    result = BulkSaveResult()

    for item in items:
        if not is_valid_score(item.home_score) or not is_valid_score(item.away_score):
            result.skipped.append(
                PredictionSkip(match_id=item.match_id, reason=PredictionSkipReason.INVALID_SCORE)
            )
            continue

        try:
            prediction = await _write_prediction(
                user_id, pool, item.match_id, item.home_score, item.away_score
            )
        except MatchLocked:
            reason = PredictionSkipReason.LOCKED
        except MatchOutOfScope:
            reason = PredictionSkipReason.OUT_OF_SCOPE
        except NotFound:
            reason = PredictionSkipReason.MATCH_NOT_FOUND
        else:
            result.saved.append(prediction)
            continue

        result.skipped.append(PredictionSkip(match_id=item.match_id, reason=reason))

    if len(result.skipped) > 0:
        logger.info(
            "Bulk prediction save skipped items: pool_id=%s user_id=%s saved=%s skipped=%s",
            int(pool_id),
            int(user_id),
            len(result.saved),
            len(result.skipped),
        )
    return result


async def get_predictions_for_pool(user_id: UserId, pool_id: PoolId) -> list[Prediction]:
    pool = await get_pool_by_id(pool_id)
    if pool is None:
        raise NotFound("Pool", pool_id)
    if not await user_has_registration(user_id, pool_id):
        raise Forbidden("User is not registered in this pool", "NOT_REGISTERED")
    return await get_predictions_for_user_in_pool(user_id, pool_id)


async def delete_prediction(user_id: UserId, prediction_id: PredictionId) -> None:
    prediction = await get_prediction_by_id(prediction_id)
    if prediction is None:
        raise NotFound("Prediction", prediction_id)
    if prediction.user_id != user_id:
        raise Forbidden("Only the owner can delete a prediction", "NOT_OWNER")

    async with database.transaction():
        match = await get_match_for_write(prediction.match_id)
        if match is None:
            raise NotFound("Match", prediction.match_id)
        if is_locked(match, datetime_utc.now()):
            raise MatchLocked(f"Match {match.id} is locked for predictions")
        await sql_delete_prediction(prediction_id)
