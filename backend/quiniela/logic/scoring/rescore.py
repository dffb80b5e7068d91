import time
from collections import Counter
from typing import Any

from heliclockter import datetime_utc

from quiniela.config import config
from quiniela.database import database
from quiniela.logic.scoring.engine import ScorePair, score_prediction
from quiniela.models.db.match import Match
from quiniela.models.db.pool import Pool, parse_rule_set
from quiniela.models.pools import RescoreFailure, RescoreSummary
from quiniela.sql.matches import (
    get_match_for_write,
    get_matches_with_result_in_season,
    sql_set_match_result,
)
from quiniela.sql.pools import (
    get_pool_by_id,
    get_pools_with_predictions_for_match,
    insert_score_audit,
    sql_update_pool_rule_set,
)
from quiniela.sql.predictions import get_predictions_for_match_in_pool, sql_set_prediction_points
from quiniela.utils.errors import InvalidArgument, NotFound
from quiniela.utils.id_types import MatchId, PoolId, PredictionId
from quiniela.utils.logging import logger


def match_counts_for_pool(match: Match, pool: Pool) -> bool:
    return match.season_id == pool.season_id and pool.rule_set.includes_round(match.round)


async def _rescore_match_in_pool(match: Match, pool: Pool, scored_at: datetime_utc) -> int:
    assert match.home_score is not None and match.away_score is not None
    actual = ScorePair(match.home_score, match.away_score)
    predictions = await get_predictions_for_match_in_pool(match.id, pool.id)

    points_by_prediction_id: dict[PredictionId, int] = {}
    tiers: Counter[str] = Counter()
    for prediction in predictions:
        breakdown = score_prediction(
            ScorePair(prediction.home_score, prediction.away_score), actual, pool.rule_set
        )
        points_by_prediction_id[prediction.id] = breakdown.points
        tiers[breakdown.tier.value] += 1

    await sql_set_prediction_points(points_by_prediction_id, scored_at)
    details: dict[str, Any] = {
        "match_id": int(match.id),
        "result": [actual.home, actual.away],
        "predictions_scored": len(points_by_prediction_id),
        "tiers": dict(tiers),
    }
    await insert_score_audit(pool, details)
    return len(points_by_prediction_id)


async def rescore_match(match_id: MatchId, *, manage_transaction: bool = True) -> int:
    """
    Recompute the points of every prediction on a match, in every pool it counts for.

    Points are always derived from the stored result and the pool's current rule set, so a
    rerun writes the same values again. A match without a result scores nothing.
    The match row is read under a share lock inside the transaction that writes the points, so
    a result correction recorded concurrently is either seen or waits for this run to commit.
    Returns the number of predictions that were scored.
    """
    started_at = time.monotonic()
    pools_count = 0

    async def rescore_inside_transaction() -> int:
        nonlocal pools_count
        match = await get_match_for_write(match_id)
        if match is None:
            raise NotFound("Match", match_id)
        if not match.has_result:
            return 0

        pools = [
            pool
            for pool in await get_pools_with_predictions_for_match(match_id)
            if match_counts_for_pool(match, pool)
        ]
        pools_count = len(pools)
        scored_at = datetime_utc.now()
        scored = 0
        for pool in pools:
            scored += await _rescore_match_in_pool(match, pool, scored_at)
        return scored

    if manage_transaction:
        async with database.transaction():
            scored = await rescore_inside_transaction()
    else:
        scored = await rescore_inside_transaction()

    duration_ms = int((time.monotonic() - started_at) * 1000)
    if duration_ms >= config.rescore_warn_ms:
        logger.warning(
            "Match rescoring was slow: match_id=%s pools=%s duration_ms=%s",
            int(match_id),
            pools_count,
            duration_ms,
        )
    return scored


async def rescore_matches(match_ids: list[MatchId]) -> RescoreSummary:
    """Rescore a wave of matches. One failing match does not stop the others."""
    summary = RescoreSummary()
    for match_id in match_ids:
        try:
            summary.predictions_scored += await rescore_match(match_id)
        except Exception as exc:
            logger.warning("Failed to rescore match: match_id=%s error=%s", int(match_id), exc)
            summary.failed.append(RescoreFailure(match_id=match_id, error=str(exc)))
        else:
            summary.rescored_matches.append(match_id)
    return summary


async def record_match_result(match_id: MatchId, home_score: int, away_score: int) -> int:
    if home_score < 0 or away_score < 0:
        raise InvalidArgument("Result scores must not be negative", "INVALID_SCORE")

    async with database.transaction():
        match = await sql_set_match_result(match_id, home_score, away_score, datetime_utc.now())
        if match is None:
            raise NotFound("Match", match_id)
        scored = await rescore_match(match_id, manage_transaction=False)

    logger.info(
        "Recorded match result: match_id=%s result=%s-%s predictions_scored=%s",
        int(match_id),
        home_score,
        away_score,
        scored,
    )
    return scored


async def rescore_pool(pool: Pool) -> RescoreSummary:
    rounds = pool.rule_set.rounds
    matches = await get_matches_with_result_in_season(
        pool.season_id,
        rounds.start if rounds is not None else None,
        rounds.end if rounds is not None else None,
    )
    return await rescore_matches([match.id for match in matches])


async def update_pool_rule_set(pool_id: PoolId, rule_set: Any) -> tuple[Pool, RescoreSummary]:
    parsed = parse_rule_set(rule_set)
    pool = await sql_update_pool_rule_set(pool_id, parsed)
    if pool is None:
        raise NotFound("Pool", pool_id)

    logger.info("Updated pool rule set: pool_id=%s rule_set=%s", int(pool_id), parsed.model_dump())
    return pool, await rescore_pool(pool)


async def rescore_pool_by_id(pool_id: PoolId) -> RescoreSummary:
    pool = await get_pool_by_id(pool_id)
    if pool is None:
        raise NotFound("Pool", pool_id)
    return await rescore_pool(pool)
