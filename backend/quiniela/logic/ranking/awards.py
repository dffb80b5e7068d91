from heliclockter import datetime_utc

from quiniela.database import database
from quiniela.logic.ranking.leaderboard import compute_leaderboard
from quiniela.models.db.award import Award, AwardInsertable, LeaderboardSnapshotKind
from quiniela.models.pools import (
    AssignAwardsResult,
    AwardWinner,
    FinalizePoolResult,
    LeaderboardEntry,
    PrizeAwardResult,
)
from quiniela.sql.awards import (
    get_award_by_id,
    get_awarded_user_ids_for_prize,
    get_awards_for_pool,
    get_final_snapshot_for_pool,
    get_prizes_for_pool,
    insert_leaderboard_snapshot,
    sql_insert_awards,
    sql_set_award_delivered,
    sql_set_award_notified,
    sql_void_award,
)
from quiniela.sql.matches import count_matches_without_result
from quiniela.sql.pools import get_pool_by_id, insert_score_audit
from quiniela.utils.errors import InvalidArgument, NotFound
from quiniela.utils.id_types import AwardId, LeaderboardSnapshotId, PoolId
from quiniela.utils.logging import logger
from quiniela.utils.types import assert_some


async def assign_awards(
    pool_id: PoolId,
    dry_run: bool = False,
    leaderboard: list[LeaderboardEntry] | None = None,
    snapshot_id: LeaderboardSnapshotId | None = None,
) -> AssignAwardsResult:
    """
    Hand out the pool's prizes according to the current leaderboard.

    Prizes are walked in ascending `rank_from` order and every user whose rank falls in a prize's
    range gets one award for it, so tied users share a tier. Users who already hold an active
    award for a prize are left alone, which makes a rerun on an unchanged leaderboard a no-op.
    With `dry_run` the winners are computed but nothing is written, otherwise the run is
    recorded in the pool's score audit.
    """
    pool = await get_pool_by_id(pool_id)
    if pool is None:
        raise NotFound("Pool", pool_id)

    if leaderboard is None:
        leaderboard = await compute_leaderboard(pool_id)

    prizes = sorted(await get_prizes_for_pool(pool_id), key=lambda prize: (prize.rank_from, prize.id))
    awarded_at = datetime_utc.now()
    result = AssignAwardsResult(dry_run=dry_run)
    to_insert: list[AwardInsertable] = []

    for prize in prizes:
        already_awarded = await get_awarded_user_ids_for_prize(prize.id)
        prize_result = PrizeAwardResult(prize_id=prize.id, prize_title=prize.title)
        for entry in leaderboard:
            if not prize.covers_rank(entry.rank) or entry.user_id in already_awarded:
                continue

            prize_result.winners.append(AwardWinner(user_id=entry.user_id, rank=entry.rank))
            to_insert.append(
                AwardInsertable(
                    pool_id=pool_id,
                    prize_id=prize.id,
                    user_id=entry.user_id,
                    rank=entry.rank,
                    rank_from=prize.rank_from,
                    rank_to=prize.rank_to,
                    awarded_at=awarded_at,
                )
            )
        result.prizes.append(prize_result)

    if dry_run:
        result.awards_created = len(to_insert)
        return result

    result.awards_created = await sql_insert_awards(to_insert)
    await insert_score_audit(
        pool,
        {
            "type": "AWARD_PRIZES",
            "snapshot_id": int(snapshot_id) if snapshot_id is not None else None,
            "prizes_processed": len(prizes),
            "awards_created": result.awards_created,
            "results": [prize_result.model_dump(mode="json") for prize_result in result.prizes],
        },
    )
    logger.info(
        "Assigned awards: pool_id=%s prizes=%s awards_created=%s",
        int(pool_id),
        len(prizes),
        result.awards_created,
    )
    return result


async def finalize_pool(pool_id: PoolId, force: bool = False) -> FinalizePoolResult:
    pool = await get_pool_by_id(pool_id)
    if pool is None:
        raise NotFound("Pool", pool_id)

    rounds = pool.rule_set.rounds
    missing_results = await count_matches_without_result(
        pool.season_id,
        rounds.start if rounds is not None else None,
        rounds.end if rounds is not None else None,
    )
    if missing_results > 0 and not force:
        raise InvalidArgument(
            f"Pool has {missing_results} matches without a result", "POOL_NOT_FINISHED"
        )

    existing_snapshot = await get_final_snapshot_for_pool(pool_id)
    if existing_snapshot is not None and not force:
        raise InvalidArgument(
            f"Pool already has a final leaderboard snapshot ({int(existing_snapshot.id)})",
            "POOL_ALREADY_FINALIZED",
        )

    async with database.transaction():
        leaderboard = await compute_leaderboard(pool_id)
        snapshot_id = await insert_leaderboard_snapshot(
            pool_id,
            LeaderboardSnapshotKind.FINAL,
            [entry.model_dump(mode="json") for entry in leaderboard],
        )
        awards = await assign_awards(pool_id, leaderboard=leaderboard, snapshot_id=snapshot_id)

    logger.info(
        "Finalized pool: pool_id=%s entries=%s missing_results=%s forced=%s",
        int(pool_id),
        len(leaderboard),
        missing_results,
        force,
    )
    return FinalizePoolResult(
        snapshot_id=snapshot_id, entries_count=len(leaderboard), awards=awards
    )


async def list_awards(pool_id: PoolId, delivered: bool | None = None) -> list[Award]:
    if await get_pool_by_id(pool_id) is None:
        raise NotFound("Pool", pool_id)
    return await get_awards_for_pool(pool_id, delivered)


async def mark_award_delivered(
    award_id: AwardId, delivered_at: datetime_utc | None = None, notes: str | None = None
) -> Award:
    award = await sql_set_award_delivered(award_id, delivered_at or datetime_utc.now(), notes)
    if award is None:
        raise NotFound("Award", award_id)
    return award


async def mark_award_notified(award_id: AwardId) -> Award:
    award = await sql_set_award_notified(award_id)
    if award is None:
        raise NotFound("Award", award_id)
    return award


async def void_award(award_id: AwardId) -> Award:
    existing = await get_award_by_id(award_id)
    if existing is None:
        raise NotFound("Award", award_id)
    if existing.voided_at is not None:
        return existing

    award = assert_some(await sql_void_award(award_id, datetime_utc.now()))
    logger.info("Voided award: award_id=%s pool_id=%s", int(award_id), int(award.pool_id))
    return award
