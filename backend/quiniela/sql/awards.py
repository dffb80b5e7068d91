from typing import Any

from heliclockter import datetime_utc

from quiniela.database import database
from quiniela.models.db.award import (
    Award,
    AwardInsertable,
    LeaderboardSnapshot,
    LeaderboardSnapshotKind,
    Prize,
)
from quiniela.schema import leaderboard_snapshots
from quiniela.utils.id_types import AwardId, LeaderboardSnapshotId, PoolId, PrizeId, UserId


async def get_prizes_for_pool(pool_id: PoolId) -> list[Prize]:
    query = """
        SELECT id, pool_id, title, rank_from, rank_to
        FROM prizes
        WHERE pool_id = :pool_id
        ORDER BY rank_from ASC, id ASC
        """
    result = await database.fetch_all(query=query, values={"pool_id": pool_id})
    return [Prize.model_validate(dict(row._mapping)) for row in result]


async def get_awarded_user_ids_for_prize(prize_id: PrizeId) -> set[UserId]:
    query = """
        SELECT user_id
        FROM awards
        WHERE prize_id = :prize_id
          AND voided_at IS NULL
        """
    result = await database.fetch_all(query=query, values={"prize_id": prize_id})
    return {UserId(int(row._mapping["user_id"])) for row in result}


async def sql_insert_awards(awards: list[AwardInsertable]) -> int:
    """Insert awards, skipping any (pool, prize, user) that already holds an active award."""
    created = 0
    for award in awards:
        inserted_id = await database.fetch_val(
            """
            INSERT INTO awards (
                pool_id, prize_id, user_id, rank, rank_from, rank_to, awarded_at, notified
            )
            VALUES (
                :pool_id, :prize_id, :user_id, :rank, :rank_from, :rank_to, :awarded_at, :notified
            )
            ON CONFLICT (pool_id, prize_id, user_id) WHERE voided_at IS NULL
            DO NOTHING
            RETURNING id
            """,
            values=award.model_dump(),
        )
        if inserted_id is not None:
            created += 1
    return created


async def get_award_by_id(award_id: AwardId) -> Award | None:
    result = await database.fetch_one(
        "SELECT * FROM awards WHERE id = :award_id",
        values={"award_id": award_id},
    )
    return Award.model_validate(dict(result._mapping)) if result is not None else None


async def get_awards_for_pool(pool_id: PoolId, delivered: bool | None = None) -> list[Award]:
    delivered_filter = ""
    if delivered is True:
        delivered_filter = "AND delivered_at IS NOT NULL"
    elif delivered is False:
        delivered_filter = "AND delivered_at IS NULL"

    query = f"""
        SELECT *
        FROM awards
        WHERE pool_id = :pool_id
          AND voided_at IS NULL
          {delivered_filter}
        ORDER BY rank ASC, awarded_at DESC, id ASC
        """
    result = await database.fetch_all(query=query, values={"pool_id": pool_id})
    return [Award.model_validate(dict(row._mapping)) for row in result]


async def sql_set_award_delivered(
    award_id: AwardId, delivered_at: datetime_utc, notes: str | None
) -> Award | None:
    query = """
        UPDATE awards
        SET
            delivered_at = :delivered_at,
            notes = COALESCE(:notes, notes)
        WHERE id = :award_id
        RETURNING *
        """
    result = await database.fetch_one(
        query=query,
        values={"award_id": award_id, "delivered_at": delivered_at, "notes": notes},
    )
    return Award.model_validate(dict(result._mapping)) if result is not None else None


async def sql_set_award_notified(award_id: AwardId) -> Award | None:
    result = await database.fetch_one(
        "UPDATE awards SET notified = TRUE WHERE id = :award_id RETURNING *",
        values={"award_id": award_id},
    )
    return Award.model_validate(dict(result._mapping)) if result is not None else None


async def sql_void_award(award_id: AwardId, voided_at: datetime_utc) -> Award | None:
    query = """
        UPDATE awards
        SET voided_at = COALESCE(voided_at, :voided_at)
        WHERE id = :award_id
        RETURNING *
        """
    result = await database.fetch_one(
        query=query, values={"award_id": award_id, "voided_at": voided_at}
    )
    return Award.model_validate(dict(result._mapping)) if result is not None else None


async def insert_leaderboard_snapshot(
    pool_id: PoolId, kind: LeaderboardSnapshotKind, entries: list[dict[str, Any]]
) -> LeaderboardSnapshotId:
    snapshot_id = await database.execute(
        query=leaderboard_snapshots.insert(),
        values={
            "pool_id": pool_id,
            "kind": kind.value,
            "entries": entries,
            "created": datetime_utc.now(),
        },
    )
    return LeaderboardSnapshotId(int(snapshot_id))


async def get_final_snapshot_for_pool(pool_id: PoolId) -> LeaderboardSnapshot | None:
    query = """
        SELECT id, pool_id, kind, created
        FROM leaderboard_snapshots
        WHERE pool_id = :pool_id
          AND kind = 'FINAL'
        ORDER BY created DESC, id DESC
        LIMIT 1
        """
    result = await database.fetch_one(query=query, values={"pool_id": pool_id})
    return LeaderboardSnapshot.model_validate(dict(result._mapping)) if result is not None else None
