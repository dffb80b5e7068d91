import json
from typing import Any

from heliclockter import datetime_utc

from quiniela.database import database
from quiniela.models.db.pool import Pool, RuleSet
from quiniela.schema import score_audits
from quiniela.utils.id_types import MatchId, PoolId, UserId


async def get_pool_by_id(pool_id: PoolId) -> Pool | None:
    result = await database.fetch_one(
        "SELECT * FROM pools WHERE id = :pool_id",
        values={"pool_id": pool_id},
    )
    return Pool.model_validate(dict(result._mapping)) if result is not None else None


async def user_has_registration(user_id: UserId, pool_id: PoolId) -> bool:
    query = """
        SELECT 1
        FROM registrations
        WHERE user_id = :user_id
          AND pool_id = :pool_id
        LIMIT 1
        """
    result = await database.fetch_one(query=query, values={"user_id": user_id, "pool_id": pool_id})
    return result is not None


async def get_pools_with_predictions_for_match(match_id: MatchId) -> list[Pool]:
    query = """
        SELECT pl.*
        FROM pools pl
        WHERE pl.id IN (
            SELECT DISTINCT p.pool_id
            FROM predictions p
            WHERE p.match_id = :match_id
        )
        ORDER BY pl.id ASC
        """
    result = await database.fetch_all(query=query, values={"match_id": match_id})
    return [Pool.model_validate(dict(row._mapping)) for row in result]


async def sql_update_pool_rule_set(pool_id: PoolId, rule_set: RuleSet) -> Pool | None:
    query = """
        UPDATE pools
        SET rule_set = :rule_set
        WHERE id = :pool_id
        RETURNING *
        """
    result = await database.fetch_one(
        query=query,
        values={"pool_id": pool_id, "rule_set": rule_set.model_dump_json()},
    )
    return Pool.model_validate(dict(result._mapping)) if result is not None else None


async def insert_score_audit(pool: Pool, details: dict[str, Any]) -> None:
    await database.execute(
        query=score_audits.insert(),
        values={
            "pool_id": pool.id,
            "rule_snapshot": json.loads(pool.rule_set.model_dump_json()),
            "details": details,
            "run_at": datetime_utc.now(),
        },
    )
