from typing import Any

from quiniela.models.pools import LeaderboardEntry
from quiniela.sql.pools import get_pool_by_id
from quiniela.sql.predictions import get_point_totals_for_pool
from quiniela.utils.errors import NotFound
from quiniela.utils.id_types import PoolId, UserId


def rank_entries(totals: list[dict[str, Any]]) -> list[LeaderboardEntry]:
    """
    Standard competition ranking on total points: equal totals share a rank and the next rank
    skips the tied positions, so [50, 50, 40] ranks as [1, 1, 3]. Ties are listed by user id.
    """
    entries = sorted(
        (
            LeaderboardEntry(
                user_id=UserId(int(row["user_id"])),
                user_name=row.get("user_name"),
                total_points=int(row.get("total_points") or 0),
                predictions_count=int(row.get("predictions_count") or 0),
                scored_count=int(row.get("scored_count") or 0),
            )
            for row in totals
        ),
        key=lambda entry: (-entry.total_points, entry.user_id),
    )

    previous_points: int | None = None
    previous_rank = 0
    for position, entry in enumerate(entries, start=1):
        if entry.total_points != previous_points:
            previous_rank = position
            previous_points = entry.total_points
        entry.rank = previous_rank
    return entries


async def compute_leaderboard(pool_id: PoolId) -> list[LeaderboardEntry]:
    pool = await get_pool_by_id(pool_id)
    if pool is None:
        raise NotFound("Pool", pool_id)
    return rank_entries(await get_point_totals_for_pool(pool))
