from typing import Any

import pytest
from heliclockter import datetime_utc

from quiniela.logic.ranking import leaderboard as leaderboard_logic
from quiniela.logic.ranking.leaderboard import rank_entries
from quiniela.models.db.pool import DEFAULT_RULE_SET, Pool, RuleSet
from quiniela.sql import predictions as predictions_sql
from quiniela.utils.errors import NotFound
from quiniela.utils.id_types import PoolId, SeasonId, TenantId


def _totals(*points: int) -> list[dict[str, Any]]:
    return [
        {"user_id": index + 1, "user_name": f"user-{index + 1}", "total_points": value}
        for index, value in enumerate(points)
    ]


def test_rank_entries_uses_competition_ranking() -> None:
    entries = rank_entries(_totals(50, 50, 40))

    assert [entry.rank for entry in entries] == [1, 1, 3]
    assert [entry.total_points for entry in entries] == [50, 50, 40]


def test_rank_entries_sorts_by_points_then_user_id() -> None:
    entries = rank_entries(_totals(10, 30, 30, 0))

    assert [int(entry.user_id) for entry in entries] == [2, 3, 1, 4]
    assert [entry.rank for entry in entries] == [1, 1, 3, 4]


def test_rank_entries_counts_missing_points_as_zero() -> None:
    entries = rank_entries([{"user_id": 7, "total_points": None}, {"user_id": 3, "total_points": 0}])

    assert [int(entry.user_id) for entry in entries] == [3, 7]
    assert [entry.rank for entry in entries] == [1, 1]


def test_rank_entries_empty() -> None:
    assert rank_entries([]) == []


@pytest.mark.asyncio
async def test_compute_leaderboard(monkeypatch: pytest.MonkeyPatch) -> None:
    pool = Pool(
        id=PoolId(1),
        tenant_id=TenantId(1),
        season_id=SeasonId(1),
        slug="office",
        name="Office pool",
        rule_set=DEFAULT_RULE_SET,
        created=datetime_utc.now(),
    )

    async def fake_get_pool_by_id(_: PoolId) -> Pool:
        return pool

    async def fake_get_point_totals_for_pool(_: Pool) -> list[dict[str, Any]]:
        return _totals(12, 20, 12)

    monkeypatch.setattr(leaderboard_logic, "get_pool_by_id", fake_get_pool_by_id)
    monkeypatch.setattr(leaderboard_logic, "get_point_totals_for_pool", fake_get_point_totals_for_pool)

    entries = await leaderboard_logic.compute_leaderboard(PoolId(1))

    assert [(int(entry.user_id), entry.rank) for entry in entries] == [(2, 1), (1, 2), (3, 2)]


@pytest.mark.asyncio
async def test_compute_leaderboard_unknown_pool(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_get_pool_by_id(_: PoolId) -> None:
        return None

    monkeypatch.setattr(leaderboard_logic, "get_pool_by_id", fake_get_pool_by_id)

    with pytest.raises(NotFound):
        await leaderboard_logic.compute_leaderboard(PoolId(9))


class _Row:
    def __init__(self, mapping: dict[str, Any]) -> None:
        self._mapping = mapping


def _pool_with_rounds(rounds: dict[str, int] | None) -> Pool:
    return Pool(
        id=PoolId(4),
        tenant_id=TenantId(1),
        season_id=SeasonId(7),
        slug="knockouts",
        name="Knockouts",
        rule_set=RuleSet.model_validate({"exact": 5, "diff": 4, "sign": 3, "rounds": rounds}),
        created=datetime_utc.now(),
    )


@pytest.mark.asyncio
async def test_point_totals_only_sum_matches_in_pool_scope(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, dict[str, Any]]] = []

    async def fake_fetch_all(query: str, values: dict[str, Any]) -> list[_Row]:
        calls.append((query, values))
        return [_Row({"user_id": 1, "user_name": "Ana", "total_points": 9})]

    monkeypatch.setattr(predictions_sql.database, "fetch_all", fake_fetch_all)

    totals = await predictions_sql.get_point_totals_for_pool(_pool_with_rounds({"start": 2, "end": 3}))

    query, values = calls[0]
    assert "m.season_id = :season_id" in query
    assert "m.round >= :round_start" in query
    assert "m.round <= :round_end" in query
    assert values == {"pool_id": PoolId(4), "season_id": SeasonId(7), "round_start": 2, "round_end": 3}
    assert totals == [{"user_id": 1, "user_name": "Ana", "total_points": 9}]


@pytest.mark.asyncio
async def test_point_totals_without_round_filter(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, dict[str, Any]]] = []

    async def fake_fetch_all(query: str, values: dict[str, Any]) -> list[_Row]:
        calls.append((query, values))
        return []

    monkeypatch.setattr(predictions_sql.database, "fetch_all", fake_fetch_all)

    await predictions_sql.get_point_totals_for_pool(_pool_with_rounds(None))

    query, values = calls[0]
    assert "m.season_id = :season_id" in query
    assert "m.round" not in query
    assert values == {"pool_id": PoolId(4), "season_id": SeasonId(7)}
