from typing import Any

import pytest
from heliclockter import datetime_utc, timedelta

from quiniela.logic.predictions import submission as submission_logic
from quiniela.models.db.match import Match
from quiniela.models.db.pool import Pool, RuleSet
from quiniela.models.db.prediction import Prediction
from quiniela.models.pools import PredictionBody, PredictionSkipReason
from quiniela.utils.errors import Forbidden, InvalidArgument, MatchLocked, NotFound
from quiniela.utils.id_types import MatchId, PoolId, PredictionId, SeasonId, TenantId, UserId

NOW = datetime_utc.now()


class _DummyTransaction:
    async def __aenter__(self) -> "_DummyTransaction":
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
        return False


def _build_pool(rule_set: RuleSet | None = None, is_retired: bool = False) -> Pool:
    return Pool(
        id=PoolId(1),
        tenant_id=TenantId(1),
        season_id=SeasonId(10),
        slug="friends",
        name="Friends",
        rule_set=rule_set or RuleSet(exact=5, diff=4, sign=3),
        is_retired=is_retired,
        created=NOW,
    )


def _build_match(match_id: int, kickoff_at: datetime_utc, round_: int = 1, season_id: int = 10) -> Match:
    return Match(
        id=MatchId(match_id),
        season_id=SeasonId(season_id),
        round=round_,
        kickoff_at=kickoff_at,
    )


class _FakeStore:
    def __init__(self, matches: list[Match], pool: Pool | None = None, registered: bool = True) -> None:
        self.matches = {match.id: match for match in matches}
        self.pool = pool or _build_pool()
        self.registered = registered
        self.predictions: dict[tuple[MatchId, UserId], Prediction] = {}

    def install(self, monkeypatch: pytest.MonkeyPatch) -> None:
        async def fake_get_pool_by_id(pool_id: PoolId) -> Pool | None:
            return self.pool if pool_id == self.pool.id else None

        async def fake_user_has_registration(_: UserId, __: PoolId) -> bool:
            return self.registered

        async def fake_get_match_for_write(match_id: MatchId) -> Match | None:
            return self.matches.get(match_id)

        async def fake_upsert(**kwargs: Any) -> Prediction:
            prediction = Prediction(id=PredictionId(len(self.predictions) + 1), **kwargs)
            self.predictions[(prediction.match_id, prediction.user_id)] = prediction
            return prediction

        monkeypatch.setattr(submission_logic, "get_pool_by_id", fake_get_pool_by_id)
        monkeypatch.setattr(submission_logic, "user_has_registration", fake_user_has_registration)
        monkeypatch.setattr(submission_logic, "get_match_for_write", fake_get_match_for_write)
        monkeypatch.setattr(submission_logic, "sql_upsert_prediction", fake_upsert)
        monkeypatch.setattr(submission_logic.database, "transaction", lambda: _DummyTransaction())


@pytest.mark.asyncio
async def test_submit_prediction_saves_open_match(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _FakeStore([_build_match(1, NOW + timedelta(hours=2))])
    store.install(monkeypatch)

    prediction = await submission_logic.submit_prediction(UserId(5), PoolId(1), MatchId(1), 2, 1)

    assert (prediction.home_score, prediction.away_score) == (2, 1)
    assert prediction.points is None
    assert (MatchId(1), UserId(5)) in store.predictions


@pytest.mark.asyncio
@pytest.mark.parametrize(("home_score", "away_score"), [(-1, 0), (0, 100), (120, -3)])
async def test_submit_prediction_rejects_out_of_range_scores(
    monkeypatch: pytest.MonkeyPatch, home_score: int, away_score: int
) -> None:
    store = _FakeStore([_build_match(1, NOW + timedelta(hours=2))])
    store.install(monkeypatch)

    with pytest.raises(InvalidArgument):
        await submission_logic.submit_prediction(UserId(5), PoolId(1), MatchId(1), home_score, away_score)

    assert store.predictions == {}


@pytest.mark.asyncio
async def test_submit_prediction_rejects_locked_match(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _FakeStore([_build_match(1, NOW - timedelta(minutes=1))])
    store.install(monkeypatch)

    with pytest.raises(Forbidden) as exc_info:
        await submission_logic.submit_prediction(UserId(5), PoolId(1), MatchId(1), 1, 1)

    assert exc_info.value.code == "MATCH_LOCKED"
    assert store.predictions == {}


@pytest.mark.asyncio
async def test_submit_prediction_requires_registration(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _FakeStore([_build_match(1, NOW + timedelta(hours=2))], registered=False)
    store.install(monkeypatch)

    with pytest.raises(Forbidden) as exc_info:
        await submission_logic.submit_prediction(UserId(5), PoolId(1), MatchId(1), 1, 0)

    assert exc_info.value.code == "NOT_REGISTERED"


@pytest.mark.asyncio
async def test_submit_prediction_rejects_retired_pool(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _FakeStore([_build_match(1, NOW + timedelta(hours=2))], pool=_build_pool(is_retired=True))
    store.install(monkeypatch)

    with pytest.raises(Forbidden):
        await submission_logic.submit_prediction(UserId(5), PoolId(1), MatchId(1), 1, 0)


@pytest.mark.asyncio
async def test_submit_prediction_unknown_pool_and_match(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _FakeStore([])
    store.install(monkeypatch)

    with pytest.raises(NotFound):
        await submission_logic.submit_prediction(UserId(5), PoolId(2), MatchId(1), 1, 0)
    with pytest.raises(NotFound):
        await submission_logic.submit_prediction(UserId(5), PoolId(1), MatchId(1), 1, 0)


@pytest.mark.asyncio
async def test_submit_prediction_rejects_match_outside_round_filter(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    pool = _build_pool(
        RuleSet.model_validate(
            {"exact": 5, "diff": 4, "sign": 3, "rounds": {"start": 1, "end": 3}}
        )
    )
    store = _FakeStore([_build_match(1, NOW + timedelta(hours=2), round_=4)], pool=pool)
    store.install(monkeypatch)

    with pytest.raises(InvalidArgument) as exc_info:
        await submission_logic.submit_prediction(UserId(5), PoolId(1), MatchId(1), 1, 0)

    assert exc_info.value.code == "MATCH_OUT_OF_SCOPE"


@pytest.mark.asyncio
async def test_submission_straddling_kickoff_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    kickoff = NOW + timedelta(seconds=30)
    store = _FakeStore([_build_match(1, kickoff)])
    store.install(monkeypatch)

    clock = {"now": kickoff - timedelta(seconds=1)}

    class _Clock:
        @staticmethod
        def now() -> datetime_utc:
            return clock["now"]

    async def fake_get_match_for_write(match_id: MatchId) -> Match | None:
        # Kickoff passes while the request is waiting for the row lock.
        clock["now"] = kickoff + timedelta(seconds=1)
        return store.matches.get(match_id)

    monkeypatch.setattr(submission_logic, "datetime_utc", _Clock)
    monkeypatch.setattr(submission_logic, "get_match_for_write", fake_get_match_for_write)

    with pytest.raises(MatchLocked):
        await submission_logic.submit_prediction(UserId(5), PoolId(1), MatchId(1), 3, 2)

    assert store.predictions == {}


@pytest.mark.asyncio
async def test_bulk_save_skips_locked_match(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _FakeStore(
        [
            _build_match(1, NOW + timedelta(hours=1)),
            _build_match(2, NOW - timedelta(minutes=5)),
            _build_match(3, NOW + timedelta(days=1)),
        ]
    )
    store.install(monkeypatch)

    result = await submission_logic.bulk_save_predictions(
        UserId(5),
        PoolId(1),
        [
            PredictionBody(match_id=MatchId(1), home_score=1, away_score=0),
            PredictionBody(match_id=MatchId(2), home_score=2, away_score=2),
            PredictionBody(match_id=MatchId(3), home_score=0, away_score=3),
        ],
    )

    assert [int(prediction.match_id) for prediction in result.saved] == [1, 3]
    assert len(result.skipped) == 1
    assert result.skipped[0].match_id == MatchId(2)
    assert result.skipped[0].reason == PredictionSkipReason.LOCKED


@pytest.mark.asyncio
async def test_bulk_save_reports_each_skip_reason(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _FakeStore(
        [
            _build_match(1, NOW + timedelta(hours=1)),
            _build_match(2, NOW + timedelta(hours=1), season_id=99),
        ]
    )
    store.install(monkeypatch)

    result = await submission_logic.bulk_save_predictions(
        UserId(5),
        PoolId(1),
        [
            PredictionBody(match_id=MatchId(1), home_score=1, away_score=100),
            PredictionBody(match_id=MatchId(2), home_score=1, away_score=0),
            PredictionBody(match_id=MatchId(3), home_score=1, away_score=0),
            PredictionBody(match_id=MatchId(1), home_score=1, away_score=1),
        ],
    )

    assert [skip.reason for skip in result.skipped] == [
        PredictionSkipReason.INVALID_SCORE,
        PredictionSkipReason.OUT_OF_SCOPE,
        PredictionSkipReason.MATCH_NOT_FOUND,
    ]
    assert [int(prediction.match_id) for prediction in result.saved] == [1]


@pytest.mark.asyncio
async def test_bulk_save_requires_registration(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _FakeStore([_build_match(1, NOW + timedelta(hours=1))], registered=False)
    store.install(monkeypatch)

    with pytest.raises(Forbidden):
        await submission_logic.bulk_save_predictions(
            UserId(5), PoolId(1), [PredictionBody(match_id=MatchId(1), home_score=1, away_score=0)]
        )


@pytest.mark.asyncio
async def test_delete_prediction_only_by_owner(monkeypatch: pytest.MonkeyPatch) -> None:
    prediction = Prediction(
        id=PredictionId(3),
        pool_id=PoolId(1),
        match_id=MatchId(1),
        user_id=UserId(5),
        home_score=1,
        away_score=0,
        submitted_at=NOW,
    )
    deleted: list[PredictionId] = []

    async def fake_get_prediction_by_id(_: PredictionId) -> Prediction:
        return prediction

    async def fake_get_match_for_write(_: MatchId) -> Match:
        return _build_match(1, NOW + timedelta(hours=1))

    async def fake_delete(prediction_id: PredictionId) -> None:
        deleted.append(prediction_id)

    monkeypatch.setattr(submission_logic, "get_prediction_by_id", fake_get_prediction_by_id)
    monkeypatch.setattr(submission_logic, "get_match_for_write", fake_get_match_for_write)
    monkeypatch.setattr(submission_logic, "sql_delete_prediction", fake_delete)
    monkeypatch.setattr(submission_logic.database, "transaction", lambda: _DummyTransaction())

    with pytest.raises(Forbidden):
        await submission_logic.delete_prediction(UserId(6), PredictionId(3))

    await submission_logic.delete_prediction(UserId(5), PredictionId(3))
    assert deleted == [PredictionId(3)]
