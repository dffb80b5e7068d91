from typing import Any

import pytest
from heliclockter import datetime_utc, timedelta
from jose import jwt
from starlette.exceptions import HTTPException

from quiniela.models.db.account import UserAccountType
from quiniela.models.db.prediction import Prediction
from quiniela.models.db.user import UserPublic
from quiniela.models.pools import (
    BulkPredictionsBody,
    BulkSaveResult,
    PredictionBody,
    PredictionSkip,
    PredictionSkipReason,
)
from quiniela.routes import auth as auth_routes
from quiniela.routes import predictions as prediction_routes
from quiniela.utils.errors import Forbidden, MatchLocked, NotFound, QuinielaError
from quiniela.utils.id_types import MatchId, PoolId, PredictionId, UserId


def _build_user(account_type: UserAccountType = UserAccountType.REGULAR) -> UserPublic:
    return UserPublic(
        id=UserId(5),
        email="player@example.com",
        name="Player",
        created=datetime_utc.now(),
        account_type=account_type,
    )


def _build_prediction(match_id: int) -> Prediction:
    return Prediction(
        id=PredictionId(match_id),
        pool_id=PoolId(1),
        match_id=MatchId(match_id),
        user_id=UserId(5),
        home_score=1,
        away_score=0,
        submitted_at=datetime_utc.now(),
    )


@pytest.mark.asyncio
async def test_put_prediction_submits_for_current_user(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[Any, ...]] = []

    async def fake_submit(*args: Any) -> Prediction:
        calls.append(args)
        return _build_prediction(3)

    monkeypatch.setattr(prediction_routes, "submit_prediction", fake_submit)

    response = await prediction_routes.put_prediction(
        PoolId(1), PredictionBody(match_id=MatchId(3), home_score=1, away_score=0), _build_user()
    )

    assert response.data.match_id == MatchId(3)
    assert calls == [(UserId(5), PoolId(1), MatchId(3), 1, 0)]


@pytest.mark.asyncio
async def test_put_prediction_propagates_lock_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_submit(*_: Any) -> Prediction:
        raise MatchLocked("Match 3 is locked for predictions")

    monkeypatch.setattr(prediction_routes, "submit_prediction", fake_submit)

    with pytest.raises(Forbidden) as exc_info:
        await prediction_routes.put_prediction(
            PoolId(1), PredictionBody(match_id=MatchId(3), home_score=1, away_score=0), _build_user()
        )

    assert exc_info.value.status_code == 403
    assert exc_info.value.to_dict() == {
        "detail": "Match 3 is locked for predictions",
        "code": "MATCH_LOCKED",
    }


@pytest.mark.asyncio
async def test_put_predictions_bulk_returns_partial_result(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_bulk(_: UserId, __: PoolId, items: list[PredictionBody]) -> BulkSaveResult:
        return BulkSaveResult(
            saved=[_build_prediction(int(items[0].match_id))],
            skipped=[PredictionSkip(match_id=items[1].match_id, reason=PredictionSkipReason.LOCKED)],
        )

    monkeypatch.setattr(prediction_routes, "bulk_save_predictions", fake_bulk)

    response = await prediction_routes.put_predictions_bulk(
        PoolId(1),
        BulkPredictionsBody(
            predictions=[
                PredictionBody(match_id=MatchId(1), home_score=1, away_score=0),
                PredictionBody(match_id=MatchId(2), home_score=0, away_score=0),
            ]
        ),
        _build_user(),
    )

    assert len(response.data.saved) == 1
    assert response.data.skipped[0].reason == PredictionSkipReason.LOCKED


def test_error_status_codes() -> None:
    assert NotFound("Pool", 3).status_code == 404
    assert NotFound("Pool", 3).message == "Pool with id '3' not found"
    assert QuinielaError("bad").to_dict() == {"detail": "bad", "code": "BAD_REQUEST"}


def test_decode_access_token_reads_user_id() -> None:
    token = jwt.encode(
        {"user_id": 5, "exp": datetime_utc.now() + timedelta(minutes=5)},
        auth_routes.config.jwt_secret,
        algorithm=auth_routes.config.jwt_algorithm,
    )

    token_data = auth_routes.decode_access_token(token)

    assert token_data is not None
    assert token_data.user_id == UserId(5)


def test_decode_access_token_rejects_bad_tokens() -> None:
    forged = jwt.encode({"user_id": 5}, "not-the-secret", algorithm="HS256")

    assert auth_routes.decode_access_token(forged) is None
    assert auth_routes.decode_access_token("garbage") is None


@pytest.mark.asyncio
async def test_admin_routes_require_admin_account() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await auth_routes.user_authenticated_admin(_build_user())

    assert exc_info.value.status_code == 401

    admin = _build_user(UserAccountType.ADMIN)
    assert await auth_routes.user_authenticated_admin(admin) is admin
