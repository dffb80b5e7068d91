from fastapi import APIRouter, Depends
from heliclockter import datetime_utc

from quiniela.config import config
from quiniela.logic.predictions.lock import get_lock_state, set_lock_override
from quiniela.logic.scoring.rescore import record_match_result, rescore_matches
from quiniela.models.db.user import UserPublic
from quiniela.models.pools import MatchLockOverrideBody, MatchResultBody, RescoreMatchesBody
from quiniela.routes.auth import user_authenticated, user_authenticated_admin
from quiniela.routes.models import (
    MatchLockResponse,
    MatchLockView,
    MatchResultResponse,
    MatchResultView,
    RescoreResponse,
)
from quiniela.sql.matches import get_match_by_id
from quiniela.utils.errors import NotFound
from quiniela.utils.id_types import MatchId

router = APIRouter(prefix=config.api_prefix)


@router.get("/matches/{match_id}/lock", response_model=MatchLockResponse)
async def get_match_lock(
    match_id: MatchId,
    _: UserPublic = Depends(user_authenticated),
) -> MatchLockResponse:
    match = await get_match_by_id(match_id)
    if match is None:
        raise NotFound("Match", match_id)
    return MatchLockResponse(
        data=MatchLockView(match=match, state=get_lock_state(match, datetime_utc.now()))
    )


@router.put("/matches/{match_id}/lock_override", response_model=MatchLockResponse)
async def put_match_lock_override(
    match_id: MatchId,
    body: MatchLockOverrideBody,
    _: UserPublic = Depends(user_authenticated_admin),
) -> MatchLockResponse:
    match = await set_lock_override(match_id, body.lock_override)
    return MatchLockResponse(
        data=MatchLockView(match=match, state=get_lock_state(match, datetime_utc.now()))
    )


@router.put("/matches/{match_id}/result", response_model=MatchResultResponse)
async def put_match_result(
    match_id: MatchId,
    body: MatchResultBody,
    _: UserPublic = Depends(user_authenticated_admin),
) -> MatchResultResponse:
    scored = await record_match_result(match_id, body.home_score, body.away_score)
    return MatchResultResponse(
        data=MatchResultView(
            match_id=match_id,
            predictions_scored=scored,
            recalculated_at=datetime_utc.now().isoformat(),
        )
    )


@router.post("/matches/rescore", response_model=RescoreResponse)
async def post_rescore_matches(
    body: RescoreMatchesBody,
    _: UserPublic = Depends(user_authenticated_admin),
) -> RescoreResponse:
    return RescoreResponse(data=await rescore_matches(body.match_ids))
