from fastapi import APIRouter, Depends, Query

from quiniela.config import config
from quiniela.logic.ranking.awards import (
    assign_awards,
    finalize_pool,
    list_awards,
    mark_award_delivered,
    mark_award_notified,
    void_award,
)
from quiniela.logic.ranking.leaderboard import compute_leaderboard
from quiniela.logic.scoring.rescore import rescore_pool_by_id, update_pool_rule_set
from quiniela.models.db.user import UserPublic
from quiniela.models.pools import AwardDeliveryBody, RuleSetUpdateBody
from quiniela.routes.auth import user_authenticated, user_authenticated_admin
from quiniela.routes.models import (
    AssignAwardsResponse,
    AwardResponse,
    AwardsResponse,
    FinalizePoolResponse,
    LeaderboardResponse,
    PoolRuleSetResponse,
    PoolRuleSetView,
    RescoreResponse,
)
from quiniela.utils.id_types import AwardId, PoolId

router = APIRouter(prefix=config.api_prefix)


@router.get("/pools/{pool_id}/leaderboard", response_model=LeaderboardResponse)
async def get_pool_leaderboard(
    pool_id: PoolId,
    _: UserPublic = Depends(user_authenticated),
) -> LeaderboardResponse:
    return LeaderboardResponse(data=await compute_leaderboard(pool_id))


@router.put("/pools/{pool_id}/rule_set", response_model=PoolRuleSetResponse)
async def put_pool_rule_set(
    pool_id: PoolId,
    body: RuleSetUpdateBody,
    _: UserPublic = Depends(user_authenticated_admin),
) -> PoolRuleSetResponse:
    pool, summary = await update_pool_rule_set(pool_id, body.rule_set)
    return PoolRuleSetResponse(data=PoolRuleSetView(pool=pool, rescore=summary))


@router.post("/pools/{pool_id}/rescore", response_model=RescoreResponse)
async def post_pool_rescore(
    pool_id: PoolId,
    _: UserPublic = Depends(user_authenticated_admin),
) -> RescoreResponse:
    return RescoreResponse(data=await rescore_pool_by_id(pool_id))


@router.post("/pools/{pool_id}/awards/assign", response_model=AssignAwardsResponse)
async def post_assign_awards(
    pool_id: PoolId,
    dry_run: bool = Query(default=False),
    _: UserPublic = Depends(user_authenticated_admin),
) -> AssignAwardsResponse:
    return AssignAwardsResponse(data=await assign_awards(pool_id, dry_run=dry_run))


@router.post("/pools/{pool_id}/finalize", response_model=FinalizePoolResponse)
async def post_finalize_pool(
    pool_id: PoolId,
    force: bool = Query(default=False),
    _: UserPublic = Depends(user_authenticated_admin),
) -> FinalizePoolResponse:
    return FinalizePoolResponse(data=await finalize_pool(pool_id, force=force))


@router.get("/pools/{pool_id}/awards", response_model=AwardsResponse)
async def get_pool_awards(
    pool_id: PoolId,
    delivered: bool | None = Query(default=None),
    _: UserPublic = Depends(user_authenticated_admin),
) -> AwardsResponse:
    return AwardsResponse(data=await list_awards(pool_id, delivered))


@router.put("/awards/{award_id}/delivered", response_model=AwardResponse)
async def put_award_delivered(
    award_id: AwardId,
    body: AwardDeliveryBody,
    _: UserPublic = Depends(user_authenticated_admin),
) -> AwardResponse:
    return AwardResponse(data=await mark_award_delivered(award_id, body.delivered_at, body.notes))


@router.put("/awards/{award_id}/notified", response_model=AwardResponse)
async def put_award_notified(
    award_id: AwardId,
    _: UserPublic = Depends(user_authenticated_admin),
) -> AwardResponse:
    return AwardResponse(data=await mark_award_notified(award_id))


@router.delete("/awards/{award_id}", response_model=AwardResponse)
async def delete_award(
    award_id: AwardId,
    _: UserPublic = Depends(user_authenticated_admin),
) -> AwardResponse:
    return AwardResponse(data=await void_award(award_id))
