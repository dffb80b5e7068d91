from fastapi import APIRouter, Depends, HTTPException, Query
from starlette import status

from quiniela.config import config
from quiniela.logic.standings.job import run_refresh_standings_job
from quiniela.logic.standings.refresh import get_or_fetch_standings
from quiniela.models.db.user import UserPublic
from quiniela.routes.auth import is_admin_user, user_authenticated, user_authenticated_admin
from quiniela.routes.models import StandingsJobResponse, StandingsResponse
from quiniela.utils.id_types import CompetitionId, SeasonId

router = APIRouter(prefix=config.api_prefix)


@router.get(
    "/competitions/{competition_id}/seasons/{season_id}/standings",
    response_model=StandingsResponse,
)
async def get_competition_standings(
    competition_id: CompetitionId,
    season_id: SeasonId,
    force_refresh: bool = Query(default=False),
    user_public: UserPublic = Depends(user_authenticated),
) -> StandingsResponse:
    if force_refresh and not is_admin_user(user_public):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Admin access required")

    standings = await get_or_fetch_standings(competition_id, season_id, force_refresh)
    return StandingsResponse(data=standings)


@router.post("/standings/refresh", response_model=StandingsJobResponse)
async def post_refresh_standings(
    older_than_hours: int | None = Query(default=None, ge=0),
    cleanup_older_than_days: int | None = Query(default=None, ge=0),
    _: UserPublic = Depends(user_authenticated_admin),
) -> StandingsJobResponse:
    result = await run_refresh_standings_job(older_than_hours, cleanup_older_than_days)
    return StandingsJobResponse(data=result)
