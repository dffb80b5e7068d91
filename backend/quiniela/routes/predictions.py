from fastapi import APIRouter, Depends

from quiniela.config import config
from quiniela.logic.predictions.submission import (
    bulk_save_predictions,
    delete_prediction,
    get_predictions_for_pool,
    submit_prediction,
)
from quiniela.models.db.user import UserPublic
from quiniela.models.pools import BulkPredictionsBody, PredictionBody
from quiniela.routes.auth import user_authenticated
from quiniela.routes.models import (
    BulkSaveResponse,
    PredictionResponse,
    PredictionsResponse,
    SuccessResponse,
)
from quiniela.utils.id_types import PoolId, PredictionId

router = APIRouter(prefix=config.api_prefix)


@router.get("/pools/{pool_id}/predictions", response_model=PredictionsResponse)
async def get_my_predictions(
    pool_id: PoolId,
    user_public: UserPublic = Depends(user_authenticated),
) -> PredictionsResponse:
    return PredictionsResponse(data=await get_predictions_for_pool(user_public.id, pool_id))


@router.put("/pools/{pool_id}/predictions", response_model=PredictionResponse)
async def put_prediction(
    pool_id: PoolId,
    body: PredictionBody,
    user_public: UserPublic = Depends(user_authenticated),
) -> PredictionResponse:
    prediction = await submit_prediction(
        user_public.id, pool_id, body.match_id, body.home_score, body.away_score
    )
    return PredictionResponse(data=prediction)


@router.put("/pools/{pool_id}/predictions/bulk", response_model=BulkSaveResponse)
async def put_predictions_bulk(
    pool_id: PoolId,
    body: BulkPredictionsBody,
    user_public: UserPublic = Depends(user_authenticated),
) -> BulkSaveResponse:
    result = await bulk_save_predictions(user_public.id, pool_id, body.predictions)
    return BulkSaveResponse(data=result)


@router.delete("/predictions/{prediction_id}", response_model=SuccessResponse)
async def delete_my_prediction(
    prediction_id: PredictionId,
    user_public: UserPublic = Depends(user_authenticated),
) -> SuccessResponse:
    await delete_prediction(user_public.id, prediction_id)
    return SuccessResponse()
