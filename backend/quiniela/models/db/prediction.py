from heliclockter import datetime_utc

from quiniela.models.db.shared import BaseModelORM
from quiniela.utils.id_types import MatchId, PoolId, PredictionId, UserId


class PredictionInsertable(BaseModelORM):
    pool_id: PoolId
    match_id: MatchId
    user_id: UserId
    home_score: int
    away_score: int
    submitted_at: datetime_utc


class Prediction(PredictionInsertable):
    id: PredictionId
    points: int | None = None
    scored_at: datetime_utc | None = None
