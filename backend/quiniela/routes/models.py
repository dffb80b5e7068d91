from pydantic import BaseModel

from quiniela.logic.predictions.lock import MatchLockState
from quiniela.models.db.award import Award
from quiniela.models.db.match import Match
from quiniela.models.db.pool import Pool
from quiniela.models.db.prediction import Prediction
from quiniela.models.db.standings import CompetitionStandings
from quiniela.models.pools import (
    AssignAwardsResult,
    BulkSaveResult,
    FinalizePoolResult,
    LeaderboardEntry,
    RescoreSummary,
    StandingsJobResult,
)


class SuccessResponse(BaseModel):
    success: bool = True


class DataResponse[DataT](BaseModel):
    data: DataT


class PredictionResponse(DataResponse[Prediction]):
    pass


class PredictionsResponse(DataResponse[list[Prediction]]):
    pass


class BulkSaveResponse(DataResponse[BulkSaveResult]):
    pass


class MatchLockView(BaseModel):
    match: Match
    state: MatchLockState


class MatchLockResponse(DataResponse[MatchLockView]):
    pass


class MatchResultView(BaseModel):
    match_id: int
    predictions_scored: int
    recalculated_at: str


class MatchResultResponse(DataResponse[MatchResultView]):
    pass


class RescoreResponse(DataResponse[RescoreSummary]):
    pass


class PoolRuleSetView(BaseModel):
    pool: Pool
    rescore: RescoreSummary


class PoolRuleSetResponse(DataResponse[PoolRuleSetView]):
    pass


class LeaderboardResponse(DataResponse[list[LeaderboardEntry]]):
    pass


class AssignAwardsResponse(DataResponse[AssignAwardsResult]):
    pass


class FinalizePoolResponse(DataResponse[FinalizePoolResult]):
    pass


class AwardResponse(DataResponse[Award]):
    pass


class AwardsResponse(DataResponse[list[Award]]):
    pass


class StandingsResponse(DataResponse[CompetitionStandings]):
    pass


class StandingsJobResponse(DataResponse[StandingsJobResult]):
    pass
