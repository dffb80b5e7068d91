from enum import auto
from typing import Any

from heliclockter import datetime_utc
from pydantic import BaseModel, Field

from quiniela.models.db.prediction import Prediction
from quiniela.utils.id_types import (
    LeaderboardSnapshotId,
    MatchId,
    PrizeId,
    UserId,
)
from quiniela.utils.types import EnumAutoStr


class PredictionBody(BaseModel):
    # Score bounds are checked by the submission service so that a bulk request
    # can report an out-of-range item instead of rejecting the whole payload.
    match_id: MatchId
    home_score: int
    away_score: int


class BulkPredictionsBody(BaseModel):
    predictions: list[PredictionBody] = Field(default_factory=list)


class PredictionSkipReason(EnumAutoStr):
    LOCKED = auto()
    INVALID_SCORE = auto()
    MATCH_NOT_FOUND = auto()
    OUT_OF_SCOPE = auto()


class PredictionSkip(BaseModel):
    match_id: MatchId
    reason: PredictionSkipReason


class BulkSaveResult(BaseModel):
    saved: list[Prediction] = Field(default_factory=list)
    skipped: list[PredictionSkip] = Field(default_factory=list)


class MatchResultBody(BaseModel):
    home_score: int = Field(ge=0)
    away_score: int = Field(ge=0)


class MatchLockOverrideBody(BaseModel):
    lock_override: bool | None = None


class RescoreMatchesBody(BaseModel):
    match_ids: list[MatchId] = Field(min_length=1)


class RuleSetUpdateBody(BaseModel):
    rule_set: dict[str, Any]


class RescoreFailure(BaseModel):
    match_id: MatchId
    error: str


class RescoreSummary(BaseModel):
    rescored_matches: list[MatchId] = Field(default_factory=list)
    predictions_scored: int = 0
    failed: list[RescoreFailure] = Field(default_factory=list)


class LeaderboardEntry(BaseModel):
    user_id: UserId
    user_name: str | None = None
    total_points: int = 0
    rank: int = 0
    predictions_count: int = 0
    scored_count: int = 0


class AwardWinner(BaseModel):
    user_id: UserId
    rank: int


class PrizeAwardResult(BaseModel):
    prize_id: PrizeId
    prize_title: str
    winners: list[AwardWinner] = Field(default_factory=list)


class AssignAwardsResult(BaseModel):
    awards_created: int = 0
    dry_run: bool = False
    prizes: list[PrizeAwardResult] = Field(default_factory=list)


class AwardDeliveryBody(BaseModel):
    delivered_at: datetime_utc | None = None
    notes: str | None = Field(default=None, max_length=1000)


class FinalizePoolResult(BaseModel):
    snapshot_id: LeaderboardSnapshotId
    entries_count: int
    awards: AssignAwardsResult


class StandingsJobResult(BaseModel):
    success: bool = True
    refreshed: int = 0
    deleted: int = 0
    timestamp: str
