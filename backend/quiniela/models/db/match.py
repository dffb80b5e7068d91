from heliclockter import datetime_utc

from quiniela.models.db.shared import BaseModelORM
from quiniela.utils.id_types import MatchId, SeasonId


class Match(BaseModelORM):
    id: MatchId
    season_id: SeasonId
    round: int
    kickoff_at: datetime_utc
    home_score: int | None = None
    away_score: int | None = None
    lock_override: bool | None = None
    result_recorded_at: datetime_utc | None = None

    @property
    def has_result(self) -> bool:
        return self.home_score is not None and self.away_score is not None
