import json
from typing import Any

from heliclockter import datetime_utc
from pydantic import field_validator

from quiniela.models.db.shared import BaseModelORM
from quiniela.utils.id_types import CompetitionId, SeasonId, StandingsId


class CompetitionStandings(BaseModelORM):
    id: StandingsId
    competition_id: CompetitionId
    season_id: SeasonId
    payload: dict[str, Any]
    fetched_at: datetime_utc
    refresh_claimed_at: datetime_utc | None = None

    @field_validator("payload", mode="before")
    @classmethod
    def load_payload(cls, value: object) -> object:
        if isinstance(value, str):
            return json.loads(value)
        return value


class StaleStandingsRow(BaseModelORM):
    """A cached standings row joined with what is needed to re-fetch it."""

    id: StandingsId
    competition_id: CompetitionId
    season_id: SeasonId
    fetched_at: datetime_utc
    external_id: str | None = None
    season_year: int
    season_ends_at: datetime_utc | None = None
