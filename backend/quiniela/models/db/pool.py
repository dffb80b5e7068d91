import json
from typing import Any

from heliclockter import datetime_utc
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from quiniela.models.db.shared import BaseModelORM
from quiniela.utils.errors import InvalidArgument
from quiniela.utils.id_types import (
    CompetitionId,
    PoolId,
    RegistrationId,
    SeasonId,
    TenantId,
    UserId,
)


class RoundRange(BaseModel):
    start: int = Field(ge=1)
    end: int = Field(ge=1)

    @model_validator(mode="after")
    def check_bounds(self) -> "RoundRange":
        if self.start > self.end:
            raise ValueError("rounds.start must not be greater than rounds.end")
        return self

    def includes(self, round_: int) -> bool:
        return self.start <= round_ <= self.end


class RuleSet(BaseModel):
    """
    Scoring weights of a pool and the rounds that count towards it.

    The tiers are exclusive: a prediction earns exactly one of `exact`, `diff` or `sign`
    (or nothing), whichever is the highest tier it qualifies for.
    """

    exact: int = Field(ge=0)
    sign: int = Field(ge=0)
    diff: int = Field(ge=0)
    rounds: RoundRange | None = None

    def includes_round(self, round_: int) -> bool:
        return self.rounds is None or self.rounds.includes(round_)


DEFAULT_RULE_SET = RuleSet(exact=5, diff=4, sign=3)


def parse_rule_set(value: Any) -> RuleSet:
    if isinstance(value, RuleSet):
        return value
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError as exc:
            raise InvalidArgument("Rule set is not valid JSON", "INVALID_RULE_SET") from exc
    try:
        return RuleSet.model_validate(value)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'rule_set'}: {error['msg']}"
            for error in exc.errors()
        )
        raise InvalidArgument(f"Invalid rule set: {errors}", "INVALID_RULE_SET") from exc


class Competition(BaseModelORM):
    id: CompetitionId
    name: str
    external_id: str | None = None


class Season(BaseModelORM):
    id: SeasonId
    competition_id: CompetitionId
    year: int
    ends_at: datetime_utc | None = None


class Pool(BaseModelORM):
    id: PoolId
    tenant_id: TenantId
    season_id: SeasonId
    slug: str
    name: str
    rule_set: RuleSet
    is_retired: bool = False
    created: datetime_utc

    @field_validator("rule_set", mode="before")
    @classmethod
    def load_rule_set(cls, value: object) -> object:
        if isinstance(value, str):
            return json.loads(value)
        return value


class Registration(BaseModelORM):
    id: RegistrationId
    user_id: UserId
    pool_id: PoolId
    joined_at: datetime_utc
