from enum import auto
from typing import NamedTuple

from quiniela.models.db.pool import RuleSet
from quiniela.utils.types import EnumAutoStr


class Outcome(EnumAutoStr):
    HOME_WIN = auto()
    DRAW = auto()
    AWAY_WIN = auto()


class ScoreTier(EnumAutoStr):
    EXACT = auto()
    DIFF = auto()
    SIGN = auto()
    NONE = auto()


class ScorePair(NamedTuple):
    home: int
    away: int


class ScoreBreakdown(NamedTuple):
    tier: ScoreTier
    points: int


def get_outcome(score: ScorePair) -> Outcome:
    if score.home > score.away:
        return Outcome.HOME_WIN
    if score.home < score.away:
        return Outcome.AWAY_WIN
    return Outcome.DRAW


def get_goal_difference(score: ScorePair) -> int:
    return score.home - score.away


def get_score_tier(predicted: ScorePair, actual: ScorePair) -> ScoreTier:
    if predicted == actual:
        return ScoreTier.EXACT
    if get_goal_difference(predicted) == get_goal_difference(actual):
        return ScoreTier.DIFF
    if get_outcome(predicted) == get_outcome(actual):
        return ScoreTier.SIGN
    return ScoreTier.NONE


def score_prediction(predicted: ScorePair, actual: ScorePair, rule_set: RuleSet) -> ScoreBreakdown:
    """
    Score one prediction against the official result.

    Only the highest qualifying tier counts, in the order exact > diff > sign. A correct goal
    difference always implies a correct outcome, so `diff` is checked before `sign`.
    """
    tier = get_score_tier(predicted, actual)
    points = {
        ScoreTier.EXACT: rule_set.exact,
        ScoreTier.DIFF: rule_set.diff,
        ScoreTier.SIGN: rule_set.sign,
        ScoreTier.NONE: 0,
    }[tier]
    return ScoreBreakdown(tier=tier, points=points)
