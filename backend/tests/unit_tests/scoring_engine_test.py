from quiniela.logic.scoring.engine import (
    Outcome,
    ScorePair,
    ScoreTier,
    get_outcome,
    score_prediction,
)
from quiniela.models.db.pool import DEFAULT_RULE_SET, RuleSet

RULE_SET = RuleSet(exact=5, diff=4, sign=3)


def test_get_outcome() -> None:
    assert get_outcome(ScorePair(2, 1)) == Outcome.HOME_WIN
    assert get_outcome(ScorePair(0, 0)) == Outcome.DRAW
    assert get_outcome(ScorePair(1, 3)) == Outcome.AWAY_WIN


def test_exact_score_earns_exact_only() -> None:
    breakdown = score_prediction(ScorePair(2, 1), ScorePair(2, 1), RULE_SET)

    assert breakdown.tier == ScoreTier.EXACT
    assert breakdown.points == 5


def test_same_goal_difference_earns_diff() -> None:
    breakdown = score_prediction(ScorePair(2, 1), ScorePair(3, 2), RULE_SET)

    assert breakdown.tier == ScoreTier.DIFF
    assert breakdown.points == 4


def test_draws_with_different_scores_earn_diff() -> None:
    breakdown = score_prediction(ScorePair(1, 1), ScorePair(2, 2), RULE_SET)

    assert breakdown.tier == ScoreTier.DIFF
    assert breakdown.points == 4


def test_correct_outcome_earns_sign() -> None:
    breakdown = score_prediction(ScorePair(1, 0), ScorePair(3, 0), RULE_SET)

    assert breakdown.tier == ScoreTier.SIGN
    assert breakdown.points == 3


def test_wrong_outcome_earns_nothing() -> None:
    breakdown = score_prediction(ScorePair(0, 2), ScorePair(1, 0), RULE_SET)

    assert breakdown.tier == ScoreTier.NONE
    assert breakdown.points == 0


def test_tiers_are_not_summed() -> None:
    rule_set = RuleSet(exact=10, diff=0, sign=1)

    assert score_prediction(ScorePair(3, 1), ScorePair(3, 1), rule_set).points == 10
    assert score_prediction(ScorePair(2, 0), ScorePair(3, 1), rule_set).points == 0
    assert score_prediction(ScorePair(4, 1), ScorePair(3, 1), rule_set).points == 1


def test_default_rule_set_weights() -> None:
    assert (DEFAULT_RULE_SET.exact, DEFAULT_RULE_SET.diff, DEFAULT_RULE_SET.sign) == (5, 4, 3)
    assert DEFAULT_RULE_SET.rounds is None
