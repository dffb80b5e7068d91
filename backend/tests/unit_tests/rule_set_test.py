import pytest

from quiniela.models.db.pool import RuleSet, parse_rule_set
from quiniela.utils.errors import InvalidArgument


def test_parse_rule_set_from_json_string() -> None:
    rule_set = parse_rule_set('{"exact": 6, "diff": 3, "sign": 2, "rounds": {"start": 1, "end": 4}}')

    assert rule_set.exact == 6
    assert rule_set.rounds is not None
    assert rule_set.includes_round(4) is True
    assert rule_set.includes_round(5) is False


def test_rule_set_without_rounds_includes_every_round() -> None:
    rule_set = parse_rule_set({"exact": 5, "diff": 4, "sign": 3})

    assert rule_set.includes_round(1) is True
    assert rule_set.includes_round(38) is True


def test_parse_rule_set_passes_through_instances() -> None:
    rule_set = RuleSet(exact=1, diff=1, sign=1)

    assert parse_rule_set(rule_set) is rule_set


@pytest.mark.parametrize(
    "value",
    [
        "{not json",
        {"exact": 5, "diff": 4},
        {"exact": -1, "diff": 4, "sign": 3},
        {"exact": 5, "diff": 4, "sign": 3, "rounds": {"start": 5, "end": 2}},
        {"exact": 5, "diff": 4, "sign": 3, "rounds": {"start": 0, "end": 2}},
    ],
)
def test_parse_rule_set_rejects_invalid_values(value: object) -> None:
    with pytest.raises(InvalidArgument) as exc_info:
        parse_rule_set(value)

    assert exc_info.value.code == "INVALID_RULE_SET"
