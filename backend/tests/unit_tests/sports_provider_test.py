import pytest

from quiniela.utils.errors import ExternalFetchFailure
from quiniela.utils.sports_provider import ApiFootballStandingsProvider, parse_standings_payload


def test_build_url() -> None:
    provider = ApiFootballStandingsProvider(base_url="https://api.example.com/", api_key="key")

    assert provider.build_url("39", 2026) == "https://api.example.com/standings?league=39&season=2026"


def test_parse_standings_payload_returns_first_league() -> None:
    payload = {"errors": [], "response": [{"league": {"id": 39, "standings": [[{"rank": 1}]]}}]}

    assert parse_standings_payload(payload, "39") == {"league": {"id": 39, "standings": [[{"rank": 1}]]}}


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"errors": {"token": "Invalid API key"}, "response": []},
        {"errors": ["rate limited"]},
        {"errors": [], "response": []},
    ],
)
def test_parse_standings_payload_rejects_errors(payload: object) -> None:
    with pytest.raises(ExternalFetchFailure):
        parse_standings_payload(payload, "39")


def test_fetch_without_api_key_fails() -> None:
    provider = ApiFootballStandingsProvider(base_url="https://api.example.com", api_key="")

    with pytest.raises(ExternalFetchFailure):
        provider.fetch_standings("39", 2026)
