import json
from typing import Any, Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from quiniela.config import config
from quiniela.utils.errors import ExternalFetchFailure


class StandingsProvider(Protocol):
    def fetch_standings(self, external_league_id: str, season_year: int) -> dict[str, Any]: ...


class ApiFootballStandingsProvider:
    """Blocking client for an API-Football compatible `/standings` endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_s: float | None = None,
    ) -> None:
        self.base_url = (base_url or config.sports_api_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else config.sports_api_key
        self.timeout_s = timeout_s if timeout_s is not None else config.standings_fetch_timeout_seconds

    def build_url(self, external_league_id: str, season_year: int) -> str:
        query = urlencode({"league": external_league_id, "season": season_year})
        return f"{self.base_url}/standings?{query}"

    def fetch_standings(self, external_league_id: str, season_year: int) -> dict[str, Any]:
        if not self.api_key:
            raise ExternalFetchFailure("Sports API key is not configured")

        request = Request(
            self.build_url(external_league_id, season_year),
            headers={"x-apisports-key": self.api_key},
        )
        try:
            with urlopen(request, timeout=self.timeout_s) as response:  # noqa: S310 configured host
                payload = json.loads(response.read().decode("utf-8"))
        except (URLError, HTTPError, TimeoutError, ValueError) as exc:
            raise ExternalFetchFailure(
                f"Could not fetch standings for league {external_league_id} ({season_year}): {exc}"
            ) from exc

        return parse_standings_payload(payload, external_league_id)


def parse_standings_payload(payload: Any, external_league_id: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ExternalFetchFailure(f"Unexpected standings payload for league {external_league_id}")

    errors = payload.get("errors")
    if isinstance(errors, dict) and len(errors) > 0:
        raise ExternalFetchFailure(f"Sports API error: {next(iter(errors.values()))}")
    if isinstance(errors, list) and len(errors) > 0:
        raise ExternalFetchFailure(f"Sports API error: {errors[0]}")

    response = payload.get("response")
    if not isinstance(response, list) or len(response) < 1 or not isinstance(response[0], dict):
        raise ExternalFetchFailure(f"No standings available for league {external_league_id}")
    return response[0]


def get_default_standings_provider() -> StandingsProvider:
    return ApiFootballStandingsProvider()
