"""
ESPN Extractor

Fetches standings, scoreboards, team schedules and team lists from the
public ESPN site API.

Every public method returns a FetchResult: failures (non-2xx, network
errors, timeouts, open circuit, undecodable JSON) come back as the empty
default with error=True instead of raising.
"""

from datetime import date
from typing import Any, Optional

from core.resilience import espn_api_circuit, http_get, with_retry
from core.settings import settings
from pipelines.extractors.base import BaseExtractor
from schemas.games import FetchResult
from services.response_cache import ResponseCache


class ESPNExtractor(BaseExtractor):
    """
    Extractor for the ESPN site API.

    Provides methods to fetch:
    - League standings (top tier computation)
    - Daily scoreboards (Big Games and soccer schedules)
    - Team schedules and team info
    - League team lists (favorite picker)
    """

    def __init__(self, cache: Optional[ResponseCache] = None):
        super().__init__("espn", cache=cache)

    def extract(self, **kwargs: Any) -> FetchResult:
        """Not used directly - use specific methods below."""
        raise NotImplementedError("Use get_standings, get_scoreboard or get_team_schedule")

    @with_retry()
    @espn_api_circuit
    def get_json(self, url: str, params: Optional[dict] = None) -> Any:
        """
        GET a URL and decode the body.

        Raises:
            RetryableError: Network, 5xx and 429 failures (after retries)
            ClientError: 4xx responses
            ValueError: Body is not JSON
            CircuitBreakerError: While the ESPN circuit is open
        """
        self.log.debug("request_start", url=url, params=params)
        response = http_get(url, params=params)
        return response.json()

    def get_standings(self, espn_path: str) -> FetchResult:
        """
        Fetch league standings.

        Returns:
            FetchResult whose data is the raw standings payload (dict)
        """
        url = f"{settings.espn_standings_base_url}/{espn_path}/standings"
        return self.fetch(
            lambda: self.get_json(url),
            default={},
            cache_key=f"standings-{espn_path}",
            transform=_require_dict,
        )

    def get_scoreboard(self, espn_path: str, day: date | str) -> FetchResult:
        """
        Fetch one day's scoreboard.

        Args:
            espn_path: League path (e.g., "soccer/eng.1")
            day: Date or YYYYMMDD string

        Returns:
            FetchResult whose data is the list of events
        """
        date_str = day if isinstance(day, str) else day.strftime("%Y%m%d")
        url = f"{settings.espn_site_base_url}/{espn_path}/scoreboard"
        return self.fetch(
            lambda: self.get_json(url, params={"dates": date_str}),
            default=[],
            cache_key=f"scoreboard-{espn_path}-{date_str}",
            transform=lambda data: list(data.get("events") or []),
        )

    def get_team_schedule(self, espn_path: str, team_id: str) -> FetchResult:
        """Full season schedule payload ({"team": ..., "events": [...]}). Not cached."""
        url = f"{settings.espn_site_base_url}/{espn_path}/teams/{team_id}/schedule"
        return self.fetch(lambda: self.get_json(url), default={}, transform=_require_dict)

    def get_team_info(self, espn_path: str, team_id: str) -> FetchResult:
        """Team details (colors, logos)."""
        url = f"{settings.espn_site_base_url}/{espn_path}/teams/{team_id}"
        return self.fetch(
            lambda: self.get_json(url),
            default={},
            cache_key=f"team-info-{espn_path}-{team_id}",
            transform=lambda data: data.get("team") or {},
        )

    def get_league_teams(self, espn_path: str) -> FetchResult:
        """Raw team entries for a league (list of team dicts)."""
        url = f"{settings.espn_site_base_url}/{espn_path}/teams"
        return self.fetch(
            lambda: self.get_json(url),
            default=[],
            cache_key=f"teams-{espn_path}",
            transform=_league_team_entries,
        )


def _require_dict(data: Any) -> dict:
    if not isinstance(data, dict):
        raise TypeError(f"expected an object, got {type(data).__name__}")
    return data


def _league_team_entries(data: dict) -> list[dict]:
    sports = data.get("sports") or [{}]
    leagues = sports[0].get("leagues") or [{}]
    return [entry.get("team", entry) for entry in leagues[0].get("teams") or []]
