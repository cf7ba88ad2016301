"""Shared fixtures: in-memory stores, a scripted ESPN extractor and event builders."""

import os

# Fail fast and never trip the shared circuit breaker during tests
os.environ.setdefault("RETRY_MAX_ATTEMPTS", "1")
os.environ.setdefault("RETRY_BASE_DELAY", "0")
os.environ.setdefault("RETRY_MAX_DELAY", "0")
os.environ.setdefault("CIRCUIT_BREAKER_THRESHOLD", "1000")
os.environ.setdefault("TIMEZONE", "UTC")

from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

import pytest

from schemas.documents import FavoriteTeam
from schemas.games import FetchResult
from services.kv_store import MemoryKeyValueStore
from services.read_cache import ReadCache
from services.watch_party import WatchPartyOverlay


NOW = datetime(2025, 1, 4, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def session_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def read_cache() -> ReadCache:
    return ReadCache()


@pytest.fixture
def overlay(session_store) -> WatchPartyOverlay:
    return WatchPartyOverlay(session_store)


class RecordingStore(MemoryKeyValueStore):
    """Memory store that remembers every write."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        super().__init__(initial)
        self.writes: list[tuple[str, str]] = []

    def set_item(self, key: str, value: str) -> None:
        self.writes.append((key, value))
        super().set_item(key, value)


def make_team(team_id: str, name: str, league: str = "nba", sport: str = "basketball",
              espn_path: str = "basketball/nba") -> FavoriteTeam:
    return FavoriteTeam(id=team_id, name=name, league=league, sport=sport, espn_path=espn_path)


def competitor(team_id: str, name: str, side: str, score: Any = None, winner: Optional[bool] = None) -> dict:
    entry: dict[str, Any] = {
        "id": team_id,
        "homeAway": side,
        "team": {"id": team_id, "displayName": name, "logo": f"https://logos/{team_id}.png"},
    }
    if score is not None:
        entry["score"] = score
    if winner is not None:
        entry["winner"] = winner
    return entry


def make_event(
    event_id: str,
    when: datetime,
    home: tuple[str, str],
    away: tuple[str, str],
    completed: bool = False,
    broadcasts: Optional[list[str]] = None,
    season_type: Optional[int] = None,
) -> dict:
    event: dict[str, Any] = {
        "id": event_id,
        "date": when.strftime("%Y-%m-%dT%H:%MZ"),
        "competitions": [
            {
                "competitors": [
                    competitor(home[0], home[1], "home"),
                    competitor(away[0], away[1], "away"),
                ],
                "status": {"type": {"completed": completed}},
                "broadcasts": [{"names": broadcasts}] if broadcasts else [],
                "venue": {"fullName": "Test Arena"},
            }
        ],
    }
    if season_type is not None:
        event["season"] = {"type": season_type}
    return event


def standings_entry(team_id: str, **stats: Any) -> dict:
    return {
        "team": {"id": team_id},
        "stats": [{"name": name, "value": value} for name, value in stats.items()],
    }


class FakeExtractor:
    """
    Scripted stand-in for ESPNExtractor.

    Scoreboards are keyed by (espn_path, YYYYMMDD); anything not scripted is
    an empty, successful day. Paths listed in `failing` return error results,
    as do single scoreboard days listed in `failing_days` as (espn_path, YYYYMMDD).
    """

    def __init__(self):
        self.standings: dict[str, dict] = {}
        self.scoreboards: dict[tuple[str, str], list[dict]] = {}
        self.schedules: dict[tuple[str, str], dict] = {}
        self.team_info: dict[tuple[str, str], dict] = {}
        self.league_teams: dict[str, list[dict]] = {}
        self.failing: set[str] = set()
        self.failing_days: set[tuple[str, str]] = set()
        self.calls: list[tuple] = []

    @staticmethod
    def _day_key(day: date | str) -> str:
        return day if isinstance(day, str) else day.strftime("%Y%m%d")

    def add_event(self, espn_path: str, event: dict) -> None:
        day = event["date"][:10].replace("-", "")
        self.scoreboards.setdefault((espn_path, day), []).append(event)

    def get_standings(self, espn_path: str) -> FetchResult:
        self.calls.append(("standings", espn_path))
        if espn_path in self.failing or espn_path not in self.standings:
            return FetchResult(data={}, error=True)
        return FetchResult(data=self.standings[espn_path])

    def get_scoreboard(self, espn_path: str, day: date | str) -> FetchResult:
        self.calls.append(("scoreboard", espn_path, self._day_key(day)))
        if espn_path in self.failing or (espn_path, self._day_key(day)) in self.failing_days:
            return FetchResult(data=[], error=True)
        return FetchResult(data=list(self.scoreboards.get((espn_path, self._day_key(day)), [])))

    def get_team_schedule(self, espn_path: str, team_id: str) -> FetchResult:
        self.calls.append(("schedule", espn_path, team_id))
        payload = self.schedules.get((espn_path, team_id))
        if payload is None:
            return FetchResult(data={}, error=True)
        return FetchResult(data=payload)

    def get_team_info(self, espn_path: str, team_id: str) -> FetchResult:
        self.calls.append(("team_info", espn_path, team_id))
        info = self.team_info.get((espn_path, team_id))
        if info is None:
            return FetchResult(data={}, error=True)
        return FetchResult(data=info)

    def get_league_teams(self, espn_path: str) -> FetchResult:
        self.calls.append(("teams", espn_path))
        if espn_path not in self.league_teams:
            return FetchResult(data=[], error=True)
        return FetchResult(data=self.league_teams[espn_path])


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def now() -> datetime:
    return NOW


def days_from_now(days: float, hour: int = 20) -> datetime:
    return (NOW + timedelta(days=days)).replace(hour=hour, minute=0)
