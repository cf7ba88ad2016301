"""
Favorite Teams Store

Ordered list of the user's teams, capped at max_favorite_teams. Team ids
are only unique within a sport, so lookups used for tier classification are
always sport-scoped.
"""

import json
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from core.logging import get_logger
from core.settings import settings
from pipelines.transformers.ids import normalize_team_id
from schemas.documents import FavoriteTeam
from services.kv_store import KeyValueStore
from services.read_cache import ReadCache
from services.watch_party import WatchPartyOverlay, resolve_teams


FAVORITE_TEAMS_KEY = "sports-tracker-favorite-teams"

DEFAULT_TEAMS: tuple[FavoriteTeam, ...] = (
    FavoriteTeam(
        id="368",
        name="Everton",
        league="premier-league",
        sport="soccer",
        espn_path="soccer/eng.1",
        logo="https://a.espncdn.com/i/teamlogos/soccer/500/368.png",
    ),
    FavoriteTeam(
        id="27",
        name="Tampa Bay Buccaneers",
        league="nfl",
        sport="football",
        espn_path="football/nfl",
        logo="https://a.espncdn.com/i/teamlogos/nfl/500/tb.png",
    ),
    FavoriteTeam(
        id="20",
        name="Tampa Bay Lightning",
        league="nhl",
        sport="hockey",
        espn_path="hockey/nhl",
        logo="https://a.espncdn.com/i/teamlogos/nhl/500/tb.png",
    ),
    FavoriteTeam(
        id="30",
        name="Tampa Bay Rays",
        league="mlb",
        sport="baseball",
        espn_path="baseball/mlb",
        logo="https://a.espncdn.com/i/teamlogos/mlb/500/tb.png",
    ),
)

_team_list = TypeAdapter(list[FavoriteTeam])

log = get_logger("favorites")


class FavoriteLimitError(Exception):
    """Raised when adding a team would exceed the favorites cap."""

    def __init__(self, limit: int):
        super().__init__(f"You can only have up to {limit} favorite teams. Remove one first.")
        self.limit = limit


class FavoriteTeamsStore:
    def __init__(
        self,
        store: KeyValueStore,
        cache: ReadCache | None = None,
        overlay: WatchPartyOverlay | None = None,
        max_teams: int | None = None,
    ):
        self.store = store
        self.cache = cache or ReadCache()
        self.overlay = overlay
        self.max_teams = max_teams or settings.max_favorite_teams

    def _load_saved(self) -> list[FavoriteTeam]:
        saved = self.store.get_item(FAVORITE_TEAMS_KEY)
        if saved:
            try:
                teams = _team_list.validate_json(saved)
                if teams:
                    return teams
            except ValidationError as e:
                log.error("favorite_teams_malformed", error=str(e))
        return list(DEFAULT_TEAMS)

    def get_all(self) -> list[FavoriteTeam]:
        """Favorites in display order. Defaults when nothing valid is saved."""
        watch_party = self.overlay.get_active() if self.overlay else None
        if watch_party is not None:
            local = self.cache.get_or_load(FAVORITE_TEAMS_KEY, self._load_saved)
            return resolve_teams(watch_party, [*DEFAULT_TEAMS, *local])

        return list(self.cache.get_or_load(FAVORITE_TEAMS_KEY, self._load_saved))

    def save(self, teams: list[FavoriteTeam]) -> None:
        if self.overlay is not None:
            self.overlay.guard("favorite teams")
        payload = _team_list.dump_python(teams, by_alias=True, mode="json")
        self.store.set_item(FAVORITE_TEAMS_KEY, json.dumps(payload))
        self.cache.invalidate(FAVORITE_TEAMS_KEY)

    def add(self, team: FavoriteTeam) -> bool:
        """
        Append a team.

        Returns:
            False if the team is already a favorite

        Raises:
            FavoriteLimitError: If the list is already full
        """
        teams = self.get_all()
        if len(teams) >= self.max_teams:
            raise FavoriteLimitError(self.max_teams)
        if any(t.key == team.key for t in teams):
            return False

        teams.append(team)
        self.save(teams)
        log.info("favorite_team_added", team_id=team.id, league=team.league)
        return True

    def remove(self, team_id, league: str) -> bool:
        key = (normalize_team_id(team_id), league)
        teams = self.get_all()
        remaining = [t for t in teams if t.key != key]
        if len(remaining) == len(teams):
            return False
        self.save(remaining)
        log.info("favorite_team_removed", team_id=key[0], league=league)
        return True

    def move(self, team_id, league: str, direction: str) -> bool:
        """Swap a team with its neighbour. direction is "up" or "down"."""
        if direction not in ("up", "down"):
            raise ValueError(f"direction must be 'up' or 'down', got {direction!r}")

        teams = self.get_all()
        index = self._index_of(teams, team_id, league)
        if index is None:
            return False

        new_index = index - 1 if direction == "up" else index + 1
        if new_index < 0 or new_index >= len(teams):
            return False

        teams[index], teams[new_index] = teams[new_index], teams[index]
        self.save(teams)
        return True

    @staticmethod
    def _index_of(teams: list[FavoriteTeam], team_id, league: str) -> Optional[int]:
        key = (normalize_team_id(team_id), league)
        for i, team in enumerate(teams):
            if team.key == key:
                return i
        return None

    def is_favorite(self, team_id, league: str) -> bool:
        return self._index_of(self.get_all(), team_id, league) is not None

    def ids_for_sport(self, sport: str) -> frozenset[str]:
        """Favorite ids for one sport (ids collide across sports)."""
        sport = getattr(sport, "value", sport)
        return frozenset(t.id for t in self.get_all() if t.sport == sport)

    def invalidate(self) -> None:
        self.cache.invalidate(FAVORITE_TEAMS_KEY)
