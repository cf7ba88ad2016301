"""
Game and Refresh Models

Result objects produced by the extractor, the pipelines and the refresh
cycle.
"""

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from schemas.categories import TeamTier
from schemas.documents import FavoriteTeam


T = TypeVar("T")


class FetchResult(BaseModel, Generic[T]):
    """Upstream payload, or the empty default with error set."""

    data: T
    error: bool = False
    from_cache: bool = False


class TopTierSet(BaseModel):
    """Top tier for one competition, plus the domestic (English) ids for soccer."""

    model_config = ConfigDict(frozen=True)

    top_tier_ids: frozenset[str] = frozenset()
    domestic_ids: frozenset[str] = frozenset()
    error: bool = False


class GameTeam(BaseModel):
    id: str
    name: str = "TBD"
    logo: Optional[str] = None
    score: Optional[str] = None
    tier: TeamTier = TeamTier.NONE


class BigGame(BaseModel):
    """A categorized, enabled game from one of the scanned competitions."""

    model_config = ConfigDict(use_enum_values=True)

    id: str
    date: datetime
    sport: str
    league: str
    home_team: GameTeam
    away_team: GameTeam
    is_completed: bool = False
    channel: str = "TBD"
    involves_favorite: bool = False
    category: str


class BigGamesResult(BaseModel):
    games: list[BigGame] = Field(default_factory=list)
    error: bool = False


class GameScore(BaseModel):
    us: Optional[str] = None
    them: Optional[str] = None
    winner: Optional[bool] = None


class ScheduledGame(BaseModel):
    """One game on a favorite team's schedule."""

    id: str
    date: datetime
    opponent: str = "Unknown"
    opponent_logo: Optional[str] = None
    is_home: bool = False
    is_completed: bool = False
    score: Optional[GameScore] = None
    channel: str = "TBD"
    venue: Optional[str] = None
    season_label: Optional[str] = None

    @property
    def is_preseason(self) -> bool:
        return self.season_label in ("Preseason", "Spring Training")


class TeamSchedule(BaseModel):
    team: FavoriteTeam
    color: Optional[str] = None
    games: list[ScheduledGame] = Field(default_factory=list)
    error: bool = False


class RefreshReport(BaseModel):
    """Everything one refresh cycle produced."""

    cycle_id: str
    refreshed_at: datetime
    schedules: list[TeamSchedule] = Field(default_factory=list)
    big_games: list[BigGame] = Field(default_factory=list)
    must_watch: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    watch_party: bool = False

    @property
    def notice(self) -> Optional[str]:
        """Single incompleteness notice, or None when everything loaded."""
        if not self.errors:
            return None
        return "Some data may be incomplete: " + "; ".join(self.errors)

    def summary(self) -> dict[str, Any]:
        return {
            "cycle_id": self.cycle_id,
            "teams": len(self.schedules),
            "games": sum(len(s.games) for s in self.schedules),
            "big_games": len(self.big_games),
            "errors": len(self.errors),
        }
