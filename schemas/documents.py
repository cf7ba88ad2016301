"""
Persisted Documents

Pydantic models for everything kept in the local key-value store or carried
in a watch-party link. Field aliases match the stored JSON.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pipelines.transformers.ids import normalize_team_id
from schemas.competitions import Competition


class FavoriteTeam(BaseModel):
    """A team the user follows. Uniqueness key is (id, league)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    league: str
    sport: str
    espn_path: str = Field(alias="espnPath")
    name: str
    logo: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return normalize_team_id(v)

    @property
    def key(self) -> tuple[str, str]:
        return (self.id, self.league)


class BigGameSettings(BaseModel):
    """
    Versioned Big Game settings.

    Maps each competition to the categories that count as Big Games there.
    """

    model_config = ConfigDict(populate_by_name=True)

    schema_version: int = Field(alias="schemaVersion")
    per_competition: dict[Competition, list[str]] = Field(alias="perCompetition")

    def categories_for(self, competition: Competition | str) -> Optional[list[str]]:
        try:
            return self.per_competition.get(Competition(competition))
        except ValueError:
            return None

    def to_storage(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class CacheEntry(BaseModel):
    """A memoized upstream response."""

    timestamp: int  # epoch milliseconds
    data: Any = None
    ttl: Optional[int] = None  # milliseconds


class WatchPartySnapshot(BaseModel):
    """
    Shared view of another user's setup.

    Teams are full FavoriteTeam objects; links created before that carried
    "<sport>-<id>" strings instead.
    """

    model_config = ConfigDict(populate_by_name=True)

    teams: list[Union[FavoriteTeam, str]] = Field(default_factory=list)
    big_games: dict[str, list[str]] = Field(default_factory=dict, alias="bigGames")
    show_preseason: bool = Field(default=True, alias="showPreseason")
    must_watch: list[str] = Field(default_factory=list, alias="mustWatch")

    @field_validator("must_watch", mode="before")
    @classmethod
    def coerce_event_ids(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [str(item) for item in v]
        return v

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
