"""
Competition Registry

Closed set of competitions the Big Game engine knows about, plus the leagues
favorites can be picked from. Each competition is tagged with the category
scheme its settings use.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Sport(str, Enum):
    SOCCER = "soccer"
    BASKETBALL = "basketball"
    HOCKEY = "hockey"
    FOOTBALL = "football"
    BASEBALL = "baseball"


class Competition(str, Enum):
    """Competitions scanned for Big Games."""

    PREMIER_LEAGUE = "premier-league"
    CHAMPIONS_LEAGUE = "champions-league"
    FA_CUP = "fa-cup"
    LEAGUE_CUP = "league-cup"
    NBA = "nba"
    NHL = "nhl"


class CategoryScheme(str, Enum):
    """Which category space a competition's settings draw from."""

    GENERIC = "generic"
    CONTINENTAL = "continental"


@dataclass(frozen=True)
class CompetitionConfig:
    """
    Immutable configuration for a competition.

    Attributes:
        key: Competition key used in settings documents
        display_name: Human-readable name
        sport: Sport the competition's team ids belong to
        espn_path: ESPN path segment (e.g., "soccer/eng.1")
        scheme: Category scheme for Big Game settings
        top_tier_from: Competition whose standings define the top tier
    """

    key: Competition
    display_name: str
    sport: Sport
    espn_path: str
    scheme: CategoryScheme = CategoryScheme.GENERIC
    top_tier_from: Optional[Competition] = None

    def __post_init__(self):
        if not self.espn_path:
            raise ValueError(f"{self.key.value} needs an espn_path")

    @property
    def tier_source(self) -> Competition:
        return self.top_tier_from or self.key


COMPETITIONS: dict[Competition, CompetitionConfig] = {
    Competition.PREMIER_LEAGUE: CompetitionConfig(
        key=Competition.PREMIER_LEAGUE,
        display_name="Premier League",
        sport=Sport.SOCCER,
        espn_path="soccer/eng.1",
    ),
    Competition.CHAMPIONS_LEAGUE: CompetitionConfig(
        key=Competition.CHAMPIONS_LEAGUE,
        display_name="Champions League",
        sport=Sport.SOCCER,
        espn_path="soccer/uefa.champions",
        scheme=CategoryScheme.CONTINENTAL,
        top_tier_from=Competition.PREMIER_LEAGUE,
    ),
    Competition.FA_CUP: CompetitionConfig(
        key=Competition.FA_CUP,
        display_name="FA Cup",
        sport=Sport.SOCCER,
        espn_path="soccer/eng.fa",
        top_tier_from=Competition.PREMIER_LEAGUE,
    ),
    Competition.LEAGUE_CUP: CompetitionConfig(
        key=Competition.LEAGUE_CUP,
        display_name="League Cup",
        sport=Sport.SOCCER,
        espn_path="soccer/eng.league_cup",
        top_tier_from=Competition.PREMIER_LEAGUE,
    ),
    Competition.NBA: CompetitionConfig(
        key=Competition.NBA,
        display_name="NBA",
        sport=Sport.BASKETBALL,
        espn_path="basketball/nba",
    ),
    Competition.NHL: CompetitionConfig(
        key=Competition.NHL,
        display_name="NHL",
        sport=Sport.HOCKEY,
        espn_path="hockey/nhl",
    ),
}

_unconfigured = set(Competition) - set(COMPETITIONS)
if _unconfigured:
    raise RuntimeError(f"Competitions missing config: {sorted(c.value for c in _unconfigured)}")


def get_competition_config(competition: Competition | str) -> CompetitionConfig:
    """
    Look up a competition's config.

    Raises:
        ValueError: If the key is not a known competition
    """
    return COMPETITIONS[Competition(competition)]


def parse_competition(value: str) -> Optional[Competition]:
    """Return the Competition for a key, or None if unknown."""
    try:
        return Competition(value)
    except ValueError:
        return None


def is_soccer_league(league: str) -> bool:
    """Soccer fixtures read "Home v. Away", everything else "Away @ Home"."""
    competition = parse_competition(league)
    if competition is None:
        return league in LEAGUES and LEAGUES[league].sport == Sport.SOCCER
    return COMPETITIONS[competition].sport == Sport.SOCCER


# ----------------------------- Favorite Leagues ----------------------------- #


@dataclass(frozen=True)
class LeagueConfig:
    """A league favorites can be picked from."""

    key: str
    name: str
    sport: Sport
    espn_path: str
    logo_template: str


LEAGUES: dict[str, LeagueConfig] = {
    "premier-league": LeagueConfig(
        key="premier-league",
        name="Premier League",
        sport=Sport.SOCCER,
        espn_path="soccer/eng.1",
        logo_template="https://a.espncdn.com/i/teamlogos/soccer/500/{id}.png",
    ),
    "nfl": LeagueConfig(
        key="nfl",
        name="NFL",
        sport=Sport.FOOTBALL,
        espn_path="football/nfl",
        logo_template="https://a.espncdn.com/i/teamlogos/nfl/500/{abbrev}.png",
    ),
    "nhl": LeagueConfig(
        key="nhl",
        name="NHL",
        sport=Sport.HOCKEY,
        espn_path="hockey/nhl",
        logo_template="https://a.espncdn.com/i/teamlogos/nhl/500/{abbrev}.png",
    ),
    "nba": LeagueConfig(
        key="nba",
        name="NBA",
        sport=Sport.BASKETBALL,
        espn_path="basketball/nba",
        logo_template="https://a.espncdn.com/i/teamlogos/nba/500/{abbrev}.png",
    ),
    "mlb": LeagueConfig(
        key="mlb",
        name="MLB",
        sport=Sport.BASEBALL,
        espn_path="baseball/mlb",
        logo_template="https://a.espncdn.com/i/teamlogos/mlb/500/{abbrev}.png",
    ),
}
