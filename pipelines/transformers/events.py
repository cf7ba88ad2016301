"""
Event Transformers

Pure functions that shape ESPN scoreboard/schedule events into the game
models. Ids go through normalize_team_id here, at the boundary.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pipelines.transformers.ids import competitor_team_id, normalize_team_id
from schemas.competitions import LEAGUES, Sport
from schemas.documents import FavoriteTeam
from schemas.games import GameScore, ScheduledGame


# Teams whose primary color is too light to read on white
LIGHT_COLOR_TEAM_OVERRIDES = frozenset({"381", "380", "18"})

NATIONAL_NETWORKS = ("TNT", "NHL Network", "ESPN", "ABC")
ESPN_PLUS_BLACKOUT_TEAMS = ("New York Rangers", "New York Islanders", "New Jersey Devils")


def parse_event_date(value: str) -> datetime:
    """
    Parse an ESPN timestamp ("2025-01-04T15:00Z") into an aware datetime.

    Raises:
        ValueError: If the value is not an ISO timestamp
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def first_competition(event: dict) -> Optional[dict]:
    competitions = event.get("competitions") or []
    return competitions[0] if competitions else None


def competitors(event: dict) -> list[dict]:
    competition = first_competition(event) or {}
    return competition.get("competitors") or []


def home_and_away(event: dict) -> Optional[tuple[dict, dict]]:
    """(home, away) competitors, or None unless there are exactly two with both sides."""
    sides = competitors(event)
    if len(sides) != 2:
        return None
    home = next((c for c in sides if c.get("homeAway") == "home"), None)
    away = next((c for c in sides if c.get("homeAway") == "away"), None)
    if home is None or away is None:
        return None
    return home, away


def is_completed(event: dict) -> bool:
    competition = first_competition(event) or {}
    return bool(((competition.get("status") or {}).get("type") or {}).get("completed"))


def team_name(competitor: dict, default: str = "TBD") -> str:
    team = competitor.get("team") or {}
    return team.get("displayName") or team.get("name") or default


def team_logo(competitor: dict) -> Optional[str]:
    team = competitor.get("team") or {}
    if team.get("logo"):
        return team["logo"]
    logos = team.get("logos") or []
    return logos[0].get("href") if logos else None


def score_value(competitor: dict) -> Optional[str]:
    """Scoreboards send "2"; schedules send {"value": 2.0, "displayValue": "2"}."""
    score = competitor.get("score")
    if isinstance(score, dict):
        score = score.get("displayValue", score.get("value"))
    return None if score is None else str(score)


def _is_team(competitor: dict, team_key: str) -> bool:
    return team_key in (normalize_team_id(competitor.get("id")), competitor_team_id(competitor))


def involves_team(event: dict, team_id: Any) -> bool:
    team_key = normalize_team_id(team_id)
    return any(_is_team(c, team_key) for c in competitors(event))


def broadcast_channels(competition: dict) -> str:
    """Comma-joined channel names, "TBD" when none are listed."""
    channels = []
    for broadcast in competition.get("broadcasts") or []:
        names = broadcast.get("names") or []
        if names:
            channels.append(", ".join(names))
        elif (broadcast.get("media") or {}).get("shortName"):
            channels.append(broadcast["media"]["shortName"])
    return ", ".join(channels) or "TBD"


def with_espn_plus(channels: str, team: str, opponent: str) -> str:
    """NHL games stream on ESPN+ unless nationally televised or blacked out."""
    upper = channels.upper()
    if any(network.upper() in upper for network in NATIONAL_NETWORKS):
        return channels
    if any(t in opponent or t in team for t in ESPN_PLUS_BLACKOUT_TEAMS):
        return channels
    if "ESPN+" in channels:
        return channels
    return "ESPN+" if channels == "TBD" else f"{channels}, ESPN+"


def season_label(event: dict, sport: str) -> Optional[str]:
    """
    "Preseason" / "Spring Training" / "Playoffs", or None for the regular season.

    Examples:
        >>> season_label({"season": {"type": 1}}, "baseball")
        'Spring Training'
        >>> season_label({"seasonType": {"name": "Postseason"}}, "hockey")
        'Playoffs'
    """
    season = event.get("season") or {}
    season_type = event.get("seasonType") or {}
    type_id = season.get("type", season_type.get("type"))
    slug = (season.get("slug") or "").lower()
    type_name = (season_type.get("name") or season_type.get("abbreviation") or "").lower()

    is_preseason = (
        type_id in (1, "1")
        or slug == "preseason"
        or "preseason" in type_name
        or "pre-season" in type_name
    )
    is_playoffs = (
        type_id in (3, "3")
        or "postseason" in slug
        or "playoff" in type_name
        or "postseason" in type_name
    )

    if is_preseason:
        return "Spring Training" if sport == Sport.BASEBALL.value else "Preseason"
    if is_playoffs:
        return "Playoffs"
    return None


def team_color(team_id: Any, primary: Optional[str], alternate: Optional[str]) -> Optional[str]:
    if not primary:
        return None
    if normalize_team_id(team_id) in LIGHT_COLOR_TEAM_OVERRIDES and alternate:
        return f"#{alternate}"
    return f"#{primary}"


def parse_event(event: dict, team: FavoriteTeam) -> Optional[ScheduledGame]:
    """
    Shape one event from `team`'s point of view.

    Returns None when the event has no competition, no opponent or no
    usable date.
    """
    competition = first_competition(event)
    if competition is None:
        return None

    sides = competition.get("competitors") or []
    ours = next((c for c in sides if _is_team(c, team.id)), None)
    opponent = next((c for c in sides if not _is_team(c, team.id)), None)
    if opponent is None:
        return None

    try:
        game_date = parse_event_date(event.get("date") or "")
    except ValueError:
        return None

    completed = is_completed(event)
    opponent_name = team_name(opponent, default="Unknown")
    channel = broadcast_channels(competition)
    if team.sport == Sport.HOCKEY.value:
        channel = with_espn_plus(channel, team.name, opponent_name)

    score = None
    if completed:
        score = GameScore(
            us=score_value(ours) if ours else None,
            them=score_value(opponent),
            winner=ours.get("winner") if ours else None,
        )

    return ScheduledGame(
        id=normalize_team_id(event.get("id")),
        date=game_date,
        opponent=opponent_name,
        opponent_logo=team_logo(opponent),
        is_home=bool(ours) and ours.get("homeAway") == "home",
        is_completed=completed,
        score=score,
        channel=channel,
        venue=(competition.get("venue") or {}).get("fullName"),
        season_label=season_label(event, team.sport),
    )


def league_team_to_favorite(entry: dict, league_key: str) -> FavoriteTeam:
    """Turn a league team list entry into a pickable FavoriteTeam."""
    league = LEAGUES[league_key]
    team_id = normalize_team_id(entry.get("id"))
    abbrev = (entry.get("abbreviation") or "").lower()
    logos = entry.get("logos") or []
    logo = logos[0].get("href") if logos else None
    return FavoriteTeam(
        id=team_id,
        name=entry.get("displayName") or entry.get("name") or team_id,
        league=league_key,
        sport=league.sport.value,
        espn_path=league.espn_path,
        logo=logo or league.logo_template.format(id=team_id, abbrev=abbrev),
    )
