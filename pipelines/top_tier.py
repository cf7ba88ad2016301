"""
Top Tier Resolver

Computes each competition's top tier from live standings. Cups borrow the
Premier League's top tier; the Champions League also gets the full set of
Premier League ids to tell English clubs apart.

Rules:
    premier-league: points > (5th place points - 3)
    nba:            top 6 by wins in each conference
    nhl:            top 8 by wins in each conference (divisions aggregated)
"""

import asyncio
import re
from dataclasses import dataclass
from typing import Any, Union

from core.logging import get_logger
from pipelines.extractors.espn import ESPNExtractor
from pipelines.transformers.ids import normalize_team_id
from schemas.competitions import COMPETITIONS, Competition, get_competition_config
from schemas.games import TopTierSet


log = get_logger("top_tier")

TeamStat = tuple[str, int]  # (team id, stat value)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_stat_value(value: Any) -> int:
    """
    Integer part of a stat value, 0 when there is none.

    Examples:
        >>> parse_stat_value("45")
        45
        >>> parse_stat_value(12.0)
        12
        >>> parse_stat_value(None)
        0
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return int(value) if value == value else 0  # NaN
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def extract_stat(entry: dict, name: str) -> int:
    """Value of the first stat called `name` on a standings entry."""
    for stat in entry.get("stats") or []:
        if stat.get("name") == name:
            return parse_stat_value(stat.get("value"))
    return 0


def entry_stats(entries: list[dict], stat_name: str) -> list[TeamStat]:
    teams = []
    for entry in entries:
        team_id = normalize_team_id((entry.get("team") or {}).get("id"))
        if team_id:
            teams.append((team_id, extract_stat(entry, stat_name)))
    return teams


def _sorted_desc(teams: list[TeamStat]) -> list[TeamStat]:
    # Stable: ties keep standings order
    return sorted(teams, key=lambda t: t[1], reverse=True)


def points_from_position(teams: list[TeamStat], position: int, offset: int) -> list[str]:
    """Teams with more points than (points at `position` - offset)."""
    ranked = _sorted_desc(teams)
    if len(ranked) < position:
        return []
    threshold = ranked[position - 1][1] - offset
    return [team_id for team_id, points in ranked if points > threshold]


def top_n_by_conference(conferences: list[list[TeamStat]], n: int) -> list[str]:
    top: list[str] = []
    for teams in conferences:
        top.extend(team_id for team_id, _ in _sorted_desc(teams)[:n])
    return top


@dataclass(frozen=True)
class PointsFromPosition:
    position: int = 5
    offset: int = 3
    stat: str = "points"

    def apply(self, payload: dict) -> tuple[list[str], list[str]]:
        children = payload.get("children") or []
        if not children:
            raise ValueError("standings payload has no groups")
        entries = (children[0].get("standings") or {}).get("entries") or []
        teams = entry_stats(entries, self.stat)
        return points_from_position(teams, self.position, self.offset), [t for t, _ in teams]


@dataclass(frozen=True)
class TopNByConference:
    n: int
    stat: str = "wins"
    aggregate_divisions: bool = False

    def _conference_entries(self, conference: dict) -> list[dict]:
        if not self.aggregate_divisions:
            return (conference.get("standings") or {}).get("entries") or []
        entries: list[dict] = []
        for division in conference.get("children") or []:
            entries.extend((division.get("standings") or {}).get("entries") or [])
        return entries

    def apply(self, payload: dict) -> tuple[list[str], list[str]]:
        children = payload.get("children") or []
        if not children:
            raise ValueError("standings payload has no conferences")
        conferences = [entry_stats(self._conference_entries(c), self.stat) for c in children]
        all_ids = [team_id for teams in conferences for team_id, _ in teams]
        return top_n_by_conference(conferences, self.n), all_ids


TopTierRule = Union[PointsFromPosition, TopNByConference]

TOP_TIER_RULES: dict[Competition, TopTierRule] = {
    Competition.PREMIER_LEAGUE: PointsFromPosition(position=5, offset=3),
    Competition.NBA: TopNByConference(n=6),
    Competition.NHL: TopNByConference(n=8, aggregate_divisions=True),
}

_missing_rules = {cfg.tier_source for cfg in COMPETITIONS.values()} - set(TOP_TIER_RULES)
if _missing_rules:
    raise RuntimeError(f"No top tier rule for: {sorted(c.value for c in _missing_rules)}")


def tier_sources() -> list[Competition]:
    """Competitions whose standings need fetching, in registry order."""
    sources = {cfg.tier_source for cfg in COMPETITIONS.values()}
    return [c for c in Competition if c in sources]


class TopTierResolver:
    """Fetches standings and applies TOP_TIER_RULES."""

    def __init__(self, extractor: ESPNExtractor):
        self.extractor = extractor

    def resolve_source(self, source: Competition) -> TopTierSet:
        """Top tier for one standings source. Never raises."""
        config = get_competition_config(source)
        result = self.extractor.get_standings(config.espn_path)
        if result.error:
            return TopTierSet(error=True)

        try:
            top_ids, all_ids = TOP_TIER_RULES[source].apply(result.data)
        except (ValueError, AttributeError, TypeError) as e:
            log.warning("standings_unusable", competition=source.value, error=str(e))
            return TopTierSet(error=True)

        log.debug("top_tier_resolved", competition=source.value, top_tier=len(top_ids), teams=len(all_ids))
        return TopTierSet(top_tier_ids=frozenset(top_ids), domestic_ids=frozenset(all_ids))

    async def resolve(self) -> dict[Competition, TopTierSet]:
        """Top tier for every competition; sources are fetched concurrently."""
        sources = tier_sources()
        results = await asyncio.gather(
            *[asyncio.to_thread(self.resolve_source, source) for source in sources]
        )
        by_source = dict(zip(sources, results))
        return {key: by_source[cfg.tier_source] for key, cfg in COMPETITIONS.items()}
