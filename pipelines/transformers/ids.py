"""
Id Transformers

ESPN returns team and event ids as numbers in some payloads and strings in
others. Everything crossing into the core goes through normalize_team_id.
"""

from typing import Any, Iterable


def normalize_team_id(value: Any) -> str:
    """
    Coerce an upstream id to its canonical string form.

    Examples:
        >>> normalize_team_id(368)
        '368'
        >>> normalize_team_id(" 55 ")
        '55'
        >>> normalize_team_id(None)
        ''
    """
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def normalize_id_set(values: Iterable[Any] | None) -> frozenset[str]:
    """Normalize a collection of ids into a set, dropping blanks."""
    if not values:
        return frozenset()
    return frozenset(i for i in (normalize_team_id(v) for v in values) if i)


def competitor_team_id(competitor: dict) -> str:
    """Team id of a scoreboard competitor (nested team id wins over the entry id)."""
    team = competitor.get("team") or {}
    return normalize_team_id(team.get("id") or competitor.get("id"))
