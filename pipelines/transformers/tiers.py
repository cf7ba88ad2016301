"""
Team Tier Classifier

Places a team into one of four tiers from two membership sets: the
competition's top tier and the user's (sport-scoped) favorites.
"""

from typing import Any, Iterable

from pipelines.transformers.ids import normalize_id_set, normalize_team_id
from schemas.categories import TeamTier


def classify_team(
    team_id: Any,
    top_tier_ids: Iterable[Any] | None,
    favorite_ids: Iterable[Any] | None,
) -> TeamTier:
    """
    Classify a single team.

    Ids are compared as normalized strings. Empty or missing sets simply
    yield TeamTier.NONE for everyone.

    Examples:
        >>> classify_team("55", ["55", "10"], ["55"])
        <TeamTier.FAVORITE_TOP_TIER: 'favorite-top-tier'>
        >>> classify_team(10, ["55", "10"], ["55"])
        <TeamTier.TOP_TIER: 'top-tier'>
    """
    team_key = normalize_team_id(team_id)
    is_top = team_key in normalize_id_set(top_tier_ids)
    is_favorite = team_key in normalize_id_set(favorite_ids)

    if is_favorite and is_top:
        return TeamTier.FAVORITE_TOP_TIER
    if is_favorite:
        return TeamTier.FAVORITE_NON_TOP_TIER
    if is_top:
        return TeamTier.TOP_TIER
    return TeamTier.NONE


def build_tier_map(
    team_ids: Iterable[Any],
    top_tier_ids: Iterable[Any] | None,
    favorite_ids: Iterable[Any] | None,
) -> dict[str, TeamTier]:
    """Map every team id to its tier."""
    top = normalize_id_set(top_tier_ids)
    favorites = normalize_id_set(favorite_ids)
    return {
        normalize_team_id(team_id): classify_team(team_id, top, favorites)
        for team_id in team_ids
    }
