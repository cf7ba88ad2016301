"""
Game Categorizer

Turns a pair of team tiers into a Big Game category. Rules are checked in
order and the first match wins; each rule is tried on both orderings of the
pair so home/away assignment never changes the result.
"""

from typing import Callable, NamedTuple, Optional, Union

from schemas.categories import ContinentalCategory, GameCategory, TeamTier
from schemas.competitions import CategoryScheme, Competition, get_competition_config


TierRule = Callable[[TeamTier, TeamTier], bool]

# Order is load-bearing: Playoff Preview must be checked before Rob Lowe,
# and Beat Em Off is the least specific so it goes last.
GAME_RULES: tuple[tuple[GameCategory, TierRule], ...] = (
    (
        GameCategory.HOUSE_DIVIDED,
        lambda a, b: a.is_favorite and b.is_favorite,
    ),
    (
        GameCategory.PLAYOFF_PREVIEW,
        lambda a, b: a == TeamTier.TOP_TIER and b == TeamTier.FAVORITE_TOP_TIER,
    ),
    (
        GameCategory.ROB_LOWE,
        lambda a, b: a == TeamTier.TOP_TIER and b == TeamTier.TOP_TIER,
    ),
    (
        GameCategory.MEASURING_STICK,
        lambda a, b: a == TeamTier.FAVORITE_NON_TOP_TIER and b == TeamTier.TOP_TIER,
    ),
    (
        GameCategory.BEAT_EM_OFF,
        lambda a, b: a.is_favorite and b == TeamTier.NONE,
    ),
)


def coerce_tier(value: Union[TeamTier, str, None]) -> TeamTier:
    """Accept enum members, their string values, or None (plain team)."""
    if value is None or value == "":
        return TeamTier.NONE
    return TeamTier(value)


def categorize_game(
    home_tier: Union[TeamTier, str, None],
    away_tier: Union[TeamTier, str, None],
) -> GameCategory:
    """
    Categorize a game from the two teams' tiers.

    Examples:
        >>> categorize_game("top-tier", "favorite-top-tier")
        <GameCategory.PLAYOFF_PREVIEW: 'playoff-preview'>
        >>> categorize_game("favorite-non-top-tier", "none")
        <GameCategory.BEAT_EM_OFF: 'beat-em-off'>
    """
    home = coerce_tier(home_tier)
    away = coerce_tier(away_tier)

    for category, matches in GAME_RULES:
        if matches(home, away) or matches(away, home):
            return category
    return GameCategory.NONE


# ------------------------------ Champions League ------------------------------ #


class TeamProfile(NamedTuple):
    """What the continental categorizer needs to know about one side."""

    tier: TeamTier
    is_domestic: bool = False  # plays in the English top flight


ProfileRule = Callable[[TeamProfile, TeamProfile], bool]

CONTINENTAL_RULES: tuple[tuple[ContinentalCategory, ProfileRule], ...] = (
    (
        ContinentalCategory.FAVORITE_ABROAD,
        lambda a, b: a.tier.is_favorite,
    ),
    (
        ContinentalCategory.ENGLISH_DERBY,
        lambda a, b: a.is_domestic and b.is_domestic,
    ),
    (
        ContinentalCategory.ENGLISH_ELITE,
        lambda a, b: a.is_domestic and a.tier == TeamTier.TOP_TIER and not b.is_domestic,
    ),
    (
        ContinentalCategory.ENGLISH_HOPEFUL,
        lambda a, b: a.is_domestic and not b.is_domestic,
    ),
)


def categorize_continental_game(home: TeamProfile, away: TeamProfile) -> ContinentalCategory:
    """Categorize a Champions League game. Games without an English side are NONE."""
    for category, matches in CONTINENTAL_RULES:
        if matches(home, away) or matches(away, home):
            return category
    return ContinentalCategory.NONE


def categorize_for_competition(
    competition: Competition | str,
    home: TeamProfile,
    away: TeamProfile,
) -> Union[GameCategory, ContinentalCategory]:
    """Dispatch to the categorizer for the competition's category scheme."""
    scheme = get_competition_config(competition).scheme
    if scheme == CategoryScheme.CONTINENTAL:
        return categorize_continental_game(home, away)
    if scheme == CategoryScheme.GENERIC:
        return categorize_game(home.tier, away.tier)
    raise ValueError(f"Unhandled category scheme: {scheme}")


def category_value(category: Optional[Union[GameCategory, ContinentalCategory, str]]) -> Optional[str]:
    """String key for a category, None for 'no category'."""
    if category is None:
        return None
    value = getattr(category, "value", category)
    return None if value in ("", "none") else value
