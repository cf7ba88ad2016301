"""
Team Tiers and Game Categories

Label enums for the categorization engine and the default category sets per
scheme.
"""

from enum import Enum

from schemas.competitions import CategoryScheme, Competition, get_competition_config


class TeamTier(str, Enum):
    """Where a team sits relative to the top tier and the user's favorites."""

    NONE = "none"
    TOP_TIER = "top-tier"
    FAVORITE_TOP_TIER = "favorite-top-tier"  # "Thinkin' Supey"
    FAVORITE_NON_TOP_TIER = "favorite-non-top-tier"  # "Ya Never Know"

    @property
    def is_favorite(self) -> bool:
        return self in (TeamTier.FAVORITE_TOP_TIER, TeamTier.FAVORITE_NON_TOP_TIER)

    @property
    def is_top_tier(self) -> bool:
        return self in (TeamTier.TOP_TIER, TeamTier.FAVORITE_TOP_TIER)


class GameCategory(str, Enum):
    """Generic Big Game categories."""

    ROB_LOWE = "rob-lowe"
    PLAYOFF_PREVIEW = "playoff-preview"
    MEASURING_STICK = "measuring-stick"
    BEAT_EM_OFF = "beat-em-off"
    HOUSE_DIVIDED = "house-divided"
    NONE = "none"


class ContinentalCategory(str, Enum):
    """Champions League categories: favorite status and English prestige."""

    FAVORITE_ABROAD = "favorite-abroad"
    ENGLISH_DERBY = "english-derby"
    ENGLISH_ELITE = "english-elite"
    ENGLISH_HOPEFUL = "english-hopeful"
    NONE = "none"


GENERIC_CATEGORIES: tuple[str, ...] = (
    GameCategory.ROB_LOWE.value,
    GameCategory.PLAYOFF_PREVIEW.value,
    GameCategory.MEASURING_STICK.value,
    GameCategory.BEAT_EM_OFF.value,
    GameCategory.HOUSE_DIVIDED.value,
)

CONTINENTAL_CATEGORIES: tuple[str, ...] = (
    ContinentalCategory.FAVORITE_ABROAD.value,
    ContinentalCategory.ENGLISH_DERBY.value,
    ContinentalCategory.ENGLISH_ELITE.value,
    ContinentalCategory.ENGLISH_HOPEFUL.value,
)

CATEGORY_DISPLAY_NAMES: dict[str, str] = {
    GameCategory.ROB_LOWE.value: "Rob Lowe Games",
    GameCategory.PLAYOFF_PREVIEW.value: "Playoff Preview",
    GameCategory.MEASURING_STICK.value: "Measuring Stick Games",
    GameCategory.BEAT_EM_OFF.value: "Beat Em Off Games",
    GameCategory.HOUSE_DIVIDED.value: "House Divided Games",
    ContinentalCategory.FAVORITE_ABROAD.value: "Favorites Abroad",
    ContinentalCategory.ENGLISH_DERBY.value: "English Derbies",
    ContinentalCategory.ENGLISH_ELITE.value: "English Elite",
    ContinentalCategory.ENGLISH_HOPEFUL.value: "English Hopefuls",
}

CATEGORY_DESCRIPTIONS: dict[str, str] = {
    GameCategory.ROB_LOWE.value: "Two top tier teams (not your favorites)",
    GameCategory.PLAYOFF_PREVIEW.value: "Top tier vs your top-tier favorite",
    GameCategory.MEASURING_STICK.value: "Your underdog favorites vs top tier opponents",
    GameCategory.BEAT_EM_OFF.value: "Your favorites vs regular teams",
    GameCategory.HOUSE_DIVIDED.value: "Two of your favorites playing each other",
    ContinentalCategory.FAVORITE_ABROAD.value: "Your favorites in Europe",
    ContinentalCategory.ENGLISH_DERBY.value: "Two English clubs meeting in Europe",
    ContinentalCategory.ENGLISH_ELITE.value: "A top English club vs a foreign side",
    ContinentalCategory.ENGLISH_HOPEFUL.value: "Any other English club vs a foreign side",
}

TIER_LABELS: dict[TeamTier, str] = {
    TeamTier.NONE: "",
    TeamTier.TOP_TIER: "Top Tier",
    TeamTier.FAVORITE_TOP_TIER: "Thinkin' Supey",
    TeamTier.FAVORITE_NON_TOP_TIER: "Ya Never Know",
}


def categories_for_scheme(scheme: CategoryScheme) -> list[str]:
    """Full category list for a scheme, in display order."""
    if scheme == CategoryScheme.CONTINENTAL:
        return list(CONTINENTAL_CATEGORIES)
    return list(GENERIC_CATEGORIES)


def default_categories(competition: Competition | str) -> list[str]:
    """Default (all enabled) category list for a competition."""
    return categories_for_scheme(get_competition_config(competition).scheme)
