"""
Data Transformers

Pure functions for transforming extracted data.
"""

from pipelines.transformers.ids import normalize_team_id, normalize_id_set, competitor_team_id
from pipelines.transformers.tiers import classify_team, build_tier_map
from pipelines.transformers.categories import (
    TeamProfile,
    categorize_game,
    categorize_continental_game,
    categorize_for_competition,
    category_value,
)

__all__ = [
    "normalize_team_id",
    "normalize_id_set",
    "competitor_team_id",
    "classify_team",
    "build_tier_map",
    "TeamProfile",
    "categorize_game",
    "categorize_continental_game",
    "categorize_for_competition",
    "category_value",
]
