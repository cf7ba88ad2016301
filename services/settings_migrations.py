"""
Big Game Settings Migrations

Stored settings documents carry a schemaVersion. Each MigrationStep upgrades
a document from exactly one version to the next; the loader folds every step
whose from_version is at or above the stored version.

Documents here are plain dicts in storage shape:
    {"schemaVersion": int, "perCompetition": {competition: [category, ...]}}
"""

import copy
from dataclasses import dataclass
from typing import Any, Callable

from schemas.categories import CONTINENTAL_CATEGORIES, GameCategory, default_categories
from schemas.competitions import (
    COMPETITIONS,
    CategoryScheme,
    Competition,
    parse_competition,
)


SCHEMA_VERSION = 3

Document = dict[str, Any]


@dataclass(frozen=True)
class MigrationStep:
    """Upgrade from `from_version` to `from_version + 1`."""

    from_version: int
    description: str
    apply: Callable[[Document], Document]


def _generic_competitions() -> list[Competition]:
    return [key for key, cfg in COMPETITIONS.items() if cfg.scheme == CategoryScheme.GENERIC]


def _add_playoff_preview(doc: Document) -> Document:
    doc = copy.deepcopy(doc)
    per_competition = doc.setdefault("perCompetition", {})
    for competition in _generic_competitions():
        categories = per_competition.setdefault(competition.value, [])
        if GameCategory.PLAYOFF_PREVIEW.value not in categories:
            categories.append(GameCategory.PLAYOFF_PREVIEW.value)
    return doc


def _adopt_continental_scheme(doc: Document) -> Document:
    doc = copy.deepcopy(doc)
    per_competition = doc.setdefault("perCompetition", {})
    per_competition[Competition.CHAMPIONS_LEAGUE.value] = list(CONTINENTAL_CATEGORIES)
    return doc


MIGRATION_STEPS: tuple[MigrationStep, ...] = (
    MigrationStep(
        from_version=1,
        description="Add playoff-preview to generic-scheme competitions",
        apply=_add_playoff_preview,
    ),
    MigrationStep(
        from_version=2,
        description="Replace champions-league categories with the continental scheme",
        apply=_adopt_continental_scheme,
    ),
)

if [step.from_version for step in MIGRATION_STEPS] != list(range(1, SCHEMA_VERSION)):
    raise RuntimeError("MIGRATION_STEPS must cover every version below SCHEMA_VERSION in order")


class MalformedSettingsError(ValueError):
    """Stored settings could not be interpreted."""


def default_document() -> Document:
    """Current-version document with every category enabled everywhere."""
    return {
        "schemaVersion": SCHEMA_VERSION,
        "perCompetition": {
            competition.value: default_categories(competition) for competition in Competition
        },
    }


def pending_steps(stored_version: int) -> list[MigrationStep]:
    """Steps a document at `stored_version` still needs, in order."""
    return [step for step in MIGRATION_STEPS if step.from_version >= stored_version]


def backfill_competitions(doc: Document) -> Document:
    """Add any known competition missing from the document with its defaults."""
    doc = copy.deepcopy(doc)
    per_competition = doc.setdefault("perCompetition", {})
    for competition in Competition:
        if competition.value not in per_competition:
            per_competition[competition.value] = default_categories(competition)
    return doc


def migrate(doc: Document) -> Document:
    """Backfill, then fold pending steps and stamp the current version."""
    stored_version = doc.get("schemaVersion") or 1
    doc = backfill_competitions(doc)
    for step in pending_steps(stored_version):
        doc = step.apply(doc)
    doc["schemaVersion"] = max(stored_version, SCHEMA_VERSION)
    return doc


def from_legacy(categories: list[str]) -> Document:
    """
    Convert the pre-versioning flat category list into a version-1 document.

    The flat list applies to every generic-scheme competition; bespoke
    competitions are left out so backfill gives them their defaults.
    """
    return {
        "schemaVersion": 1,
        "perCompetition": {
            competition.value: list(categories) for competition in _generic_competitions()
        },
    }


def _clean_category_list(value: Any, competition: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(c, str) for c in value):
        raise MalformedSettingsError(f"categories for {competition} must be a list of strings")
    seen: list[str] = []
    for category in value:
        if category not in seen:
            seen.append(category)
    return seen


def coerce_document(raw: Any) -> tuple[Document, bool]:
    """
    Interpret a parsed stored value.

    Returns:
        (document, is_legacy). Legacy documents come back as version 1.

    Raises:
        MalformedSettingsError: If the value has no recognizable shape
    """
    if isinstance(raw, list):
        return from_legacy(_clean_category_list(raw, "legacy list")), True

    if not isinstance(raw, dict):
        raise MalformedSettingsError(f"unexpected settings type: {type(raw).__name__}")

    if "perCompetition" not in raw:
        if "enabledCategories" in raw:
            return from_legacy(_clean_category_list(raw["enabledCategories"], "legacy list")), True
        raise MalformedSettingsError("settings document has no perCompetition map")

    per_competition = raw["perCompetition"]
    if not isinstance(per_competition, dict):
        raise MalformedSettingsError("perCompetition must be an object")

    version = raw.get("schemaVersion") or 1
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        raise MalformedSettingsError(f"invalid schemaVersion: {version!r}")

    cleaned: dict[str, list[str]] = {}
    for key, categories in per_competition.items():
        # Competitions dropped from the registry are discarded
        if parse_competition(key) is None:
            continue
        cleaned[key] = _clean_category_list(categories, key)

    return {"schemaVersion": version, "perCompetition": cleaned}, False
