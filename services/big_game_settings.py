"""
Big Game Settings Store

Loads, migrates and saves the per-competition category settings. Resolution
order on read: active watch party, read cache, persistent store.
"""

import json
from typing import Union

from core.logging import get_logger
from pipelines.transformers.categories import category_value
from schemas.categories import ContinentalCategory, GameCategory
from schemas.competitions import Competition, parse_competition
from schemas.documents import BigGameSettings
from services.kv_store import KeyValueStore
from services.read_cache import ReadCache
from services.settings_migrations import (
    SCHEMA_VERSION,
    coerce_document,
    default_document,
    migrate,
)
from services.watch_party import WatchPartyOverlay


BIG_GAME_SETTINGS_KEY = "sports-tracker-big-game-settings"

CategoryLike = Union[GameCategory, ContinentalCategory, str, None]

log = get_logger("big_game_settings")


class BigGameSettingsStore:
    """Versioned Big Game settings over a key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        cache: ReadCache | None = None,
        overlay: WatchPartyOverlay | None = None,
    ):
        self.store = store
        self.cache = cache or ReadCache()
        self.overlay = overlay

    # ------------------------------------------------------------------ reads

    def load(self) -> BigGameSettings:
        """Current settings; never raises."""
        watch_party = self.overlay.get_active() if self.overlay else None
        if watch_party is not None:
            return self._from_watch_party(watch_party.big_games)

        settings = self.cache.get_or_load(BIG_GAME_SETTINGS_KEY, self._load_from_store)
        return settings.model_copy(deep=True)

    def _from_watch_party(self, big_games: dict[str, list[str]]) -> BigGameSettings:
        per_competition = {}
        for key, categories in big_games.items():
            competition = parse_competition(key)
            if competition is not None:
                per_competition[competition] = list(categories)
        return BigGameSettings(schema_version=SCHEMA_VERSION, per_competition=per_competition)

    def _load_from_store(self) -> BigGameSettings:
        raw_text = self.store.get_item(BIG_GAME_SETTINGS_KEY)
        if raw_text is None:
            return self._persist_defaults("absent")

        try:
            raw = json.loads(raw_text)
            doc, is_legacy = coerce_document(raw)
        except ValueError as e:  # JSONDecodeError and MalformedSettingsError
            log.error("big_game_settings_malformed", error=str(e))
            return self._persist_defaults("malformed")

        stored_version = doc["schemaVersion"]
        migrated = migrate(doc)

        if is_legacy or migrated != raw or stored_version < SCHEMA_VERSION:
            log.info(
                "big_game_settings_migrated",
                from_version=stored_version,
                to_version=migrated["schemaVersion"],
                legacy=is_legacy,
            )
            self._write(migrated)

        return BigGameSettings.model_validate(migrated)

    def _persist_defaults(self, reason: str) -> BigGameSettings:
        doc = default_document()
        log.info("big_game_settings_defaulted", reason=reason)
        self._write(doc)
        return BigGameSettings.model_validate(doc)

    def _write(self, doc: dict) -> None:
        self.store.set_item(BIG_GAME_SETTINGS_KEY, json.dumps(doc))

    def is_enabled(self, category: CategoryLike, competition: Competition | str) -> bool:
        """False for 'none', unknown competitions and competitions without a list."""
        key = category_value(category)
        if key is None:
            return False
        enabled = self.load().categories_for(competition)
        return bool(enabled) and key in enabled

    def is_big_game(self, category: CategoryLike, competition: Competition | str | None) -> bool:
        if not category or not competition:
            return False
        return self.is_enabled(category, competition)

    def is_enabled_anywhere(self, category: CategoryLike) -> bool:
        key = category_value(category)
        if key is None:
            return False
        return any(key in categories for categories in self.load().per_competition.values())

    # ----------------------------------------------------------------- writes

    def save(self, settings: BigGameSettings) -> None:
        if self.overlay is not None:
            self.overlay.guard("big game settings")

        doc = settings.to_storage()
        doc["schemaVersion"] = SCHEMA_VERSION
        self._write(doc)
        self.cache.invalidate(BIG_GAME_SETTINGS_KEY)
        log.info("big_game_settings_saved")

    def set_category_enabled(
        self,
        competition: Competition | str,
        category: CategoryLike,
        enabled: bool,
    ) -> BigGameSettings:
        """Toggle one category for one competition and save."""
        key = category_value(category)
        if key is None:
            raise ValueError("Cannot toggle the 'none' category")
        if self.overlay is not None:
            self.overlay.guard("big game settings")

        competition = Competition(competition)
        settings = self.load()
        categories = settings.per_competition.setdefault(competition, [])
        if enabled and key not in categories:
            categories.append(key)
        elif not enabled and key in categories:
            categories.remove(key)

        self.save(settings)
        return settings

    def invalidate(self) -> None:
        self.cache.invalidate(BIG_GAME_SETTINGS_KEY)
