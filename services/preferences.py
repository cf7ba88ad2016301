"""
Display Preferences and Must Watch

Small persisted flags and lists. Both read through the watch party overlay
first and refuse writes while one is active.
"""

import json
from typing import Iterable

from core.logging import get_logger
from services.kv_store import KeyValueStore
from services.read_cache import ReadCache
from services.watch_party import WatchPartyOverlay


PRESEASON_SETTINGS_KEY = "sports-tracker-show-preseason"
MUST_WATCH_KEY = "sports-tracker-must-watch"

log = get_logger("preferences")


class PreferencesStore:
    """Preseason visibility. Stored as "true"/"false", default true."""

    def __init__(self, store: KeyValueStore, overlay: WatchPartyOverlay | None = None):
        self.store = store
        self.overlay = overlay

    def show_preseason(self) -> bool:
        watch_party = self.overlay.get_active() if self.overlay else None
        if watch_party is not None:
            return watch_party.show_preseason

        saved = self.store.get_item(PRESEASON_SETTINGS_KEY)
        return saved is None or saved == "true"

    def set_show_preseason(self, value: bool) -> None:
        if self.overlay is not None:
            self.overlay.guard("display options")
        self.store.set_item(PRESEASON_SETTINGS_KEY, "true" if value else "false")


class MustWatchStore:
    """Event ids the user starred."""

    def __init__(
        self,
        store: KeyValueStore,
        cache: ReadCache | None = None,
        overlay: WatchPartyOverlay | None = None,
    ):
        self.store = store
        self.cache = cache or ReadCache()
        self.overlay = overlay

    def _load_saved(self) -> list[str]:
        saved = self.store.get_item(MUST_WATCH_KEY)
        if not saved:
            return []
        try:
            ids = json.loads(saved)
        except ValueError as e:
            log.error("must_watch_malformed", error=str(e))
            return []
        if not isinstance(ids, list):
            log.error("must_watch_malformed", error="expected a list")
            return []
        return [str(i) for i in ids]

    def get_all(self) -> list[str]:
        watch_party = self.overlay.get_active() if self.overlay else None
        if watch_party is not None:
            return list(watch_party.must_watch)
        return list(self.cache.get_or_load(MUST_WATCH_KEY, self._load_saved))

    def save(self, event_ids: list[str]) -> None:
        if self.overlay is not None:
            self.overlay.guard("must watch games")
        self.store.set_item(MUST_WATCH_KEY, json.dumps([str(i) for i in event_ids]))
        self.cache.invalidate(MUST_WATCH_KEY)

    def toggle(self, event_id) -> bool:
        """Flip an event's starred state. Returns the new state."""
        event_id = str(event_id)
        ids = self.get_all()
        if event_id in ids:
            ids.remove(event_id)
            starred = False
        else:
            ids.append(event_id)
            starred = True
        self.save(ids)
        return starred

    def is_must_watch(self, event_id, involves_favorite: bool = False) -> bool:
        """Big games involving a favorite are always must-watch."""
        return involves_favorite or str(event_id) in self.get_all()

    def cleanup(self, current_event_ids: Iterable) -> int:
        """
        Drop starred ids that no longer match any loaded game.

        Skipped during a watch party so shared data never rewrites local
        storage. Returns the number of ids removed.
        """
        if self.overlay is not None and self.overlay.is_active:
            return 0

        current = {str(i) for i in current_event_ids}
        ids = self.get_all()
        valid = [i for i in ids if i in current]
        if len(valid) != len(ids):
            self.save(valid)
            log.info("must_watch_cleaned", removed=len(ids) - len(valid))
        return len(ids) - len(valid)

    def auto_mark(self, event_ids: Iterable) -> int:
        """Star favorite-team Big Games. Skipped during a watch party."""
        if self.overlay is not None and self.overlay.is_active:
            return 0

        ids = self.get_all()
        added = []
        for event_id in map(str, event_ids):
            if event_id not in ids and event_id not in added:
                added.append(event_id)
        if added:
            self.save(ids + added)
            log.info("must_watch_auto_marked", added=len(added))
        return len(added)

    def invalidate(self) -> None:
        self.cache.invalidate(MUST_WATCH_KEY)
