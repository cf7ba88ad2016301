"""
Response Cache

TTL-keyed memo of upstream responses in the persistent key-value store.
Entries live under a namespace prefix so clear() never touches settings.
A cache problem never breaks a fetch: failed reads are misses and failed
writes are dropped.
"""

import json
import time
from typing import Any, Callable, Optional

from pydantic import ValidationError

from core.logging import get_logger
from core.settings import settings
from schemas.documents import CacheEntry
from services.kv_store import KeyValueStore


CACHE_KEY_PREFIX = "sports-tracker-cache-"

log = get_logger("response_cache")


def now_ms() -> int:
    return int(time.time() * 1000)


class ResponseCache:
    """
    Cache over a KeyValueStore.

    Args:
        store: Backing store
        default_ttl: TTL in milliseconds (defaults to cache_ttl_hours)
        clock: Returns the current epoch time in milliseconds
    """

    def __init__(
        self,
        store: KeyValueStore,
        default_ttl: int | None = None,
        clock: Callable[[], int] = now_ms,
        prefix: str = CACHE_KEY_PREFIX,
    ):
        self.store = store
        self.default_ttl = default_ttl if default_ttl is not None else settings.cache_ttl_ms
        self.clock = clock
        self.prefix = prefix

    def _storage_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[Any]:
        """Cached data, or None when absent, expired or unreadable."""
        storage_key = self._storage_key(key)
        try:
            raw = self.store.get_item(storage_key)
            if not raw:
                return None

            entry = CacheEntry.model_validate_json(raw)
            age = self.clock() - entry.timestamp
            ttl = entry.ttl if entry.ttl is not None else self.default_ttl
            if age < ttl:
                return entry.data

            self.store.remove_item(storage_key)
            log.debug("cache_expired", key=key, age_ms=age)
            return None
        except ValidationError as e:
            log.error("cache_entry_malformed", key=key, error=str(e))
            return None
        except Exception as e:
            log.error("cache_read_failed", key=key, error=str(e))
            return None

    def set(self, key: str, data: Any, ttl: int | None = None) -> None:
        entry = CacheEntry(timestamp=self.clock(), data=data, ttl=ttl if ttl is not None else self.default_ttl)
        try:
            self.store.set_item(self._storage_key(key), json.dumps(entry.model_dump()))
        except Exception as e:
            log.error("cache_write_failed", key=key, error=str(e))

    def clear(self) -> int:
        """Remove every cache entry. Returns the number removed."""
        keys = self.store.keys_with_prefix(self.prefix)
        for storage_key in keys:
            self.store.remove_item(storage_key)
        log.info("cache_cleared", entries=len(keys))
        return len(keys)
