"""
Key-Value Stores

The storage seam every persisted document goes through. The persistent store
is backed by the local SQLite file; the memory store backs the session scope
(watch party) and tests.
"""

from abc import ABC, abstractmethod

from db.models.kv_entry import KeyValueEntry


class KeyValueStore(ABC):
    """Minimal string-to-string storage interface."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        pass

    def keys_with_prefix(self, prefix: str) -> list[str]:
        return [key for key in self.keys() if key.startswith(prefix)]


class DatabaseKeyValueStore(KeyValueStore):
    """Persistent store over the KeyValueEntry table (call init_db first)."""

    def get_item(self, key: str) -> str | None:
        return KeyValueEntry.get_value(key)

    def set_item(self, key: str, value: str) -> None:
        KeyValueEntry.put(key, value)

    def remove_item(self, key: str) -> None:
        KeyValueEntry.remove(key)

    def keys(self) -> list[str]:
        return KeyValueEntry.all_keys()

    def keys_with_prefix(self, prefix: str) -> list[str]:
        return KeyValueEntry.keys_with_prefix(prefix)


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store. Lives exactly as long as the object."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def __len__(self) -> int:
        return len(self._data)
