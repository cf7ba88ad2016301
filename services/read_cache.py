"""
Read Cache

Memoizes parsed documents between writes. Owned by the composition root and
handed to the stores that read through it; every refresh cycle starts with
invalidate().
"""

from typing import Any, Callable, TypeVar

T = TypeVar("T")

_MISSING = object()


class ReadCache:
    """Keyed memo with explicit invalidation."""

    def __init__(self):
        self._values: dict[str, Any] = {}

    def get_or_load(self, key: str, loader: Callable[[], T]) -> T:
        value = self._values.get(key, _MISSING)
        if value is _MISSING:
            value = loader()
            self._values[key] = value
        return value

    def invalidate(self, key: str | None = None) -> None:
        """Drop one key, or everything when no key is given."""
        if key is None:
            self._values.clear()
        else:
            self._values.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._values
