"""
Base Extractor

Shared failure boundary and response memoization for upstream extractors.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from core.logging import get_logger
from core.resilience import FETCH_FAILURES
from schemas.games import FetchResult
from services.response_cache import ResponseCache


# Payloads that parse as JSON but not into the expected shape
PAYLOAD_ERRORS = (AttributeError, KeyError, IndexError, TypeError)


class BaseExtractor(ABC):
    """
    Abstract base class for data extractors.

    Subclasses own the transport (retry, circuit breaker, timeout); this
    class owns the boundary. Callers always get a FetchResult, and a failed
    fetch is the empty default with error=True, never an exception.
    """

    def __init__(self, name: str, cache: Optional[ResponseCache] = None):
        """
        Args:
            name: Extractor name for logging
            cache: Response cache for successful payloads (optional)
        """
        self.name = name
        self.cache = cache
        self.log = get_logger(f"extractor.{name}")

    @abstractmethod
    def extract(self, **kwargs: Any) -> FetchResult:
        pass

    def fetch(
        self,
        call: Callable[[], Any],
        default: Any,
        cache_key: Optional[str] = None,
        transform: Optional[Callable[[Any], Any]] = None,
    ) -> FetchResult:
        """
        Run `call` behind the cache and the failure boundary.

        Only successful payloads are cached.
        """
        if cache_key and self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return FetchResult(data=cached, from_cache=True)

        try:
            data = call()
            if transform is not None:
                data = transform(data)
        except FETCH_FAILURES + PAYLOAD_ERRORS as e:
            self.log.warning(
                "fetch_failed",
                source=cache_key or self.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return FetchResult(data=default, error=True)

        if cache_key and self.cache is not None:
            self.cache.set(cache_key, data)
        return FetchResult(data=data)
