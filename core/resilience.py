"""
Resilience Patterns

Retry, circuit breaking and bounded HTTP GETs for the ESPN site API.

Transport failures are raised as UpstreamError subclasses. Only the
retryable ones are retried and counted by the circuit breaker; extractors
turn everything in FETCH_FAILURES into an error-flagged empty result.
"""

from typing import Any, Callable, Optional, TypeVar

import requests
from circuitbreaker import CircuitBreakerError, circuit
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from core.logging import get_logger
from core.settings import settings


T = TypeVar("T")

log = get_logger("resilience")


# -----------------------------------------------------------------------------
# Upstream Errors
# -----------------------------------------------------------------------------


class UpstreamError(Exception):
    """An upstream call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RetryableError(UpstreamError):
    """Transient failure worth another attempt."""


class NetworkError(RetryableError):
    """Connection failure or timeout."""


class ServerError(RetryableError):
    """5xx response."""


class RateLimitError(RetryableError):
    """429 response."""

    def __init__(self, message: str, retry_after: int = 60):
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class ClientError(UpstreamError):
    """4xx response (unknown team, bad date). Retrying will not help."""


# ValueError covers bodies that are not JSON
FETCH_FAILURES = (UpstreamError, CircuitBreakerError, ValueError)


# -----------------------------------------------------------------------------
# Retry
# -----------------------------------------------------------------------------


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    log.warning(
        "retry_attempt",
        function=getattr(retry_state.fn, "__name__", "call"),
        attempt=retry_state.attempt_number,
        error=str(error),
        error_type=type(error).__name__,
    )


def with_retry(
    max_attempts: Optional[int] = None,
    base_delay: Optional[float] = None,
    max_delay: Optional[float] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Retry on RetryableError with exponential backoff. Defaults come from settings.

    Example:
        @with_retry(max_attempts=2)
        def fetch_standings():
            ...
    """
    return retry(
        stop=stop_after_attempt(max_attempts or settings.retry_max_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_base_delay if base_delay is None else base_delay,
            max=settings.retry_max_delay if max_delay is None else max_delay,
        ),
        retry=retry_if_exception_type(RetryableError),
        before_sleep=_log_retry,
        reraise=True,
    )


# -----------------------------------------------------------------------------
# Circuit Breaker
# -----------------------------------------------------------------------------


# Shared by every ESPN call so an outage stops all of them at once
espn_api_circuit = circuit(
    failure_threshold=settings.circuit_breaker_threshold,
    recovery_timeout=settings.circuit_breaker_timeout,
    expected_exception=RetryableError,
    name="espn_api",
)


# -----------------------------------------------------------------------------
# HTTP
# -----------------------------------------------------------------------------


def _retry_after_seconds(value: Optional[str]) -> int:
    # Retry-After may also be an HTTP date; fall back to a minute
    try:
        return int(value) if value else 60
    except ValueError:
        return 60


def raise_for_upstream_status(response: requests.Response) -> None:
    """
    Raise the UpstreamError matching a non-2xx response.

    Raises:
        RateLimitError: 429
        ServerError: 5xx
        ClientError: other 4xx
    """
    status = response.status_code
    if status < 400:
        return
    if status == 429:
        seconds = _retry_after_seconds(response.headers.get("Retry-After"))
        raise RateLimitError(f"Rate limited, retry after {seconds}s", retry_after=seconds)
    if status >= 500:
        raise ServerError(f"Server error: {status}", status_code=status)
    raise ClientError(f"Client error: {status} - {response.text[:200]}", status_code=status)


def http_get(url: str, params: Optional[dict] = None, timeout: Optional[float] = None, **kwargs: Any) -> requests.Response:
    """
    GET with a bounded timeout.

    Raises:
        NetworkError: On connection errors, timeouts and other transport failures
        RateLimitError, ServerError, ClientError: On non-2xx responses
    """
    timeout = timeout or settings.http_timeout
    try:
        response = requests.get(url, params=params, timeout=timeout, **kwargs)
    except requests.exceptions.Timeout:
        log.warning("http_timeout", url=url, timeout=timeout)
        raise NetworkError(f"Request timed out after {timeout}s: {url}")
    except requests.exceptions.RequestException as e:
        log.warning("http_transport_error", url=url, error=str(e))
        raise NetworkError(f"Request failed: {url} - {e}")

    raise_for_upstream_status(response)
    log.debug("http_response", url=url, status=response.status_code)
    return response
