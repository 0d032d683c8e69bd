"""
Provider retry handling for Cloud Cover Forecast

A fetch gets at most three attempts (two retries) with a short exponential
backoff. Failures that would repeat identically are not retried:
- payloads we cannot parse (MalformedResponseError, KeyError, ...)
- 4xx responses other than 408 and 429

Usage:
    @with_retry(provider_name="Met.no")
    async def fetch():
        ...

    data = await fetch()          # None once every attempt failed
    fetch.last_error              # the exception behind that None

Whether a None is fatal is the caller's decision: pipeline.py treats it as
fatal for Open-Meteo and as "skip the merge" for Met.no.
"""

import asyncio
import functools
import json
import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, FrozenSet, Optional, Tuple, TypeVar

import httpx

from cloud_cover.errors import MalformedResponseError

logger = logging.getLogger(__name__)

T = TypeVar('T')

PARSE_FAILURES = (MalformedResponseError, json.JSONDecodeError, KeyError, ValueError, TypeError)


class ErrorType(Enum):
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    API_ERROR = "api_error"
    PARSE_ERROR = "parse_error"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = 2
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 5.0
    backoff_factor: float = 2.0
    jitter: bool = True
    retry_statuses: FrozenSet[int] = frozenset({408, 429, 500, 502, 503, 504})
    fatal_statuses: FrozenSet[int] = frozenset({400, 401, 403, 404, 422})

    @property
    def attempts(self) -> int:
        return self.max_retries + 1


DEFAULT_RETRY_CONFIG = RetryConfig()


def categorize_error(exception: BaseException) -> Tuple[ErrorType, str]:
    """Classify a provider failure; returns (ErrorType, short message)."""
    detail = str(exception)[:200]

    # TimeoutException is a RequestError, so it is checked first
    if isinstance(exception, httpx.TimeoutException):
        return ErrorType.TIMEOUT, f"Timeout: {detail}"
    if isinstance(exception, httpx.HTTPStatusError):
        code = exception.response.status_code
        if code == 429:
            return ErrorType.RATE_LIMIT, "HTTP 429 Too Many Requests"
        return ErrorType.API_ERROR, f"HTTP {code}: {detail}"
    if isinstance(exception, httpx.RequestError):
        return ErrorType.API_ERROR, f"Request error: {detail}"
    if isinstance(exception, PARSE_FAILURES):
        return ErrorType.PARSE_ERROR, f"Parse error: {detail}"
    return ErrorType.UNKNOWN, detail


def calculate_backoff_delay(retry_index: int, config: RetryConfig) -> float:
    """Seconds to wait before retry number retry_index (0-based)."""
    delay = config.base_delay_seconds * config.backoff_factor ** retry_index
    delay = min(delay, config.max_delay_seconds)
    if config.jitter:
        delay *= 1 + random.uniform(0, 0.25)
    return delay


def is_retryable_error(exception: BaseException, config: RetryConfig) -> bool:
    if isinstance(exception, httpx.HTTPStatusError):
        code = exception.response.status_code
        if code in config.fatal_statuses:
            return False
        return code in config.retry_statuses or code >= 500
    if isinstance(exception, httpx.RequestError):
        return True
    if isinstance(exception, PARSE_FAILURES):
        return False
    return True


def with_retry(
    config: Optional[RetryConfig] = None,
    provider_name: str = "provider",
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[Optional[T]]]]:
    """
    Decorate an async fetch with retry and backoff.

    The wrapped coroutine never raises for provider failures; it returns
    None and leaves the last exception on its last_error attribute.
    """
    config = config or DEFAULT_RETRY_CONFIG

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[Optional[T]]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Optional[T]:
            wrapper.last_error = None
            started = time.time()

            for attempt in range(1, config.attempts + 1):
                if attempt > 1:
                    pause = calculate_backoff_delay(attempt - 2, config)
                    logger.info(f"[{provider_name}] Waiting {pause:.1f}s before attempt {attempt}/{config.attempts}")
                    await asyncio.sleep(pause)

                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    wrapper.last_error = e
                    kind, message = categorize_error(e)
                    logger.warning(f"[{provider_name}] Attempt {attempt}/{config.attempts} failed ({kind.value}): {message}")
                    if not is_retryable_error(e, config):
                        logger.error(f"[{provider_name}] {kind.value} is not retryable")
                        break
                else:
                    wrapper.last_error = None
                    if attempt > 1:
                        logger.info(f"[{provider_name}] Recovered on attempt {attempt} ({time.time() - started:.2f}s)")
                    return result

            logger.error(f"[{provider_name}] All attempts failed after {time.time() - started:.2f}s")
            return None

        wrapper.last_error = None
        return wrapper

    return decorator
