"""
Shared HTTP plumbing for Cloud Cover Forecast providers.
"""

import logging
import math
from typing import Any, Dict, Optional

import httpx

from cloud_cover import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"CloudCoverForecast/{__version__}"


async def get_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    timeout: float = 12.0,
    headers: Optional[Dict[str, str]] = None,
    client: Optional[httpx.AsyncClient] = None,
    provider_name: str = "provider",
) -> Any:
    """
    GET a JSON document.

    A client may be passed in (tests use one with a MockTransport); otherwise
    a short-lived AsyncClient is opened for the request.

    Raises:
        httpx.HTTPStatusError: on non-2xx responses
        httpx.RequestError: on transport failures
        ValueError: if the body is not JSON
    """
    headers = {"User-Agent": USER_AGENT, **(headers or {})}

    if client is None:
        async with httpx.AsyncClient(timeout=timeout) as owned_client:
            return await get_json(url, params, timeout, headers, owned_client, provider_name)

    logger.debug(f"[{provider_name}] GET {url} params={params}")
    resp = await client.get(url, params=params, headers=headers, timeout=timeout)
    logger.info(f"[{provider_name}] Response status: {resp.status_code}")
    resp.raise_for_status()
    return resp.json()


def to_int(value: Any) -> Optional[int]:
    """Truncate a numeric value to int, keeping None."""
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def to_percent(value: Any) -> Optional[int]:
    """Round a fractional percentage half-up to int, keeping None."""
    if value is None:
        return None
    try:
        return int(math.floor(float(value) + 0.5))
    except (TypeError, ValueError, OverflowError):
        return None
