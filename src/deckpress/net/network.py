"""Centralized network utilities for catalog and image requests.

Every failure (connection, timeout, HTTP status, bad JSON) is raised as
FetchError so pipelines can record the unit and move on. There is no retry
or backoff here; pacing is the batch fetcher's job.
"""

import time
from typing import Any, Optional
from urllib.parse import urlencode

import requests

from deckpress.config import settings as settings_module
from deckpress.core.logging import get_logger
from deckpress.errors import FetchError

logger = get_logger(__name__)

CACHE_BUST_PARAM = "_t"


def with_cache_buster(url: str, token: Optional[int] = None) -> str:
    """Append a timestamp query token so image CDNs never serve a stale copy.

    Examples:
        >>> with_cache_buster("https://img/x.jpg", token=1)
        'https://img/x.jpg?_t=1'
        >>> with_cache_buster("https://img/x.jpg?1562", token=1)
        'https://img/x.jpg?1562&_t=1'
    """
    if token is None:
        token = int(time.time() * 1000)
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{CACHE_BUST_PARAM}={token}"


def build_url(base: str, path: str, params: Optional[dict[str, Any]] = None) -> str:
    """Join an API base and path, appending encoded query parameters."""
    url = path if path.startswith("http") else f"{base}{path}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return url


def _default_headers() -> dict[str, str]:
    return {"User-Agent": settings_module.settings.user_agent}


def fetch_bytes(
    url: str,
    *,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    cache_bust: bool = False,
    headers: Optional[dict[str, str]] = None,
) -> bytes:
    """Fetch URL content as bytes.

    Args:
        url: URL to fetch
        session: Optional shared requests session
        timeout: Request timeout in seconds (settings.http_timeout if None)
        cache_bust: Append a fresh cache-busting token to the URL
        headers: Extra HTTP headers

    Returns:
        Response body as bytes

    Raises:
        FetchError: On any network or HTTP error
    """
    if timeout is None:
        timeout = settings_module.settings.http_timeout
    if cache_bust:
        url = with_cache_buster(url)

    request_headers = _default_headers()
    if headers:
        request_headers.update(headers)

    getter = session.get if session is not None else requests.get
    try:
        response = getter(url, headers=request_headers, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as error:
        logger.debug("GET {} failed: {}", url, error)
        raise FetchError(f"Failed to fetch {url}: {error}") from error

    return response.content


def fetch_json(
    url: str,
    *,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    headers: Optional[dict[str, str]] = None,
) -> Any:
    """Fetch URL content as parsed JSON.

    Raises:
        FetchError: On network errors, HTTP errors, or an undecodable body
    """
    if timeout is None:
        timeout = settings_module.settings.http_timeout

    request_headers = _default_headers()
    request_headers["Accept"] = "application/json"
    if headers:
        request_headers.update(headers)

    getter = session.get if session is not None else requests.get
    try:
        response = getter(url, headers=request_headers, timeout=timeout)
    except requests.RequestException as error:
        logger.debug("GET {} failed: {}", url, error)
        raise FetchError(f"Failed to fetch {url}: {error}") from error

    try:
        payload = response.json()
    except ValueError as error:
        raise FetchError(f"Invalid JSON from {url}: {error}") from error

    if response.status_code >= 400:
        # Catalog error objects carry a human readable "details" field
        details = payload.get("details") if isinstance(payload, dict) else None
        raise FetchError(details or f"HTTP {response.status_code} for {url}")

    return payload
