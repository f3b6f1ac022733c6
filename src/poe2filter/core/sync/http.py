"""
HTTP helpers for talking to remote sources.

Wraps ``httpx.AsyncClient`` so that every failure surfaces as one of the
sync exceptions:

- non-success status -> RemoteRequestError (with status_code)
- timeout / connection / other transport failure -> RemoteRequestError
- body that is not JSON -> RemoteProtocolError

Requests are not retried; a failure aborts the run.

Example:
    >>> async with create_client(config) as client:
    ...     data = await fetch_json(client, url, source="github")
"""

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from poe2filter.core.config.models import SyncConfig
from poe2filter.core.exceptions import RemoteProtocolError, RemoteRequestError

logger = logging.getLogger(__name__)


def create_client(
    config: SyncConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create the HTTP client shared by all sources and the installer.

    Args:
        config: Sync configuration (user agent, timeout, token)
        transport: Optional transport override, used by tests

    Returns:
        Configured AsyncClient; the caller is responsible for closing it
    """
    headers = {"User-Agent": config.user_agent}
    return httpx.AsyncClient(
        headers=headers,
        timeout=config.timeout,
        follow_redirects=True,
        transport=transport,
    )


async def _request(
    client: httpx.AsyncClient,
    url: str,
    *,
    source: str,
    headers: Mapping[str, str] | None = None,
    params: Mapping[str, Any] | None = None,
) -> httpx.Response:
    logger.debug(f"GET {url}")
    try:
        response = await client.get(url, headers=headers, params=params)
        response.raise_for_status()
    except httpx.TimeoutException as e:
        raise RemoteRequestError(
            source,
            f"Request timed out while fetching {url}",
            url=url,
        ) from e
    except httpx.HTTPStatusError as e:
        raise RemoteRequestError(
            source,
            f"HTTP {e.response.status_code} error from {url}",
            status_code=e.response.status_code,
            url=url,
        ) from e
    except httpx.HTTPError as e:
        raise RemoteRequestError(
            source,
            f"Network error while fetching {url}: {e}",
            url=url,
        ) from e
    return response


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    source: str,
    headers: Mapping[str, str] | None = None,
    params: Mapping[str, Any] | None = None,
) -> Any:
    """
    GET a URL and decode the JSON body.

    Args:
        client: Shared HTTP client
        url: URL to fetch
        source: Source name used in error messages
        headers: Extra request headers
        params: Query parameters

    Returns:
        Decoded JSON value

    Raises:
        RemoteRequestError: On non-success status or transport failure
        RemoteProtocolError: If the body is empty or not valid JSON
    """
    response = await _request(client, url, source=source, headers=headers, params=params)
    if not response.content:
        raise RemoteProtocolError(source, f"Empty response body from {url}", url=url)
    try:
        return response.json()
    except ValueError as e:
        raise RemoteProtocolError(
            source,
            f"Failed to parse JSON response from {url}",
            url=url,
        ) from e


async def fetch_bytes(
    client: httpx.AsyncClient,
    url: str,
    *,
    source: str,
    headers: Mapping[str, str] | None = None,
) -> bytes:
    """
    GET a URL and return the raw body.

    Raises:
        RemoteRequestError: On non-success status or transport failure
    """
    response = await _request(client, url, source=source, headers=headers)
    logger.debug(f"Downloaded {len(response.content)} bytes from {url}")
    return response.content


__all__ = ["create_client", "fetch_json", "fetch_bytes"]
