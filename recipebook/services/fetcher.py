from __future__ import annotations

import logging

import httpx

from .errors import FetchError, NetworkTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Many recipe sites reject requests that don't look like a desktop browser.
BROWSER_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Sec-Ch-Ua": '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"Windows"',
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Upgrade-Insecure-Requests": "1",
}

VIDEO_PAGE_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


async def _get(client: httpx.AsyncClient, url: str, headers: dict[str, str], timeout: float) -> httpx.Response:
    try:
        response = await client.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()
        return response
    except httpx.TimeoutException as error:
        raise NetworkTimeoutError(url, timeout) from error
    except httpx.HTTPStatusError as error:
        status_code = error.response.status_code
        raise FetchError(f"Failed to access URL ({status_code})", status_code=status_code) from error
    except httpx.HTTPError as error:
        raise FetchError(f"Network error fetching {url}: {error}") from error


async def fetch_page(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Download ``url`` and return the decoded body.

    Raises ``FetchError`` for non-2xx responses and transport failures and
    ``NetworkTimeoutError`` when ``timeout`` elapses.
    """
    request_headers = headers if headers is not None else BROWSER_HEADERS

    if client is not None:
        response = await _get(client, url, request_headers, timeout)
    else:
        async with httpx.AsyncClient(follow_redirects=True) as own_client:
            response = await _get(own_client, url, request_headers, timeout)

    logger.info("fetch.ok url=%s status=%s length=%d", url, response.status_code, len(response.text))
    return response.text
