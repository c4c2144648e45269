from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass

import httpx

from alt_checker.config import settings
from alt_checker.scanner.errors import TargetUnavailableError

logger = logging.getLogger(__name__)

# User-Agent rotation pool
_USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:133.0) Gecko/20100101 Firefox/133.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/18.2 Safari/605.1.15",
]


@dataclass
class FetchResponse:
    status_code: int
    text: str
    url: str


def _get_random_ua() -> str:
    return random.choice(_USER_AGENTS)


def browser_headers(headers: dict[str, str] | None = None) -> dict[str, str]:
    """Headers of an ordinary desktop browser visit, overridable per call."""
    merged = {
        "User-Agent": _get_random_ua(),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
        "Accept-Language": settings.ACCEPT_LANGUAGE,
    }
    if headers:
        merged.update(headers)
    return merged


async def fetch_page(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout: float | None = None,
    max_retries: int | None = None,
) -> FetchResponse:
    """Fetch a URL with retry and UA rotation.

    Only transport errors are retried; any HTTP status is returned to the
    caller, who decides whether it means "typo" or "blocked".
    """
    timeout = timeout or settings.STATIC_FETCH_TIMEOUT
    attempts = max(1, max_retries if max_retries is not None else settings.STATIC_FETCH_RETRIES)
    merged_headers = browser_headers(headers)

    last_exc: Exception | None = None
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        for attempt in range(attempts):
            try:
                response = await client.get(url, headers=merged_headers)
                return FetchResponse(
                    status_code=response.status_code,
                    text=response.text,
                    url=str(response.url),
                )
            except httpx.RequestError as e:
                last_exc = e
                if attempt + 1 >= attempts:
                    break
                wait_time = 2**attempt * 0.5 + random.uniform(0, 0.5)
                logger.warning(
                    "Request failed (attempt %d/%d) for %s: %s. Retrying in %.1fs",
                    attempt + 1, attempts, url, e, wait_time,
                )
                await asyncio.sleep(wait_time)

    raise TargetUnavailableError(f"Could not fetch {url}: {last_exc}") from last_exc
