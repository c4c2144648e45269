from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import urlparse

from alt_checker.scanner.aggregator import build_payload, error_payload
from alt_checker.scanner.analysis import PageAnalyzer
from alt_checker.scanner.base import ScanResult
from alt_checker.scanner.errors import (
    InvalidURLError,
    RenderTimeoutError,
    ScanError,
    TargetUnavailableError,
)
from alt_checker.scanner.policies import RenderStrategyPolicy
from alt_checker.scanner.strategy import RenderStrategySelector
from alt_checker.scanner.templates.rendered_pass import PageFactory
from alt_checker.scanner.templates.static_pass import PageFetcher
from alt_checker.scanner.utils.http_client import fetch_page
from alt_checker.scanner.utils.playwright_pool import open_page

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*://", re.IGNORECASE)


def normalize_url(raw: str | None) -> str:
    """Validate a user-supplied URL, defaulting to https when no scheme is given."""
    url = (raw or "").strip()
    if not url:
        raise InvalidURLError("Missing url")
    if not _SCHEME_RE.match(url):
        url = "https://" + url
    if any(char.isspace() for char in url):
        raise InvalidURLError(f"Malformed url: {raw!r}")
    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError as e:
        raise InvalidURLError(f"Malformed url: {raw!r}") from e
    if parsed.scheme.lower() not in ("http", "https") or not host:
        raise InvalidURLError(f"Unsupported url: {raw!r}")
    return url


class ScanService:
    """Entry point for one page scan; fetch and render capabilities are injectable."""

    def __init__(
        self,
        fetcher: PageFetcher = fetch_page,
        page_factory: PageFactory = open_page,
        policy: RenderStrategyPolicy | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.page_factory = page_factory
        self.policy = policy

    def _selector(self, deep: bool) -> RenderStrategySelector:
        return RenderStrategySelector(
            analyzer=PageAnalyzer.from_settings(deep=deep),
            policy=self.policy or RenderStrategyPolicy.from_settings(),
            fetcher=self.fetcher,
            page_factory=self.page_factory,
        )

    async def scan(self, url: str | None, deep: bool = False) -> ScanResult:
        target = normalize_url(url)
        logger.info("Scanning %s%s", target, " (deep)" if deep else "")
        return await self._selector(deep).scan(target)

    async def scan_payload(self, url: str | None, deep: bool = False) -> tuple[dict[str, Any], int]:
        """Scan and map the outcome to ``(json_body, http_status)``."""
        try:
            result = await self.scan(url, deep=deep)
        except (TargetUnavailableError, RenderTimeoutError) as e:
            logger.warning("Scan of %s failed: %s", url, e)
            return error_payload(e)
        except ScanError as e:
            logger.info("Scan of %s rejected (%s): %s", url, e.category, e)
            return error_payload(e)
        except Exception as e:
            logger.exception("Scan of %s failed unexpectedly", url)
            return error_payload(e)
        return build_payload(result), 200
