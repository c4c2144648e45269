from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from alt_checker.scanner.base import BasePass, Engine, FetchedDocument
from alt_checker.scanner.utils.block_detection import check_response
from alt_checker.scanner.utils.http_client import FetchResponse, fetch_page

logger = logging.getLogger(__name__)

PageFetcher = Callable[..., Awaitable[FetchResponse]]


class StaticHTMLPass(BasePass):
    """
    Analyze the server-delivered HTML fetched with httpx, no scripts run.

    Raises TargetBlockedError / TargetTypoError / TargetUnavailableError for
    unusable responses. A successful response whose body looks like a
    challenge page is returned with ``block_signature`` set.
    """

    engine = Engine.HTML

    def __init__(
        self,
        url: str,
        analyzer: Any,
        fetcher: PageFetcher = fetch_page,
        timeout: float | None = None,
    ) -> None:
        super().__init__(url, analyzer)
        self.fetcher = fetcher
        self.timeout = timeout

    async def fetch_document(self) -> FetchedDocument:
        response = await self.fetcher(self.url, timeout=self.timeout)
        signature = check_response(response.status_code, response.text, self.url)
        if signature:
            logger.warning("Block-page signature in %d response from %s", response.status_code, self.url)
        return FetchedDocument(
            html=response.text,
            url=response.url or self.url,
            block_signature=signature,
        )
