from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from alt_checker.scanner.base import BasePass, Engine, FetchedDocument, RenderAttempt
from alt_checker.scanner.policies import RenderStrategyPolicy
from alt_checker.scanner.utils.image_extractor import IMAGE_SELECTOR
from alt_checker.scanner.utils.playwright_pool import open_page

logger = logging.getLogger(__name__)

PageFactory = Callable[[RenderAttempt], AbstractAsyncContextManager[Any]]

# Errors that count as "the page did not load in time"
NAVIGATION_TIMEOUTS: tuple[type[BaseException], ...] = (PlaywrightTimeoutError, asyncio.TimeoutError)
# Errors the rendered pass may raise besides timeouts
RENDER_ERRORS: tuple[type[BaseException], ...] = (PlaywrightError,)

_COUNT_SNIPPET = "els => els.length"
_SCROLL_SNIPPET = "() => window.scrollBy(0, window.innerHeight * 0.9)"

# Blocked images never load, so copy their laid-out size into the markup
# for the tiny-image check
_STAMP_DIMENSIONS_SNIPPET = """
() => {
    for (const img of document.querySelectorAll('img')) {
        if (!img.getAttribute('width') && img.width) img.setAttribute('width', String(img.width));
        if (!img.getAttribute('height') && img.height) img.setAttribute('height', String(img.height));
    }
}
"""


class RenderedDOMPass(BasePass):
    """
    Analyze the DOM after a headless browser ran the page's scripts.

    Navigates, scrolls in viewport steps to trigger lazy loading and infinite
    scroll (stopping once a step adds too few elements), then snapshots the
    DOM and runs the same analysis as the static pass.
    """

    engine = Engine.JS_DOM

    def __init__(
        self,
        url: str,
        analyzer: Any,
        attempt: RenderAttempt,
        policy: RenderStrategyPolicy | None = None,
        page_factory: PageFactory = open_page,
    ) -> None:
        super().__init__(url, analyzer)
        self.attempt = attempt
        self.policy = policy or RenderStrategyPolicy()
        self.page_factory = page_factory

    async def _scroll(self, page: Any) -> None:
        previous = 0
        for _ in range(self.policy.scroll_steps):
            count = await page.eval_on_selector_all(IMAGE_SELECTOR, _COUNT_SNIPPET)
            if count - previous < self.policy.scroll_min_new:
                break
            previous = count
            await page.evaluate(_SCROLL_SNIPPET)
            await page.wait_for_timeout(self.policy.scroll_wait_ms)
        await page.wait_for_timeout(self.policy.settle_ms)

    async def fetch_document(self) -> FetchedDocument:
        async with self.page_factory(self.attempt) as page:
            await page.goto(
                self.url,
                wait_until="domcontentloaded",
                timeout=self.attempt.navigation_timeout_ms,
            )
            if self.attempt.scripts_enabled:
                await self._scroll(page)
            # Runs in Playwright's own script context, also when page scripts are off
            await page.evaluate(_STAMP_DIMENSIONS_SNIPPET)
            html = await page.content()
            return FetchedDocument(html=html, url=page.url or self.url)
