"""Choose between the cheap static pass and the heavy rendered pass.

StaticPass -> Done(html)                       enough images survived filtering
StaticPass -> RenderedPass -> Done(js-dom)     static yield looks client-rendered
RenderedPass: navigation timeout -> retry once with the next, relaxed attempt
RenderedPass: request deadline reached -> abort, same as a failed render
Anything else that fails -> Failed (exception), unless the static pass
already produced images, in which case they are returned as a fallback.
"""
from __future__ import annotations

import asyncio
import logging

from alt_checker.scanner.aggregator import BLOCKED_NOTE, FALLBACK_NOTE
from alt_checker.scanner.analysis import PageAnalyzer
from alt_checker.scanner.base import Engine, PassResult, ScanResult
from alt_checker.scanner.errors import RenderTimeoutError, ScanError, TargetBlockedError
from alt_checker.scanner.policies import RenderStrategyPolicy
from alt_checker.scanner.templates.rendered_pass import (
    NAVIGATION_TIMEOUTS,
    RENDER_ERRORS,
    PageFactory,
    RenderedDOMPass,
)
from alt_checker.scanner.templates.static_pass import PageFetcher, StaticHTMLPass
from alt_checker.scanner.utils.http_client import fetch_page
from alt_checker.scanner.utils.playwright_pool import open_page

logger = logging.getLogger(__name__)


class RenderStrategySelector:
    """Runs the static pass and escalates to rendering when its yield is poor."""

    def __init__(
        self,
        analyzer: PageAnalyzer | None = None,
        policy: RenderStrategyPolicy | None = None,
        fetcher: PageFetcher = fetch_page,
        page_factory: PageFactory = open_page,
    ) -> None:
        self.analyzer = analyzer or PageAnalyzer()
        self.policy = policy or RenderStrategyPolicy()
        self.fetcher = fetcher
        self.page_factory = page_factory

    async def static_pass(self, url: str) -> PassResult:
        return await StaticHTMLPass(url, self.analyzer, fetcher=self.fetcher).run()

    async def rendered_pass(self, url: str) -> PassResult:
        """Run the rendering attempts in order; only timeouts move on to the next."""
        last_exc: BaseException | None = None
        for attempt in self.policy.attempts:
            scanner = RenderedDOMPass(
                url, self.analyzer, attempt, self.policy, page_factory=self.page_factory,
            )
            try:
                return await asyncio.wait_for(scanner.run(), timeout=self.policy.attempt_timeout)
            except NAVIGATION_TIMEOUTS as e:
                last_exc = e
                logger.warning(
                    "Rendered pass timed out for %s (%s, scripts %s): %s",
                    url,
                    attempt.device_profile.value,
                    "on" if attempt.scripts_enabled else "off",
                    str(e) or "attempt time cap reached",
                )
        raise RenderTimeoutError(f"All rendering attempts timed out for {url}") from last_exc

    async def _rendered_before_deadline(self, url: str, started: float) -> PassResult:
        if self.policy.request_timeout is None:
            return await self.rendered_pass(url)
        remaining = self.policy.request_timeout - (asyncio.get_running_loop().time() - started)
        if remaining <= 0:
            raise RenderTimeoutError(f"Request deadline reached before rendering {url}")
        try:
            return await asyncio.wait_for(self.rendered_pass(url), timeout=remaining)
        except asyncio.TimeoutError as e:
            raise RenderTimeoutError(f"Request deadline reached while rendering {url}") from e

    async def scan(self, url: str) -> ScanResult:
        started = asyncio.get_running_loop().time()
        static: PassResult | None = None
        static_block: TargetBlockedError | None = None
        try:
            static = await self.static_pass(url)
        except TargetBlockedError as e:
            if not self.policy.render_when_static_blocked:
                raise
            static_block = e
            logger.warning("Static fetch blocked for %s (%s); trying a rendered pass", url, e)

        if static is not None:
            report = static.report
            challenge = static.document is not None and static.document.block_signature
            if not challenge and not self.policy.needs_render(report.raw_count, report.total_images):
                return ScanResult(report=report, engine=Engine.HTML)
            logger.info(
                "Escalating %s to rendered pass: %d raw, %d kept, placeholder ratio %.2f%s",
                url, report.raw_count, report.total_images, report.placeholder_ratio,
                ", challenge page" if challenge else "",
            )

        try:
            rendered = await self._rendered_before_deadline(url, started)
        except (ScanError, *RENDER_ERRORS) as e:
            if static is not None and static.report.total_images > 0:
                logger.warning("Rendered pass failed for %s, returning static result: %s", url, e)
                return ScanResult(
                    report=static.report, engine=Engine.HTML, fallback=True, note=FALLBACK_NOTE,
                )
            if static_block is not None:
                raise static_block from e
            raise

        return self._choose(url, static, rendered)

    def _choose(self, url: str, static: PassResult | None, rendered: PassResult) -> ScanResult:
        rendered_count = rendered.report.total_images
        static_count = static.report.total_images if static is not None else 0

        if rendered_count == 0 and static_count == 0:
            raise TargetBlockedError(f"No images could be extracted from {url}")
        if rendered_count >= static_count:
            return ScanResult(report=rendered.report, engine=Engine.JS_DOM)

        # The browser saw less than plain HTML did: likely served a degraded page
        logger.warning(
            "Rendered pass found %d images vs %d static for %s; flagging as blocked",
            rendered_count, static_count, url,
        )
        return ScanResult(report=static.report, engine=Engine.HTML, blocked=True, note=BLOCKED_NOTE)
