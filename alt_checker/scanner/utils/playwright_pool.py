from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from playwright.async_api import Page, Route, async_playwright

from alt_checker.config import settings
from alt_checker.scanner.base import DeviceProfile, RenderAttempt

logger = logging.getLogger(__name__)

# The DOM is all we read; pixels, styles and fonts are never needed
BLOCKED_RESOURCE_TYPES = frozenset({"image", "stylesheet", "font", "media"})

_DESKTOP_VIEWPORT = {"width": 1920, "height": 1080}
_MOBILE_VIEWPORT = {"width": 390, "height": 844}

_LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
    "--disable-setuid-sandbox",
]

_context_semaphore = asyncio.Semaphore(settings.PLAYWRIGHT_MAX_CONTEXTS)


def _route_blocker(blocked: frozenset[str]):
    async def handle(route: Route) -> None:
        if route.request.resource_type in blocked:
            await route.abort()
        else:
            await route.continue_()

    return handle


@asynccontextmanager
async def open_page(
    attempt: RenderAttempt,
    blocked_resource_types: frozenset[str] = BLOCKED_RESOURCE_TYPES,
) -> AsyncGenerator[Page, None]:
    """Launch a fresh browser for one rendering attempt and yield its page.

    The browser is closed on every exit path, including timeouts and
    cancellation. Concurrent launches are capped at PLAYWRIGHT_MAX_CONTEXTS.
    """
    mobile = attempt.device_profile is DeviceProfile.MOBILE
    async with _context_semaphore:
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(headless=True, args=_LAUNCH_ARGS)
            logger.info(
                "Playwright browser launched (%s, scripts %s)",
                attempt.device_profile.value,
                "on" if attempt.scripts_enabled else "off",
            )
            try:
                context = await browser.new_context(
                    user_agent=attempt.user_agent,
                    viewport=_MOBILE_VIEWPORT if mobile else _DESKTOP_VIEWPORT,
                    is_mobile=mobile,
                    has_touch=mobile,
                    java_script_enabled=attempt.scripts_enabled,
                    extra_http_headers={"Accept-Language": settings.ACCEPT_LANGUAGE},
                )
                # Inject script to hide webdriver property
                await context.add_init_script("""
                    Object.defineProperty(navigator, 'webdriver', {
                        get: () => undefined
                    });
                """)
                await context.route("**/*", _route_blocker(blocked_resource_types))
                page = await context.new_page()
                yield page
            finally:
                await browser.close()
                logger.info("Playwright browser closed")
