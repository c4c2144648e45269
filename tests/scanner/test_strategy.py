"""Tests for the static/rendered strategy selection."""
import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from alt_checker.scanner.base import Category, DeviceProfile, Engine
from alt_checker.scanner.errors import (
    RenderTimeoutError,
    TargetBlockedError,
    TargetTypoError,
)
from alt_checker.scanner.policies import RenderStrategyPolicy
from alt_checker.scanner.strategy import RenderStrategySelector

URL = "https://example.com/"


def _selector(fetcher, browser, **policy):
    return RenderStrategySelector(
        policy=RenderStrategyPolicy(**policy),
        fetcher=fetcher,
        page_factory=browser.open_page,
    )


@pytest.mark.asyncio
async def test_rich_static_page_skips_rendering(gallery, fake_fetcher, fake_browser):
    browser = fake_browser()
    result = await _selector(fake_fetcher(gallery(25)), browser).scan(URL)

    assert result.engine is Engine.HTML
    assert result.report.total_images == 25
    assert len(result.report.categories[Category.MANUAL_CHECK]) == 25
    assert not result.blocked
    assert browser.attempts == []


@pytest.mark.asyncio
async def test_low_yield_triggers_rendered_pass(gallery, fake_fetcher, fake_browser, fake_page):
    browser = fake_browser(fake_page(gallery(30)))
    result = await _selector(fake_fetcher(gallery(5)), browser).scan(URL)

    assert result.engine is Engine.JS_DOM
    assert result.report.total_images == 30
    attempt = browser.attempts[0]
    assert attempt.scripts_enabled and attempt.device_profile is DeviceProfile.DESKTOP
    assert browser.closed == 1


@pytest.mark.asyncio
async def test_placeholder_heavy_page_triggers_rendered_pass(gallery, fake_fetcher, fake_browser, fake_page):
    browser = fake_browser(fake_page(gallery(40)))
    # 100 raw, 80 spacers: exactly 80% discarded
    result = await _selector(fake_fetcher(gallery(20, tiny=80)), browser).scan(URL)

    assert result.engine is Engine.JS_DOM
    assert len(browser.attempts) == 1


@pytest.mark.asyncio
async def test_placeholder_ratio_just_below_threshold_stays_static(gallery, fake_fetcher, fake_browser):
    browser = fake_browser()
    result = await _selector(fake_fetcher(gallery(20, tiny=79)), browser).scan(URL)

    assert result.engine is Engine.HTML
    assert browser.attempts == []


@pytest.mark.asyncio
async def test_scrolls_until_growth_stalls(gallery, fake_fetcher, fake_browser, fake_page):
    page = fake_page(gallery(30), counts=[10, 20, 22])
    browser = fake_browser(page)
    await _selector(fake_fetcher(gallery(2)), browser).scan(URL)

    assert page.scrolls == 2
    assert page.goto_calls == [(URL, "domcontentloaded", 7000)]


@pytest.mark.asyncio
async def test_navigation_timeout_retries_without_scripts_on_mobile(
    gallery, fake_fetcher, fake_browser, fake_page,
):
    first = fake_page(goto_error=PlaywrightTimeoutError("Timeout 7000ms exceeded"))
    second = fake_page(gallery(30), counts=[30, 60])
    browser = fake_browser(first, second)
    result = await _selector(fake_fetcher(gallery(2)), browser).scan(URL)

    assert result.engine is Engine.JS_DOM
    assert [(a.scripts_enabled, a.device_profile) for a in browser.attempts] == [
        (True, DeviceProfile.DESKTOP),
        (False, DeviceProfile.MOBILE),
    ]
    # No scrolling without scripts
    assert second.scrolls == 0
    assert browser.closed == 2


@pytest.mark.asyncio
async def test_attempt_time_cap_counts_as_timeout(gallery, fake_fetcher, fake_browser, fake_page):
    slow = fake_page(goto_delay=5.0)
    browser = fake_browser(slow, fake_page(gallery(30)))
    result = await _selector(fake_fetcher(gallery(2)), browser, attempt_timeout=0.5).scan(URL)

    assert result.engine is Engine.JS_DOM
    assert len(browser.attempts) == 2
    assert browser.closed == 2


@pytest.mark.asyncio
async def test_other_render_errors_are_not_retried(fake_fetcher, fake_browser, fake_page):
    browser = fake_browser(fake_page(goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED")))
    selector = _selector(fake_fetcher("<html><body><p>No images</p></body></html>"), browser)

    with pytest.raises(PlaywrightError):
        await selector.scan(URL)
    assert len(browser.attempts) == 1
    assert browser.closed == 1


@pytest.mark.asyncio
async def test_render_failure_falls_back_to_static_images(gallery, fake_fetcher, fake_browser, fake_page):
    browser = fake_browser(fake_page(goto_error=PlaywrightError("Target closed")))
    result = await _selector(fake_fetcher(gallery(5)), browser).scan(URL)

    assert result.engine is Engine.HTML
    assert result.fallback
    assert result.report.total_images == 5


@pytest.mark.asyncio
async def test_all_attempts_timing_out_without_static_images(fake_fetcher, fake_browser, fake_page):
    browser = fake_browser(
        fake_page(goto_error=PlaywrightTimeoutError("Timeout")),
        fake_page(goto_error=PlaywrightTimeoutError("Timeout")),
    )
    with pytest.raises(RenderTimeoutError):
        await _selector(fake_fetcher("<p>empty</p>"), browser).scan(URL)
    assert browser.closed == 2


@pytest.mark.asyncio
async def test_no_images_anywhere_is_blocked(fake_fetcher, fake_browser, fake_page):
    browser = fake_browser(fake_page("<html><body>Please wait</body></html>"))
    with pytest.raises(TargetBlockedError):
        await _selector(fake_fetcher("<p>empty</p>"), browser).scan(URL)


@pytest.mark.asyncio
async def test_rendered_pass_with_fewer_images_flags_blocked(gallery, fake_fetcher, fake_browser, fake_page):
    browser = fake_browser(fake_page(gallery(2)))
    result = await _selector(fake_fetcher(gallery(10)), browser).scan(URL)

    assert result.engine is Engine.HTML
    assert result.blocked
    assert result.note
    assert result.report.total_images == 10


@pytest.mark.asyncio
async def test_blocked_static_fetch_tries_rendering(gallery, fake_fetcher, fake_browser, fake_page):
    browser = fake_browser(fake_page(gallery(12)))
    result = await _selector(fake_fetcher("Forbidden", status_code=403), browser).scan(URL)

    assert result.engine is Engine.JS_DOM
    assert result.report.total_images == 12


@pytest.mark.asyncio
async def test_blocked_static_fetch_without_render_fallback(fake_fetcher, fake_browser):
    browser = fake_browser()
    selector = _selector(fake_fetcher("Too many requests", status_code=429), browser, render_when_static_blocked=False)
    with pytest.raises(TargetBlockedError):
        await selector.scan(URL)
    assert browser.attempts == []


@pytest.mark.asyncio
async def test_blocked_static_and_failed_render_reports_blocked(fake_fetcher, fake_browser, fake_page):
    browser = fake_browser(fake_page(goto_error=PlaywrightError("net::ERR_CONNECTION_RESET")))
    with pytest.raises(TargetBlockedError):
        await _selector(fake_fetcher("denied", status_code=403), browser).scan(URL)


@pytest.mark.asyncio
async def test_not_found_is_a_typo(fake_fetcher, fake_browser):
    browser = fake_browser()
    with pytest.raises(TargetTypoError):
        await _selector(fake_fetcher("Not Found", status_code=404), browser).scan(URL)
    assert browser.attempts == []


@pytest.mark.asyncio
async def test_challenge_page_forces_rendering(gallery, fake_fetcher, fake_browser, fake_page):
    challenge = gallery(25).replace("<body>", "<body><h1>Please complete the CAPTCHA</h1>")
    browser = fake_browser(fake_page(gallery(25)))
    result = await _selector(fake_fetcher(challenge), browser).scan(URL)

    assert result.engine is Engine.JS_DOM
    assert len(browser.attempts) == 1


@pytest.mark.asyncio
async def test_page_loading_captcha_widget_stays_static(gallery, fake_fetcher, fake_browser):
    widget = '<script src="https://www.google.com/recaptcha/api.js"></script>'
    html = gallery(25).replace("<html>", f"<html><head>{widget}</head>")
    browser = fake_browser()
    result = await _selector(fake_fetcher(html), browser).scan(URL)

    assert result.engine is Engine.HTML
    assert not result.blocked
    assert browser.attempts == []


@pytest.mark.asyncio
async def test_request_deadline_returns_static_images_as_fallback(gallery, fake_fetcher, fake_browser, fake_page):
    browser = fake_browser(fake_page(gallery(30), goto_delay=5.0), fake_page(gallery(30)))
    selector = _selector(fake_fetcher(gallery(5)), browser, attempt_timeout=4.0, request_timeout=0.5)
    result = await selector.scan(URL)

    assert result.engine is Engine.HTML
    assert result.fallback
    assert result.report.total_images == 5
    # The in-flight attempt is abandoned, not retried
    assert len(browser.attempts) == 1
    assert browser.closed == 1


@pytest.mark.asyncio
async def test_request_deadline_without_static_images(fake_fetcher, fake_browser, fake_page):
    browser = fake_browser(fake_page(goto_delay=5.0))
    selector = _selector(fake_fetcher("<p>empty</p>"), browser, attempt_timeout=4.0, request_timeout=0.5)
    with pytest.raises(RenderTimeoutError):
        await selector.scan(URL)
    assert browser.closed == 1


@pytest.mark.asyncio
async def test_spent_request_budget_skips_rendering(gallery, fake_fetcher, fake_browser):
    browser = fake_browser()
    result = await _selector(fake_fetcher(gallery(5)), browser, request_timeout=0).scan(URL)

    assert result.fallback
    assert browser.attempts == []


@pytest.mark.asyncio
async def test_dimensions_are_stamped_without_page_scripts(gallery, fake_fetcher, fake_browser, fake_page):
    first = fake_page(goto_error=PlaywrightTimeoutError("Timeout 7000ms exceeded"))
    second = fake_page(gallery(30))
    await _selector(fake_fetcher(gallery(2)), fake_browser(first, second)).scan(URL)

    assert second.scrolls == 0
    assert any("setAttribute('width'" in expression for expression in second.evaluated)
