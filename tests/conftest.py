"""Shared fakes for the fetch and render capabilities."""
import asyncio
from contextlib import asynccontextmanager

import pytest

from alt_checker.scanner.utils.http_client import FetchResponse


def _gallery(count: int, tiny: int = 0, alt: str = "Hand-stitched leather bag, model {i}") -> str:
    parts = []
    for i in range(count):
        parts.append(
            f'<div class="card"><img src="/images/product-{i}.jpg" alt="{alt.format(i=i)}">'
            f"<p>In stock</p></div>"
        )
    for i in range(tiny):
        parts.append(f'<img src="/pixel-{i}.png" width="1" height="1" alt="">')
    return f"<html><body>{''.join(parts)}</body></html>"


class FakeFetcher:
    def __init__(self, html="", status_code=200, url="https://example.com/", exc=None):
        self.html = html
        self.status_code = status_code
        self.url = url
        self.exc = exc
        self.calls = []

    async def __call__(self, url, timeout=None):
        self.calls.append(url)
        if self.exc is not None:
            raise self.exc
        return FetchResponse(status_code=self.status_code, text=self.html, url=self.url or url)


class FakePage:
    def __init__(self, html="", counts=None, goto_error=None, goto_delay=0.0, url="https://example.com/"):
        self.html = html
        self.counts = list(counts or [])
        self.goto_error = goto_error
        self.goto_delay = goto_delay
        self.url = url
        self.goto_calls = []
        self.evaluated = []
        self.scrolls = 0

    async def goto(self, url, wait_until=None, timeout=None):
        self.goto_calls.append((url, wait_until, timeout))
        if self.goto_delay:
            await asyncio.sleep(self.goto_delay)
        if self.goto_error is not None:
            raise self.goto_error

    async def eval_on_selector_all(self, selector, expression):
        return self.counts.pop(0) if self.counts else 0

    async def evaluate(self, expression):
        if "scrollBy" in expression:
            self.scrolls += 1
        self.evaluated.append(expression)

    async def wait_for_timeout(self, ms):
        return None

    async def content(self):
        return self.html


class FakeBrowser:
    """Stands in for ``open_page``: one scripted page per attempt."""

    def __init__(self, *pages):
        self.pages = list(pages)
        self.attempts = []
        self.closed = 0

    @asynccontextmanager
    async def open_page(self, attempt):
        self.attempts.append(attempt)
        page = self.pages.pop(0)
        try:
            yield page
        finally:
            self.closed += 1


@pytest.fixture
def gallery():
    return _gallery


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


@pytest.fixture
def fake_page():
    return FakePage


@pytest.fixture
def fake_browser():
    return FakeBrowser
