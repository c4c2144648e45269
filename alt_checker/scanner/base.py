from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from alt_checker.scanner.errors import ScanError

logger = logging.getLogger(__name__)

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)
MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)


class Category(str, Enum):
    """Diagnostic buckets, in display order."""

    MISSING_ALT = "Missing Alt Text"
    FILE_NAME = "File Name"
    MATCHING_NEARBY_CONTENT = "Matching Nearby Content"
    MANUAL_CHECK = "Manual Check"


class Engine(str, Enum):
    HTML = "html"
    JS_DOM = "js-dom"


class DeviceProfile(str, Enum):
    DESKTOP = "desktop"
    MOBILE = "mobile"


@dataclass
class ImageCandidate:
    """One image-like element discovered on the page."""

    src: str
    alt: str = ""
    too_small: bool = False
    tag: str = "img"
    is_duplicate_of_nearby_text: bool = False
    match_snippet: str | None = None
    advisories: list[str] = field(default_factory=list)
    # Tree handle for the proximity walk; never serialized
    node: Any = field(default=None, repr=False, compare=False)


def _empty_categories() -> dict[Category, list[ImageCandidate]]:
    return {category: [] for category in Category}


@dataclass
class CategoryReport:
    """Page-level result.

    ``total_images`` is the post-filter count (the set the categories
    partition); ``raw_count`` is everything found before filtering.
    """

    total_images: int = 0
    raw_count: int = 0
    categories: dict[Category, list[ImageCandidate]] = field(default_factory=_empty_categories)

    @property
    def placeholder_ratio(self) -> float:
        return round(1 - (self.total_images / (self.raw_count or 1)), 9)


@dataclass(frozen=True)
class RenderAttempt:
    """Configuration of a single rendering pass."""

    scripts_enabled: bool = True
    device_profile: DeviceProfile = DeviceProfile.DESKTOP
    navigation_timeout_ms: int = 7000

    @property
    def user_agent(self) -> str:
        if self.device_profile is DeviceProfile.MOBILE:
            return MOBILE_USER_AGENT
        return DESKTOP_USER_AGENT


@dataclass
class FetchedDocument:
    html: str
    url: str
    # 2xx body that still looks like a challenge page
    block_signature: bool = False


@dataclass
class PassResult:
    """Result of one static or rendered pass."""

    engine: Engine
    report: CategoryReport
    document: FetchedDocument | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None
    duration_seconds: float = 0.0


@dataclass
class ScanResult:
    """Terminal value of the strategy selector."""

    report: CategoryReport
    engine: Engine
    blocked: bool = False
    fallback: bool = False
    note: str | None = None


class BasePass(ABC):
    """Abstract base for the static and rendered passes."""

    engine: Engine

    def __init__(self, url: str, analyzer: Any) -> None:
        self.url = url
        self.analyzer = analyzer

    async def run(self) -> PassResult:
        """Orchestrate: fetch, analyze, timing and logging.

        Errors propagate; the strategy selector decides what to do with them.
        """
        started_at = datetime.now(timezone.utc)
        try:
            document = await self.fetch_document()
            report = self.analyzer.analyze(document.html, document.url)
        except ScanError as e:
            logger.info("%s pass failed for %s: %s", self.engine.value, self.url, e)
            raise
        finished_at = datetime.now(timezone.utc)
        result = PassResult(
            engine=self.engine,
            report=report,
            document=document,
            started_at=started_at,
            finished_at=finished_at,
            duration_seconds=(finished_at - started_at).total_seconds(),
        )
        logger.info(
            "%s pass for %s: %d raw, %d kept in %.1fs",
            self.engine.value, self.url, report.raw_count, report.total_images,
            result.duration_seconds,
        )
        return result

    @abstractmethod
    async def fetch_document(self) -> FetchedDocument:
        """Subclasses implement: produce the HTML snapshot to analyze."""
        ...
