"""Tunable policies for the scan pipeline.

Every policy has a ``from_settings`` constructor; tests build them directly.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from alt_checker.config import settings
from alt_checker.scanner.base import DeviceProfile, RenderAttempt

WORDS = "words"
CHARS = "chars"


@dataclass(frozen=True)
class WindowPolicy:
    """How much sibling text to collect on each side of an element."""

    unit: str = WORDS
    size: int = 50

    def __post_init__(self) -> None:
        if self.unit not in (WORDS, CHARS):
            raise ValueError(f"Unknown proximity unit: {self.unit}")
        if self.size < 0:
            raise ValueError("Proximity window size must be >= 0")

    @classmethod
    def from_settings(cls, deep: bool = False) -> WindowPolicy:
        if deep:
            return cls(unit=WORDS, size=settings.PROXIMITY_DEEP_SIZE)
        return cls(unit=settings.PROXIMITY_UNIT, size=settings.PROXIMITY_SIZE)


DEFAULT_WINDOW = WindowPolicy(WORDS, 50)
CHAR_WINDOW = WindowPolicy(CHARS, 300)


@dataclass(frozen=True)
class FilterPolicy:
    tiny_area: int = 9
    tiny_gif_uri_length: int = 200
    gif_repeat_limit: int = 10
    svg_repeat_limit: int = 5

    @classmethod
    def from_settings(cls) -> FilterPolicy:
        return cls(
            tiny_area=settings.TINY_AREA_PX,
            tiny_gif_uri_length=settings.TINY_GIF_URI_LENGTH,
            gif_repeat_limit=settings.GIF_REPEAT_LIMIT,
            svg_repeat_limit=settings.SVG_REPEAT_LIMIT,
        )


@dataclass(frozen=True)
class ClassificationRulePolicy:
    strip_punctuation: bool = True
    # Older behaviour checked the filename echo before duplicate content
    filename_first: bool = False
    snippet_context: int = 50

    @classmethod
    def from_settings(cls) -> ClassificationRulePolicy:
        return cls(
            strip_punctuation=settings.STRIP_PUNCTUATION,
            filename_first=settings.FILENAME_BEFORE_DUPLICATE,
            snippet_context=settings.SNIPPET_CONTEXT_CHARS,
        )


def _default_attempts() -> tuple[RenderAttempt, ...]:
    return (
        RenderAttempt(True, DeviceProfile.DESKTOP, 7000),
        RenderAttempt(False, DeviceProfile.MOBILE, 10000),
    )


@dataclass(frozen=True)
class RenderStrategyPolicy:
    """When to escalate to a rendered pass and how to run it."""

    min_static_images: int = 20
    placeholder_ratio: float = 0.8
    render_when_static_blocked: bool = True
    # First entry is the primary attempt, the rest are timeout fallbacks
    attempts: tuple[RenderAttempt, ...] = field(default_factory=_default_attempts)
    attempt_timeout: float = 30.0
    # Overall budget of one scan; rendering is cut off once it runs out
    request_timeout: float | None = 45.0
    scroll_steps: int = 12
    scroll_min_new: int = 5
    scroll_wait_ms: int = 700
    settle_ms: int = 600

    @classmethod
    def from_settings(cls) -> RenderStrategyPolicy:
        return cls(
            min_static_images=settings.MIN_STATIC_IMAGES,
            placeholder_ratio=settings.PLACEHOLDER_RATIO_THRESHOLD,
            render_when_static_blocked=settings.RENDER_WHEN_STATIC_BLOCKED,
            attempts=(
                RenderAttempt(True, DeviceProfile.DESKTOP, settings.RENDER_NAV_TIMEOUT_MS),
                RenderAttempt(False, DeviceProfile.MOBILE, settings.RENDER_FALLBACK_NAV_TIMEOUT_MS),
            ),
            attempt_timeout=settings.RENDER_ATTEMPT_TIMEOUT,
            request_timeout=settings.SCAN_REQUEST_TIMEOUT,
            scroll_steps=settings.RENDER_SCROLL_STEPS,
            scroll_min_new=settings.RENDER_SCROLL_MIN_NEW,
            scroll_wait_ms=settings.RENDER_SCROLL_WAIT_MS,
            settle_ms=settings.RENDER_SETTLE_MS,
        )

    def needs_render(self, raw_count: int, kept_count: int) -> bool:
        discarded = round(1 - (kept_count / (raw_count or 1)), 9)
        return discarded >= self.placeholder_ratio or kept_count < self.min_static_images
