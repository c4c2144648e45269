from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=BASE_DIR / ".env", env_file_encoding="utf-8")

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS (front-end origins allowed to call the scan endpoint)
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    # Static pass
    STATIC_FETCH_TIMEOUT: float = 6.0  # seconds
    STATIC_FETCH_RETRIES: int = 2
    ACCEPT_LANGUAGE: str = "en-US,en;q=0.9"

    # Strategy thresholds
    MIN_STATIC_IMAGES: int = 20  # compared against the post-filter count
    PLACEHOLDER_RATIO_THRESHOLD: float = 0.8
    RENDER_WHEN_STATIC_BLOCKED: bool = True
    SCAN_REQUEST_TIMEOUT: float = 45.0  # seconds, static pass through rendering

    # Playwright
    PLAYWRIGHT_MAX_CONTEXTS: int = 3
    RENDER_NAV_TIMEOUT_MS: int = 7000
    RENDER_FALLBACK_NAV_TIMEOUT_MS: int = 10000
    RENDER_ATTEMPT_TIMEOUT: float = 30.0  # seconds, whole attempt incl. scrolling
    RENDER_SCROLL_STEPS: int = 12
    RENDER_SCROLL_MIN_NEW: int = 5
    RENDER_SCROLL_WAIT_MS: int = 700
    RENDER_SETTLE_MS: int = 600

    # Placeholder filter
    TINY_AREA_PX: int = 9
    TINY_GIF_URI_LENGTH: int = 200
    GIF_REPEAT_LIMIT: int = 10
    SVG_REPEAT_LIMIT: int = 5

    # Proximity window: "words" or "chars"
    PROXIMITY_UNIT: str = "words"
    PROXIMITY_SIZE: int = 50
    PROXIMITY_DEEP_SIZE: int = 300

    # Classification
    STRIP_PUNCTUATION: bool = True
    FILENAME_BEFORE_DUPLICATE: bool = False
    SNIPPET_CONTEXT_CHARS: int = 50


settings = Settings()
