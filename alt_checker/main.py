import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from scalar_fastapi import get_scalar_api_reference

from alt_checker.api.v1.router import v1_router
from alt_checker.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

TAG_METADATA = [
    {
        "name": "scan",
        "description": "Alt-text scan: extract a page's images and group them into Missing Alt Text, "
        "File Name, Matching Nearby Content and Manual Check.",
    },
    {
        "name": "health",
        "description": "Liveness check and Playwright availability.",
    },
]


async def _validate_startup() -> dict[str, str]:
    """Validate critical dependencies at startup. Returns issues dict."""
    issues: dict[str, str] = {}

    # Playwright browser (non-blocking)
    try:
        from playwright.async_api import async_playwright

        pw = await async_playwright().start()
        browser = await pw.chromium.launch(headless=True)
        await browser.close()
        await pw.stop()
        logger.info("Startup check: Playwright browser OK")
    except Exception as e:
        issues["playwright"] = str(e)
        logger.warning(
            "Startup check: Playwright unavailable: %s (rendered passes will fail)", e
        )

    return issues


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Alt-text checker starting")
    app.state.startup_issues = await _validate_startup()
    if app.state.startup_issues:
        logger.warning("Startup completed with issues: %s", list(app.state.startup_issues))
    else:
        logger.info("Application startup complete, all checks passed")

    yield

    logger.info("Application shutdown complete")


app = FastAPI(
    title="Alt-Text Checker API",
    summary="Alt-text quality diagnostics for a single web page",
    description=(
        "## Overview\n\n"
        "Finds the images on a page (`img`, `source`, inline `background-image`) and sorts them "
        "into four groups:\n\n"
        "| Group | Meaning |\n"
        "|------|------|\n"
        "| **Missing Alt Text** | No alt attribute or an empty one |\n"
        "| **File Name** | Alt text echoes the image file name |\n"
        "| **Matching Nearby Content** | Alt text repeats text right next to the image |\n"
        "| **Manual Check** | Alt text present; needs a human to judge it |\n\n"
        "Static HTML is analysed first; pages that look client-rendered get a second pass in "
        "headless Chromium.\n\n"
        "## Stack\n\n"
        "FastAPI + httpx + BeautifulSoup4 + Playwright"
    ),
    version="0.1.0",
    openapi_tags=TAG_METADATA,
    lifespan=lifespan,
    # Swagger UI at /swagger; Scalar serves /docs
    docs_url="/swagger",
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(v1_router)


@app.get("/", tags=["default"], summary="API entry", include_in_schema=False)
async def root():
    return {
        "message": "Alt-Text Checker API",
        "version": "0.1.0",
        "docs": "/docs",
        "swagger": "/swagger",
        "openapi": "/openapi.json",
    }


@app.get("/docs", include_in_schema=False)
async def scalar_html():
    return get_scalar_api_reference(
        openapi_url=app.openapi_url,
        title=app.title,
    )
