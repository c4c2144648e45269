from fastapi import APIRouter, Request

router = APIRouter()


@router.get(
    "/",
    summary="Health check",
    description="Liveness check; also reports whether Playwright passed the startup check.",
)
async def health_check(request: Request):
    issues = getattr(request.app.state, "startup_issues", {})
    return {
        "status": "ok",
        "playwright": "unavailable" if "playwright" in issues else "ok",
    }
