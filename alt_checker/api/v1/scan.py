from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from alt_checker.api.deps import get_scan_service
from alt_checker.schemas.scan import ScanErrorResponse, ScanRequest, ScanResponse
from alt_checker.services.scan_service import ScanService

router = APIRouter()


@router.post(
    "",
    response_model=ScanResponse,
    response_model_exclude_none=True,
    summary="Scan a page",
    description="Extract the page's images and group them by alt-text problem. "
    "Static HTML is tried first; a headless browser is used when the page looks client-rendered.",
    responses={
        400: {"model": ScanErrorResponse, "description": "Malformed URL or client error from the target"},
        403: {"model": ScanErrorResponse, "description": "Target blocks automated access"},
        500: {"model": ScanErrorResponse, "description": "Internal or transient failure"},
    },
)
async def scan_page(
    data: ScanRequest,
    service: ScanService = Depends(get_scan_service),
):
    payload, status_code = await service.scan_payload(data.url, deep=data.deep)
    if status_code != 200:
        return JSONResponse(status_code=status_code, content=payload)
    return payload
