from fastapi import APIRouter

from alt_checker.api.v1 import health, scan

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(scan.router, prefix="/scan", tags=["scan"])
v1_router.include_router(health.router, prefix="/health", tags=["health"])
