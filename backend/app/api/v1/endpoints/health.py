from __future__ import annotations

from fastapi import APIRouter

from app.core.config import settings
from app.services.employee_store import employee_store

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    services: dict[str, str] = {}

    if employee_store.initialized:
        ok = await employee_store.check_connection()
        services["employee_store"] = "ok" if ok else "error"
    else:
        services["employee_store"] = "not_configured"

    all_ok = all(v in ("ok", "not_configured") for v in services.values())

    return {
        "status": "healthy" if all_ok else "degraded",
        "version": settings.APP_VERSION,
        "services": services,
    }


@router.get("/ready")
async def readiness_probe():
    return {"ready": True}
