from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from case_messaging.infrastructure.db.session import AsyncSessionLocal

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(request: Request) -> JSONResponse:
    """Ready once PostgreSQL answers. A disabled SMS gateway is reported, not fatal."""
    gateway = getattr(request.app.state, "sms", None)
    sms_state = "enabled" if gateway is not None and gateway.enabled else "disabled"

    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:  # noqa: BLE001
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "database": str(exc), "sms": sms_state},
        )
    return JSONResponse(content={"status": "ready", "database": "ok", "sms": sms_state})
