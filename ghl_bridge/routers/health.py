"""Health and readiness checks for the bridge."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ..deps import BridgeServices, get_services
from ..errors import ConfigurationError

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "healthy", "service": "ghl-bridge"}


@router.get("/ready")
async def readiness_check(services: BridgeServices = Depends(get_services)):
    try:
        await services.store.ping()
    except (ConfigurationError, SQLAlchemyError):
        return JSONResponse({"status": "unavailable", "service": "ghl-bridge"}, status_code=503)
    return {"status": "ready", "service": "ghl-bridge"}
