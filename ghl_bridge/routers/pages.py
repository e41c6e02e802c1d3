"""Bundled single-page UI."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import FileResponse

from ..config import settings

router = APIRouter(tags=["pages"])


@router.get("/", include_in_schema=False)
async def index():
    return FileResponse(settings.static_dir / "index.html")
