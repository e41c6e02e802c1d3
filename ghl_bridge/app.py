"""FastAPI application factory for the GHL bridge."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .config import BridgeSettings, settings as default_settings
from .deps import BridgeServices, build_services
from .log import configure_logging
from .routers import auth, contacts, health, pages, webhooks


def create_app(
    settings: BridgeSettings | None = None,
    services: BridgeServices | None = None,
) -> FastAPI:
    settings = settings or default_settings
    services = services or build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        await services.store.connect()
        try:
            yield
        finally:
            await services.store.disconnect()

    app = FastAPI(title=settings.app_title, lifespan=lifespan)
    app.state.services = services

    app.mount("/static", StaticFiles(directory=str(settings.static_dir)), name="static")

    app.include_router(pages.router)
    app.include_router(auth.router)
    app.include_router(contacts.router)
    app.include_router(webhooks.router)
    app.include_router(health.router)
    return app


app = create_app()
