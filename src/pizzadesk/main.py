"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import auth, config, couriers, deliveries, health, neighborhoods, realtime, reports, routes
from .config import settings
from .services.realtime import get_registry

ROUTERS = (health, auth, couriers, deliveries, neighborhoods, reports, routes, realtime, config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.info(f"{settings.app_name} starting with shift policy '{settings.shift_policy}' ({settings.timezone})")
    yield
    # late fetch completions must not touch boards after shutdown
    get_registry().close_all()


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "shift_policy": settings.shift_policy,
            "timezone": settings.timezone,
            "docs": "/docs",
        }

    for module in ROUTERS:
        app.include_router(module.router, prefix=settings.api_prefix)
    return app


app = create_app()
