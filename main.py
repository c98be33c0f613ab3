"""
Credential service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.middleware import register_exception_handlers, register_middleware
from auth.routes import router as auth_router
from config.log_setup import configure_logging
from config.settings import Settings
from core.bootstrap import Services, StartupError, build_services, load_settings, start, stop

logger = logging.getLogger(__name__)


def create_app(settings: Settings, services: Optional[Services] = None) -> FastAPI:
    services = services or build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            await start(services)
            logger.info("Application ready to accept requests.")
            yield
        finally:
            await stop(services)

    app = FastAPI(
        title="Credential Service",
        version="1.0.0",
        description="User registration and token-based login.",
        lifespan=lifespan,
    )
    app.state.services = services

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router)

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        store = request.app.state.services.store
        healthy = await store.check_connection()
        return JSONResponse(
            status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "ok" if healthy else "degraded",
                "database": store.health.state.value,
            },
        )

    return app


def run() -> int:
    try:
        settings = load_settings()
    except StartupError as exc:
        logging.basicConfig(level=logging.ERROR, stream=sys.stderr)
        logger.error("%s", exc)
        return 1

    configure_logging(settings)
    app = create_app(settings)
    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=settings.host,
            port=settings.port,
            log_level="debug" if settings.debug else "info",
        )
    )
    server.run()
    # A StartupError in the lifespan aborts startup before the socket is bound.
    if not server.started:
        logger.error("Server did not start; exiting")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(run())
