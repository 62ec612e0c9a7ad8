"""FastAPI application factory."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from whatsapp_gateway.api.health import SERVICE_NAME, router as health_router
from whatsapp_gateway.config import Settings, get_settings
from whatsapp_gateway.services.bootstrap import prepare_directories

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization", "X-Requested-With", "Accept", "Origin"]


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the gateway app for *app_settings* (the process settings by default)."""
    app_settings = app_settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup / shutdown lifecycle hook."""
        logger.info(
            "Starting %s on port %s (%s) …",
            SERVICE_NAME,
            app_settings.port,
            app_settings.node_env,
        )
        prepare_directories(app_settings)
        app.state.started_at = time.monotonic()
        yield
        logger.info("Shutting down %s …", SERVICE_NAME)

    app = FastAPI(
        title="WhatsApp Gateway",
        description="WhatsApp gateway service paired with a Flask web backend",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    # Replaced when the lifespan starts
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(app_settings.allowed_origins),
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        expose_headers=["Content-Type"],
    )
    app.include_router(health_router)
    return app
