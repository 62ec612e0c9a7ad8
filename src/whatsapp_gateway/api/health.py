"""Health endpoints — liveness probes for the gateway process."""

from __future__ import annotations

import resource
import sys
import time
from datetime import UTC, datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel

SERVICE_NAME = "whatsapp-gateway"

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    service: str
    environment: str
    version: str
    uptime: float
    timestamp: datetime


class MemoryUsage(BaseModel):
    max_rss_bytes: int


class RenderHealthResponse(BaseModel):
    status: str
    service: str
    uptime: float
    memory: MemoryUsage
    timestamp: datetime


def _uptime(request: Request) -> float:
    return round(time.monotonic() - request.app.state.started_at, 3)


def _max_rss_bytes() -> int:
    rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is in bytes on macOS, kilobytes elsewhere
    return rss if sys.platform == "darwin" else rss * 1024


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Simple liveness probe."""
    app_settings = request.app.state.settings
    return HealthResponse(
        status="ok",
        service=SERVICE_NAME,
        environment=app_settings.node_env,
        version=request.app.version,
        uptime=_uptime(request),
        timestamp=datetime.now(UTC),
    )


@router.get("/render-health", response_model=RenderHealthResponse)
async def render_health_check(request: Request) -> RenderHealthResponse:
    """Health check for the hosting platform, with process memory."""
    return RenderHealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        uptime=_uptime(request),
        memory=MemoryUsage(max_rss_bytes=_max_rss_bytes()),
        timestamp=datetime.now(UTC),
    )
