"""Companion API — async HTTP client for the Flask web backend.

The gateway forwards WhatsApp events to the companion application at
``settings.flask_url``.  This client only answers whether that
application is reachable; it is used by ``whatsapp-gateway check --probe``.
"""

from __future__ import annotations

import logging

import httpx

from whatsapp_gateway.config import get_settings

logger = logging.getLogger(__name__)


class CompanionClient:
    """Async HTTP wrapper around the companion web application."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if base_url is None or timeout is None:
            app_settings = get_settings()
            base_url = base_url or app_settings.flask_url
            timeout = timeout if timeout is not None else app_settings.webhook_timeout
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def ping(self) -> bool:
        """Return ``True`` if the companion answers with a non-5xx status."""
        url = f"{self._base_url}/"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.get(url)
            if resp.status_code < 500:
                logger.info("Companion reachable at %s (%s)", url, resp.status_code)
                return True
            logger.error("Companion error at %s: %s %s", url, resp.status_code, resp.text)
            return False
        except httpx.HTTPError as exc:
            logger.exception("Companion request error: %s", exc)
            return False
