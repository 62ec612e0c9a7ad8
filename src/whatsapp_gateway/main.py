"""Uvicorn entry point: ``uvicorn whatsapp_gateway.main:app``.

Configured from the working directory's ``.env``; the CLI builds its app
through :func:`whatsapp_gateway.app.create_app` instead.
"""

from whatsapp_gateway.app import create_app
from whatsapp_gateway.config import get_settings
from whatsapp_gateway.logging_config import configure_logging

configure_logging(get_settings().whatsapp_log_level)

app = create_app()
