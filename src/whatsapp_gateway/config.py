"""WhatsApp Gateway — configuration loaded from environment."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

from whatsapp_gateway.logging_config import resolve_level
from whatsapp_gateway.validators import (
    LogLevel,
    NodeEnv,
    parse_http_url,
    parse_origin,
    split_origins,
)

MEDIA_KINDS = ("images", "audios", "videos", "documents")


class Settings(BaseSettings):
    """Gateway settings, loaded from .env or environment variables.

    Read once at startup; instances are frozen.
    """

    # ── Server ────────────────────────────────────────────
    node_env: NodeEnv = "development"
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)

    # ── Flask companion ───────────────────────────────────
    flask_app_url: str = "http://localhost:5000"
    flask_app_url_production: str | None = None

    # ── CORS ──────────────────────────────────────────────
    allowed_origins: Annotated[list[str], NoDecode] = ["http://localhost:5000"]

    # ── WhatsApp ──────────────────────────────────────────
    whatsapp_session_dir: Path = Path("auth_info")
    whatsapp_log_level: LogLevel = "info"
    whatsapp_upload_dir: Path = Path("static/uploads/whatsapp")
    whatsapp_log_dir: Path = Path("logs")
    whatsapp_reconnect_attempts: int = Field(default=5, ge=0)
    whatsapp_reconnect_delay_ms: int = Field(default=5000, gt=0)
    whatsapp_browser_name: str = "WhatsApp-MultiTenant"
    whatsapp_browser_version: str = "1.0.0"

    # ── Rate limiting ─────────────────────────────────────
    rate_limit_window_ms: int = Field(default=15 * 60 * 1000, gt=0)
    rate_limit_max_requests: int = Field(default=100, gt=0)

    # ── Timeouts ──────────────────────────────────────────
    timeout_qr_code_ms: int = Field(default=10_000, gt=0)
    timeout_message_send_ms: int = Field(default=30_000, gt=0)
    timeout_webhook_ms: int = Field(default=10_000, gt=0)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "frozen": True,
    }

    @field_validator("node_env", "whatsapp_log_level", mode="before")
    @classmethod
    def _lowercase(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("flask_app_url")
    @classmethod
    def _check_flask_url(cls, value: str) -> str:
        return parse_http_url(value)

    @field_validator("flask_app_url_production", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("flask_app_url_production")
    @classmethod
    def _check_production_url(cls, value: str | None) -> str | None:
        return parse_http_url(value) if value is not None else None

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return split_origins(value)
        return value

    @field_validator("allowed_origins")
    @classmethod
    def _check_origins(cls, value: list[str]) -> list[str]:
        origins: list[str] = []
        for origin in value:
            origin = parse_origin(origin)
            if origin not in origins:
                origins.append(origin)
        return origins

    # ── Derived values ────────────────────────────────────

    @property
    def is_production(self) -> bool:
        return self.node_env == "production"

    @property
    def flask_url(self) -> str:
        """Companion URL for the current environment.

        Production prefers ``FLASK_APP_URL_PRODUCTION`` and falls back to
        ``FLASK_APP_URL``; development always uses ``FLASK_APP_URL``.
        """
        if self.is_production and self.flask_app_url_production:
            return self.flask_app_url_production
        return self.flask_app_url

    @property
    def python_log_level(self) -> int:
        return resolve_level(self.whatsapp_log_level)

    @property
    def webhook_timeout(self) -> float:
        """Webhook timeout in seconds."""
        return self.timeout_webhook_ms / 1000

    def media_dirs(self) -> list[Path]:
        return [self.whatsapp_upload_dir / kind for kind in MEDIA_KINDS]

    def public_summary(self) -> dict[str, Any]:
        """Effective settings, safe to print or log."""
        return {
            "environment": self.node_env,
            "host": self.host,
            "port": self.port,
            "flask_url": self.flask_url,
            "allowed_origins": list(self.allowed_origins),
            "session_dir": str(self.whatsapp_session_dir),
            "upload_dir": str(self.whatsapp_upload_dir),
            "log_dir": str(self.whatsapp_log_dir),
            "log_level": self.whatsapp_log_level,
        }


def load_settings(env_file: str | Path | None = None) -> Settings:
    """Build a fresh ``Settings``; *env_file* replaces the default ``.env``."""
    if env_file is None:
        return Settings()
    return Settings(_env_file=env_file)


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings instance, created on first use."""
    return load_settings()
