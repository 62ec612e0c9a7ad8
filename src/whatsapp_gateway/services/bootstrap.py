"""Startup routine — verifies the environment and prepares working directories."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values

from whatsapp_gateway.config import Settings, get_settings

logger = logging.getLogger(__name__)

BASE_REQUIRED = ("FLASK_APP_URL",)
PRODUCTION_REQUIRED = ("FLASK_APP_URL_PRODUCTION",)


class StartupError(RuntimeError):
    """The gateway cannot start with the current environment."""


class MissingEnvironmentError(StartupError):
    """One or more required environment variables are absent or blank."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            "Missing required environment variables: " + ", ".join(self.missing)
        )


class DirectoryConflictError(StartupError):
    """A configured directory cannot be created at its path."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot create directory {path}: {reason}")


@dataclass
class StartupReport:
    """Outcome of :func:`run_startup`."""

    environment: str
    flask_url: str
    port: int
    created_dirs: list[Path] = field(default_factory=list)


def collect_environment(
    env_file: str | Path | None = ".env",
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Values from *env_file* overlaid by the process environment.

    The real environment always wins, matching how the settings are loaded.
    """
    values: dict[str, str] = {}
    if env_file is not None and Path(env_file).is_file():
        values.update(
            {key: value for key, value in dotenv_values(env_file).items() if value is not None}
        )
    values.update(os.environ if environ is None else environ)
    return values


def required_variables(app_settings: Settings) -> tuple[str, ...]:
    if app_settings.is_production:
        return BASE_REQUIRED + PRODUCTION_REQUIRED
    return BASE_REQUIRED


def _lookup(environ: Mapping[str, str], name: str) -> str | None:
    """Find *name* the way the settings do: exact match first, then any case."""
    if name in environ:
        return environ[name]
    for key, value in environ.items():
        if key.upper() == name:
            return value
    return None


def missing_variables(environ: Mapping[str, str], app_settings: Settings) -> list[str]:
    return [
        name
        for name in required_variables(app_settings)
        if not (_lookup(environ, name) or "").strip()
    ]


def verify_environment(environ: Mapping[str, str], app_settings: Settings) -> None:
    """Raise ``MissingEnvironmentError`` if any required variable is missing."""
    missing = missing_variables(environ, app_settings)
    if missing:
        for name in missing:
            logger.error("❌ Required environment variable not set: %s", name)
        raise MissingEnvironmentError(missing)
    logger.info("✅ Environment variables verified")


def prepare_directories(app_settings: Settings) -> list[Path]:
    """Create the session, media and log directories; return the ones created.

    Raises ``DirectoryConflictError`` when a path (or one of its parents)
    exists but is not a directory.
    """
    created: list[Path] = []
    for directory in (
        app_settings.whatsapp_session_dir,
        *app_settings.media_dirs(),
        app_settings.whatsapp_log_dir,
    ):
        if directory.is_dir():
            continue
        if directory.exists():
            raise DirectoryConflictError(directory, "path exists and is not a directory")
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryConflictError(directory, exc.strerror or str(exc)) from exc
        logger.info("📁 Directory created: %s", directory)
        created.append(directory)
    return created


def run_startup(
    app_settings: Settings | None = None,
    environ: Mapping[str, str] | None = None,
) -> StartupReport:
    """Verify required variables, create directories and log a summary."""
    app_settings = app_settings or get_settings()
    environ = collect_environment() if environ is None else environ

    logger.info(
        "🌍 Environment: %s",
        "production" if app_settings.is_production else "development",
    )
    verify_environment(environ, app_settings)
    created = prepare_directories(app_settings)

    logger.info("🔗 Flask URL: %s", app_settings.flask_url)
    logger.info("🌐 Port: %s", app_settings.port)
    logger.info("🔒 Allowed origins: %s", ", ".join(app_settings.allowed_origins))

    return StartupReport(
        environment=app_settings.node_env,
        flask_url=app_settings.flask_url,
        port=app_settings.port,
        created_dirs=created,
    )
