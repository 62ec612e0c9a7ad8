"""Value validators shared by the settings model and the env-file checks."""

from __future__ import annotations

from typing import Literal, get_args
from urllib.parse import urlsplit

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

NodeEnv = Literal["development", "production"]
LogLevel = Literal["debug", "info", "warn", "error"]

NODE_ENVS: tuple[str, ...] = get_args(NodeEnv)
LOG_LEVELS: tuple[str, ...] = get_args(LogLevel)

_http_url = TypeAdapter(AnyHttpUrl)


def parse_http_url(value: str) -> str:
    """Validate an http(s) URL and return it without a trailing slash."""
    value = value.strip()
    try:
        _http_url.validate_python(value)
    except ValidationError as exc:
        raise ValueError(f"{value!r} is not a valid http(s) URL") from exc
    return value.rstrip("/")


def parse_origin(value: str) -> str:
    """Validate a CORS origin (scheme, host and optional port only).

    ``http://localhost:5000`` and ``https://example.com/`` are origins;
    anything carrying a path, query or fragment is not.
    """
    value = parse_http_url(value)
    parts = urlsplit(value)
    if not parts.hostname:
        raise ValueError(f"{value!r} has no host")
    if parts.path or parts.query or parts.fragment:
        raise ValueError(f"{value!r} is not an origin (path, query or fragment present)")
    # Raises ValueError for out-of-range ports
    parts.port
    return value


def split_origins(raw: str) -> list[str]:
    """Split a comma-separated origin list, dropping blank items."""
    return [item.strip() for item in raw.split(",") if item.strip()]


def parse_port(value: str | int) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{value!r} is not an integer") from None
    if not 1 <= port <= 65535:
        raise ValueError(f"{port} is outside 1..65535")
    return port
