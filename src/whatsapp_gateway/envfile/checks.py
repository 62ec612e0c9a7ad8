"""Structural checks for gateway env files.

Unlike :func:`~whatsapp_gateway.envfile.parser.parse_env`, the checks never
stop at the first problem: every issue found in the file is reported.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from whatsapp_gateway.envfile.parser import EnvLine, LineKind, read_text, scan_lines
from whatsapp_gateway.validators import (
    LOG_LEVELS,
    NODE_ENVS,
    parse_http_url,
    parse_origin,
    parse_port,
    split_origins,
)


@dataclass(frozen=True)
class Issue:
    """A single problem found in an env file."""

    line_no: int
    message: str
    key: str | None = None

    def __str__(self) -> str:
        return f"line {self.line_no}: {self.message}"


def _check_port(value: str) -> list[str]:
    try:
        parse_port(value)
    except ValueError as exc:
        return [f"PORT: {exc}"]
    return []


def _check_origins(value: str) -> list[str]:
    origins = split_origins(value)
    if not origins:
        return ["ALLOWED_ORIGINS is empty"]

    problems: list[str] = []
    seen: set[str] = set()
    for origin in origins:
        try:
            normalised = parse_origin(origin)
        except ValueError as exc:
            problems.append(f"ALLOWED_ORIGINS: {exc}")
            continue
        if normalised in seen:
            problems.append(f"ALLOWED_ORIGINS lists {origin!r} more than once")
        seen.add(normalised)
    return problems


def _choice(key: str, allowed: tuple[str, ...]) -> Callable[[str], list[str]]:
    def check(value: str) -> list[str]:
        if value.lower() in allowed:
            return []
        return [f"{key} must be one of {', '.join(allowed)}, got {value!r}"]

    return check


def _url(key: str, *, optional: bool = False) -> Callable[[str], list[str]]:
    def check(value: str) -> list[str]:
        if not value:
            return [] if optional else [f"{key} is empty"]
        try:
            parse_http_url(value)
        except ValueError as exc:
            return [f"{key}: {exc}"]
        return []

    return check


_VALUE_CHECKS: dict[str, Callable[[str], list[str]]] = {
    "NODE_ENV": _choice("NODE_ENV", NODE_ENVS),
    "PORT": _check_port,
    "FLASK_APP_URL": _url("FLASK_APP_URL"),
    "FLASK_APP_URL_PRODUCTION": _url("FLASK_APP_URL_PRODUCTION", optional=True),
    "ALLOWED_ORIGINS": _check_origins,
    "WHATSAPP_LOG_LEVEL": _choice("WHATSAPP_LOG_LEVEL", LOG_LEVELS),
}


def _check_literal(key: str, value: str) -> list[str]:
    """Values the settings loader (python-dotenv) would read differently."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return [f"{key} is quoted; quotes are literal in this format but stripped when settings load"]
    if " #" in value:
        return [f"{key} contains ' #'; settings loading treats the rest as a comment"]
    return []


def _check_entry(line: EnvLine) -> list[Issue]:
    messages = _check_literal(line.key, line.value)
    check = _VALUE_CHECKS.get(line.key)
    if check is not None:
        messages.extend(check(line.value))
    return [Issue(line.line_no, message, line.key) for message in messages]


def check_env(text: str) -> list[Issue]:
    """Return every issue found in *text*; an empty list means the file is valid."""
    issues: list[Issue] = []
    first_seen: dict[str, int] = {}

    for line in scan_lines(text):
        if line.kind is LineKind.MALFORMED:
            issues.append(
                Issue(line.line_no, f"expected KEY=value, got {line.raw.strip()!r}")
            )
            continue
        if line.kind is not LineKind.ENTRY:
            continue

        if line.key in first_seen:
            issues.append(
                Issue(
                    line.line_no,
                    f"duplicate key {line.key} (first defined on line {first_seen[line.key]})",
                    line.key,
                )
            )
            continue
        first_seen[line.key] = line.line_no
        issues.extend(_check_entry(line))

    return issues


def check_env_file(path: str | Path) -> list[Issue]:
    """Read *path* and run :func:`check_env` over it.

    A missing file raises :class:`~whatsapp_gateway.envfile.parser.EnvFileError`.
    """
    return check_env(read_text(path))
