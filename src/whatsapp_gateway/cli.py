"""Command-line interface — ``whatsapp-gateway check|show|bootstrap|serve``."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from whatsapp_gateway.envfile.checks import check_env_file
from whatsapp_gateway.envfile.parser import EnvFileError
from whatsapp_gateway.logging_config import configure_logging

if TYPE_CHECKING:
    from whatsapp_gateway.config import Settings

logger = logging.getLogger(__name__)

GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"


def _ok(message: str) -> None:
    print(f"{GREEN}✓{RESET} {message}")


def _fail(message: str) -> None:
    print(f"{RED}✗{RESET} {message}")


def _load(args: argparse.Namespace) -> Settings | None:
    """Load settings from ``args.env_file``; print errors and return ``None`` on failure."""
    from whatsapp_gateway.config import load_settings

    try:
        app_settings = load_settings(args.env_file)
    except ValidationError as exc:
        _fail(f"Invalid settings in {args.env_file}:")
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"]).upper()
            print(f"    {field}: {error['msg']}")
        return None

    configure_logging(args.log_level or app_settings.whatsapp_log_level)
    return app_settings


# ── Commands ─────────────────────────────────────────────


def cmd_check(args: argparse.Namespace) -> int:
    path = Path(args.env_file)
    try:
        issues = check_env_file(path)
    except EnvFileError as exc:
        _fail(str(exc))
        return 1

    for issue in issues:
        _fail(f"{path}:{issue}")
    if issues:
        return 1

    app_settings = _load(args)
    if app_settings is None:
        return 1
    _ok(f"{path} is valid")

    if args.probe:
        from whatsapp_gateway.services.companion_api import CompanionClient

        client = CompanionClient(app_settings.flask_url, timeout=app_settings.webhook_timeout)
        if not asyncio.run(client.ping()):
            _fail(f"Companion not reachable at {client.base_url}")
            return 1
        _ok(f"Companion reachable at {client.base_url}")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    app_settings = _load(args)
    if app_settings is None:
        return 1
    print(json.dumps(app_settings.public_summary(), indent=2))
    return 0


def _startup(args: argparse.Namespace) -> Settings | None:
    from whatsapp_gateway.services.bootstrap import (
        StartupError,
        collect_environment,
        run_startup,
    )

    app_settings = _load(args)
    if app_settings is None:
        return None
    try:
        run_startup(app_settings, collect_environment(args.env_file))
    except StartupError as exc:
        _fail(str(exc))
        return None
    return app_settings


def cmd_bootstrap(args: argparse.Namespace) -> int:
    app_settings = _startup(args)
    if app_settings is None:
        return 1
    _ok(f"Ready to serve on {app_settings.host}:{app_settings.port}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    app_settings = _startup(args)
    if app_settings is None:
        return 1

    import uvicorn

    from whatsapp_gateway.app import create_app

    uvicorn_level = app_settings.whatsapp_log_level
    if uvicorn_level == "warn":
        uvicorn_level = "warning"
    uvicorn.run(
        create_app(app_settings),
        host=app_settings.host,
        port=app_settings.port,
        log_level=uvicorn_level,
    )
    return 0


# ── Parser ───────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="whatsapp-gateway",
        description="Check, inspect and run the WhatsApp gateway configuration.",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warn", "error"],
        help="override WHATSAPP_LOG_LEVEL",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    commands = {
        "check": (cmd_check, "validate an env file and the settings it produces"),
        "show": (cmd_show, "print the effective settings as JSON"),
        "bootstrap": (cmd_bootstrap, "verify required variables and create directories"),
        "serve": (cmd_serve, "bootstrap, then run the HTTP service"),
    }
    for name, (handler, help_text) in commands.items():
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--env-file", default=".env", help="path to the env file (default: .env)")
        sub.set_defaults(handler=handler)
        if name == "check":
            sub.add_argument(
                "--probe",
                action="store_true",
                help="also check that the companion application is reachable",
            )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level or "info")
    return args.handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
