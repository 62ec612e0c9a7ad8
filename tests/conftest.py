"""Shared fixtures — isolate every test from the caller's environment."""

from pathlib import Path

import pytest

from whatsapp_gateway.config import Settings, get_settings

ENV_EXAMPLE = Path(__file__).resolve().parent.parent / ".env.example"


@pytest.fixture
def env_example() -> Path:
    return ENV_EXAMPLE


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove every gateway variable from os.environ for the test's duration."""
    for name in Settings.model_fields:
        monkeypatch.delenv(name.upper(), raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def write_env(tmp_path):
    """Write an env file under tmp_path and return its path."""

    def _write(text: str, name: str = ".env") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def tmp_settings(tmp_path):
    """Settings whose directories all live under tmp_path."""

    def _build(**overrides) -> Settings:
        values = {
            "whatsapp_session_dir": tmp_path / "auth_info",
            "whatsapp_upload_dir": tmp_path / "static" / "uploads" / "whatsapp",
            "whatsapp_log_dir": tmp_path / "logs",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _build
