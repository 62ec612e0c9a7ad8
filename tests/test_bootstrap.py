"""Tests for the startup routine."""

import logging

import pytest

from whatsapp_gateway.services.bootstrap import (
    DirectoryConflictError,
    MissingEnvironmentError,
    StartupError,
    StartupReport,
    collect_environment,
    missing_variables,
    prepare_directories,
    required_variables,
    run_startup,
    verify_environment,
)


def test_collect_environment_reads_env_file(write_env):
    path = write_env("FLASK_APP_URL=http://localhost:5000\nPORT=3000\n")
    values = collect_environment(path, environ={})
    assert values == {"FLASK_APP_URL": "http://localhost:5000", "PORT": "3000"}


def test_collect_environment_process_env_wins(write_env):
    path = write_env("PORT=3000\n")
    values = collect_environment(path, environ={"PORT": "8080"})
    assert values["PORT"] == "8080"


def test_collect_environment_without_file(tmp_path):
    values = collect_environment(tmp_path / "absent.env", environ={"A": "1"})
    assert values == {"A": "1"}


def test_collect_environment_defaults_to_os_environ(monkeypatch, tmp_path):
    monkeypatch.setenv("FLASK_APP_URL", "http://from-os.example")
    values = collect_environment(tmp_path / "absent.env")
    assert values["FLASK_APP_URL"] == "http://from-os.example"


def test_required_variables_depend_on_environment(tmp_settings):
    assert required_variables(tmp_settings()) == ("FLASK_APP_URL",)
    assert required_variables(tmp_settings(node_env="production")) == (
        "FLASK_APP_URL",
        "FLASK_APP_URL_PRODUCTION",
    )


def test_blank_values_count_as_missing(tmp_settings):
    missing = missing_variables(
        {"FLASK_APP_URL": "  ", "FLASK_APP_URL_PRODUCTION": ""},
        tmp_settings(node_env="production"),
    )
    assert missing == ["FLASK_APP_URL", "FLASK_APP_URL_PRODUCTION"]


def test_verify_environment_raises(tmp_settings, caplog):
    with caplog.at_level(logging.ERROR):
        with pytest.raises(MissingEnvironmentError) as excinfo:
            verify_environment({}, tmp_settings())
    assert excinfo.value.missing == ["FLASK_APP_URL"]
    assert "FLASK_APP_URL" in str(excinfo.value)
    assert "FLASK_APP_URL" in caplog.text


def test_verify_environment_passes(tmp_settings):
    verify_environment({"FLASK_APP_URL": "http://localhost:5000"}, tmp_settings())


def test_prepare_directories_creates_everything(tmp_path, tmp_settings):
    s = tmp_settings()
    created = prepare_directories(s)

    upload = tmp_path / "static" / "uploads" / "whatsapp"
    assert created == [
        tmp_path / "auth_info",
        upload / "images",
        upload / "audios",
        upload / "videos",
        upload / "documents",
        tmp_path / "logs",
    ]
    assert all(directory.is_dir() for directory in created)


def test_prepare_directories_is_idempotent(tmp_path, tmp_settings):
    s = tmp_settings()
    (tmp_path / "logs").mkdir()
    (tmp_path / "logs" / "gateway.log").write_text("keep me")

    first = prepare_directories(s)
    second = prepare_directories(s)

    assert tmp_path / "logs" not in first
    assert second == []
    assert (tmp_path / "logs" / "gateway.log").read_text() == "keep me"


def test_run_startup_reports(tmp_settings):
    s = tmp_settings(
        node_env="production",
        flask_app_url_production="https://www.suaagenda.fun",
        port=4000,
    )
    report = run_startup(
        s,
        environ={
            "FLASK_APP_URL": "http://localhost:5000",
            "FLASK_APP_URL_PRODUCTION": "https://www.suaagenda.fun",
        },
    )
    assert isinstance(report, StartupReport)
    assert report.environment == "production"
    assert report.flask_url == "https://www.suaagenda.fun"
    assert report.port == 4000
    assert len(report.created_dirs) == 6


def test_run_startup_stops_before_creating_directories(tmp_path, tmp_settings):
    with pytest.raises(MissingEnvironmentError):
        run_startup(tmp_settings(), environ={})
    assert not (tmp_path / "auth_info").exists()


def test_prepare_directories_rejects_file_in_place_of_directory(tmp_path, tmp_settings):
    (tmp_path / "auth_info").write_text("stale session file")
    with pytest.raises(DirectoryConflictError) as excinfo:
        prepare_directories(tmp_settings())
    assert excinfo.value.path == tmp_path / "auth_info"
    assert "not a directory" in str(excinfo.value)


def test_prepare_directories_rejects_file_in_place_of_parent(tmp_path, tmp_settings):
    (tmp_path / "static").write_text("")
    with pytest.raises(DirectoryConflictError) as excinfo:
        prepare_directories(tmp_settings())
    assert excinfo.value.path == tmp_path / "static" / "uploads" / "whatsapp" / "images"


def test_directory_conflict_is_a_startup_error(tmp_path, tmp_settings):
    (tmp_path / "logs").write_text("")
    with pytest.raises(StartupError):
        run_startup(tmp_settings(), environ={"FLASK_APP_URL": "http://localhost:5000"})


def test_required_names_match_any_case(tmp_settings, write_env):
    path = write_env("flask_app_url=http://localhost:5000\n")
    environ = collect_environment(path, environ={})
    assert missing_variables(environ, tmp_settings()) == []
    assert missing_variables({"Flask_App_Url": " "}, tmp_settings()) == ["FLASK_APP_URL"]
