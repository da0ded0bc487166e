from pathlib import Path

import pytest

from updown import cli
from updown.core.config import DEFAULT_PORT, Settings


def test_settings_paths_are_absolute(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    settings = Settings(serve_dir=Path("."), output_dir=Path("."))
    assert settings.serve_dir == tmp_path.resolve()
    assert settings.output_dir.is_absolute()


def test_settings_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("UPDOWN_SERVE_DIR", str(tmp_path))
    monkeypatch.setenv("UPDOWN_OUTPUT_DIR", str(tmp_path / "out"))
    monkeypatch.setenv("UPDOWN_HOST", "127.0.0.1")
    monkeypatch.setenv("UPDOWN_PORT", "8080")
    settings = Settings.from_env()
    assert settings.serve_dir == tmp_path.resolve()
    assert settings.output_dir == (tmp_path / "out").resolve()
    assert settings.host == "127.0.0.1"
    assert settings.port == 8080


def test_settings_from_env_defaults(monkeypatch):
    for name in ["UPDOWN_SERVE_DIR", "UPDOWN_OUTPUT_DIR", "UPDOWN_HOST", "UPDOWN_PORT"]:
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env()
    assert settings.port == DEFAULT_PORT == 6600
    assert settings.host == "0.0.0.0"


def test_settings_from_env_bad_port(monkeypatch):
    monkeypatch.setenv("UPDOWN_PORT", "sixty")
    with pytest.raises(ValueError):
        Settings.from_env()


def test_cli_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    settings = cli.parse_settings([])
    assert settings.port == 6600
    assert settings.serve_dir == tmp_path.resolve()
    assert settings.output_dir == tmp_path.resolve()


def test_cli_flags(tmp_path):
    (tmp_path / "in").mkdir()
    (tmp_path / "out").mkdir()
    settings = cli.parse_settings(["-p", "32001", "-s", str(tmp_path / "in"), "-o", str(tmp_path / "out"), "--host", "::1"])
    assert settings.port == 32001
    assert settings.serve_dir == (tmp_path / "in").resolve()
    assert settings.output_dir == (tmp_path / "out").resolve()
    assert settings.host == "::1"


def test_cli_rejects_missing_directory(tmp_path):
    with pytest.raises(SystemExit):
        cli.parse_settings(["-s", str(tmp_path / "missing")])


def test_cli_main_runs_uvicorn(tmp_path, monkeypatch):
    calls = {}

    def fake_run(app, **kwargs):
        calls["app"] = app
        calls.update(kwargs)

    monkeypatch.setattr(cli.uvicorn, "run", fake_run)
    cli.main(["-p", "7000", "-s", str(tmp_path), "-o", str(tmp_path)])
    assert calls["port"] == 7000
    assert calls["host"] == "0.0.0.0"
    assert calls["log_config"] is None
    assert calls["app"].state.settings.serve_dir == tmp_path.resolve()
