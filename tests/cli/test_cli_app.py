from __future__ import annotations

import importlib
from importlib import metadata
from pathlib import Path
from typing import Any

import pytest
from support import SAMPLE_RUNTIME_CONFIG, SAMPLE_TOPOLOGY
from typer.testing import CliRunner

app_mod = importlib.import_module("livekit_render_mcp.cli.app")
run_mod = importlib.import_module("livekit_render_mcp.cli.commands.run")
selftest_mod = importlib.import_module("livekit_render_mcp.cli.commands.selftest")


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("RENDER_API_KEY", raising=False)
    monkeypatch.delenv("LIVEKIT_RENDER_CONFIG", raising=False)
    (tmp_path / "render.yaml").write_text(SAMPLE_TOPOLOGY, encoding="utf-8")
    (tmp_path / "config.yaml").write_text(SAMPLE_RUNTIME_CONFIG, encoding="utf-8")
    return tmp_path


class _FakeServer:
    def __init__(self, error: BaseException | None = None) -> None:
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def run(self, **kwargs: Any) -> None:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error


def test_version_uses_metadata(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(metadata, "version", lambda name: "9.9.9")

    result = CliRunner().invoke(app_mod.app, ["version"], color=False)

    assert result.exit_code == 0
    assert result.stdout.strip() == "9.9.9"


def test_version_falls_back_to_pyproject(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _missing(name: str) -> str:
        raise metadata.PackageNotFoundError(name)

    (tmp_path / "pyproject.toml").write_text("[project]\nversion = '1.2.3'\n", encoding="utf-8")
    monkeypatch.setattr(metadata, "version", _missing)
    monkeypatch.setattr(app_mod, "PROJECT_ROOT", tmp_path)

    result = CliRunner().invoke(app_mod.app, ["version"], color=False)

    assert result.exit_code == 0
    assert result.stdout.strip() == "1.2.3"


def test_config_show_masks_api_key(workspace: Path) -> None:
    result = CliRunner().invoke(
        app_mod.app,
        ["config", "show", "--render-api-key", "rnd_supersecret", "--service-keyword", "rtc"],
        color=False,
    )

    assert result.exit_code == 0
    assert "render.api_key" in result.stdout
    assert "rnd_********" in result.stdout
    assert "supersecret" not in result.stdout
    assert "rtc" in result.stdout


def test_config_show_warns_without_api_key(workspace: Path) -> None:
    result = CliRunner().invoke(app_mod.app, ["config", "show"], color=False)

    assert result.exit_code == 0
    assert "RENDER_API_KEY is not set" in result.stdout


def test_selftest_offline_passes(workspace: Path) -> None:
    result = CliRunner().invoke(
        app_mod.app,
        ["selftest", "--offline", "--render-api-key", "rnd_key"],
        color=False,
    )

    assert result.exit_code == 0
    assert "skipped" in result.stdout
    assert "Offline prerequisites" in result.stdout


def test_selftest_fails_without_api_key(workspace: Path) -> None:
    result = CliRunner().invoke(app_mod.app, ["selftest", "--offline"], color=False)

    assert result.exit_code == 1


def test_selftest_online_failure_exits_nonzero(
    workspace: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def _unreachable(**_kwargs: Any) -> bool:
        return False

    monkeypatch.setattr(selftest_mod, "run_online_startup_checks", _unreachable)

    result = CliRunner().invoke(
        app_mod.app, ["selftest", "--render-api-key", "rnd_key"], color=False
    )

    assert result.exit_code == 1
    assert "fail" in result.stdout


def test_run_starts_http_transport(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    server = _FakeServer()
    captured: dict[str, Any] = {}

    def _create_server(settings: Any, logger: Any, **kwargs: Any) -> _FakeServer:
        captured["settings"] = settings
        return server

    monkeypatch.setattr(run_mod, "create_server", _create_server)

    result = CliRunner().invoke(
        app_mod.app,
        ["run", "--transport", "http", "--port", "9001", "--render-api-key", "rnd_key"],
        color=False,
    )

    assert result.exit_code == 0
    assert server.calls == [{"transport": "http", "host": "127.0.0.1", "port": 9001}]
    assert captured["settings"].api_key == "rnd_key"


def test_run_defaults_to_stdio_and_starts_without_api_key(
    workspace: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    server = _FakeServer()
    monkeypatch.setattr(run_mod, "create_server", lambda *args, **kwargs: server)

    result = CliRunner().invoke(app_mod.app, ["run"], color=False)

    assert result.exit_code == 0
    assert server.calls == [{"transport": "stdio"}]


def test_run_handles_keyboard_interrupt(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    server = _FakeServer(error=KeyboardInterrupt())
    monkeypatch.setattr(run_mod, "create_server", lambda *args, **kwargs: server)

    result = CliRunner().invoke(app_mod.app, ["run"], color=False)

    assert result.exit_code == 0
    assert len(server.calls) == 1


def test_run_rejects_unknown_transport(workspace: Path) -> None:
    result = CliRunner().invoke(app_mod.app, ["run", "--transport", "grpc"], color=False)

    assert result.exit_code == 2


def test_banner_helpers_return_text() -> None:
    from rich.text import Text

    assert isinstance(app_mod._banner(), Text)
    assert isinstance(app_mod._keyboard_interrupt_banner(), Text)
