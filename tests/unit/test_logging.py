from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from support import RenderStub

from livekit_render_mcp.application.registry import ToolDispatcher
from livekit_render_mcp.application.tools import build_tool_registry
from livekit_render_mcp.config.settings import LOG_FORMAT_JSON, LOG_FORMAT_TEXT, LoggingSettings
from livekit_render_mcp.domain.documents import DocumentReader
from livekit_render_mcp.infrastructure.logging import (
    configure_logging,
    get_logger,
    log_event,
    log_remote_event,
    log_tool_event,
    request_context,
)
from livekit_render_mcp.integrations.render.client import RenderClient


def _settings(fmt: str, *, level: int = logging.INFO, file_path: str | None = None) -> LoggingSettings:
    return LoggingSettings(
        level=level,
        format=fmt,
        file_path=file_path,
        max_bytes=1024,
        backup_count=1,
    )


def test_text_logging_renders_structured_fields(capfd: pytest.CaptureFixture[str]) -> None:
    configure_logging(_settings(LOG_FORMAT_TEXT))
    capfd.readouterr()

    get_logger("livekit_render_mcp.test.text").info("structured event", component="startup")

    captured = capfd.readouterr()
    assert captured.out == ""
    assert "structured event" in captured.err
    assert "component=startup" in captured.err


def test_json_logging_emits_valid_payload(capfd: pytest.CaptureFixture[str]) -> None:
    configure_logging(_settings(LOG_FORMAT_JSON))
    capfd.readouterr()

    get_logger("livekit_render_mcp.test.json").info("json event", action="configure")

    payload = json.loads(capfd.readouterr().err)
    assert payload["event"] == "json event"
    assert payload["action"] == "configure"
    assert payload["logger"] == "livekit_render_mcp.test.json"
    assert payload["level"] == "info"


def test_request_context_binds_fields_until_exit(capfd: pytest.CaptureFixture[str]) -> None:
    configure_logging(_settings(LOG_FORMAT_JSON))
    capfd.readouterr()
    logger = get_logger("livekit_render_mcp.test.context")

    with request_context("req-123", tool="get_service", session=None) as request_id:
        logger.info("inside")
    logger.info("outside")

    inside, outside = (json.loads(line) for line in capfd.readouterr().err.strip().splitlines())
    assert request_id == "req-123"
    assert inside["request_id"] == "req-123"
    assert inside["tool"] == "get_service"
    assert "session" not in inside
    assert "request_id" not in outside


def test_request_context_generates_request_id() -> None:
    with request_context() as first, request_context() as second:
        assert first
        assert second
        assert first != second


@pytest.mark.asyncio
async def test_remote_events_share_the_dispatcher_request_id(
    capfd: pytest.CaptureFixture[str],
    render_stub: RenderStub,
    render_client: RenderClient,
    reader: DocumentReader,
) -> None:
    render_stub.add("GET", "/services", json=[])
    dispatcher = ToolDispatcher(build_tool_registry(render_client, reader))
    configure_logging(_settings(LOG_FORMAT_JSON, level=logging.DEBUG))
    capfd.readouterr()

    await dispatcher.dispatch("list_services", {}, request_id="req-42")

    events = [json.loads(line) for line in capfd.readouterr().err.strip().splitlines()]
    by_name = {event["event"]: event for event in events}
    assert {"tool.start", "render_api.request", "render_api.response", "tool.success"} <= set(by_name)
    assert {event["request_id"] for event in events} == {"req-42"}
    assert by_name["render_api.response"]["tool"] == "list_services"


def test_tool_and_remote_events_are_namespaced(capfd: pytest.CaptureFixture[str]) -> None:
    configure_logging(_settings(LOG_FORMAT_JSON, level=logging.DEBUG))
    capfd.readouterr()
    logger = get_logger("livekit_render_mcp.test.events")

    log_tool_event(logger, "success", tool="list_services", request_id="req-1")
    log_remote_event(logger, "request", method="GET", endpoint="/services")

    first, second = (json.loads(line) for line in capfd.readouterr().err.strip().splitlines())
    assert first["event"] == "tool.success"
    assert first["tool"] == "list_services"
    assert second["event"] == "render_api.request"
    assert second["endpoint"] == "/services"
    assert second["level"] == "debug"


def test_log_event_drops_none_fields(capfd: pytest.CaptureFixture[str]) -> None:
    configure_logging(_settings(LOG_FORMAT_JSON))
    capfd.readouterr()

    log_event(get_logger("livekit_render_mcp.test.none"), "diagnosis.step", step="logs", error=None)

    payload = json.loads(capfd.readouterr().err)
    assert payload["step"] == "logs"
    assert "error" not in payload


def test_rotating_file_handler_receives_records(tmp_path: Path) -> None:
    log_path = tmp_path / "server.log"
    configure_logging(_settings(LOG_FORMAT_JSON, file_path=str(log_path)))

    get_logger("livekit_render_mcp.test.file").warning("to file", sink="rotating")
    for handler in logging.getLogger().handlers:
        handler.flush()

    payload = json.loads(log_path.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert payload["event"] == "to file"
    assert payload["sink"] == "rotating"
